"""MediaPipe hand landmark detection and landmark geometry."""
