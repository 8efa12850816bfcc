"""Camera capture and frame-difference motion scoring."""
