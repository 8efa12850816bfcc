"""On-screen dashboard."""
