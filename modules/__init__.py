"""Capture, detection, recognition, control, utility and visualization modules."""
