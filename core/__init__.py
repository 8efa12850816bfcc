"""
Gesture Navigation core
=======================

Shared types, errors, the event bus and the per-frame navigation pipeline.
"""

__version__ = "1.0.0"
