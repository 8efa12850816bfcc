"""Utility modules for configuration, logging and performance."""
