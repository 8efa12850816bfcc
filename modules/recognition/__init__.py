"""Gesture recognition module."""
from .gesture_classifier import GestureClassifier
from .stabilizer import CommandStabilizer

__all__ = ["GestureClassifier", "CommandStabilizer"]
