"""
21-point hand landmark geometry for gesture classification.

All predicates work on normalized image coordinates (y grows downward)
and use only relative distances and comparisons, so results do not
change when the whole hand is translated.
"""

import logging
import numpy as np

from core.types import FingerFlags

logger = logging.getLogger(__name__)

# MediaPipe hand landmark indices
WRIST = 0
THUMB_CMC = 1
THUMB_MCP = 2
THUMB_IP = 3
THUMB_TIP = 4
INDEX_MCP = 5
INDEX_PIP = 6
INDEX_DIP = 7
INDEX_TIP = 8
MIDDLE_MCP = 9
MIDDLE_PIP = 10
MIDDLE_DIP = 11
MIDDLE_TIP = 12
RING_MCP = 13
RING_PIP = 14
RING_DIP = 15
RING_TIP = 16
PINKY_MCP = 17
PINKY_PIP = 18
PINKY_DIP = 19
PINKY_TIP = 20

# (tip, pip) pairs for the tip-above-PIP extension test
FINGER_TIP_PIP = {
    "index":  (INDEX_TIP, INDEX_PIP),
    "middle": (MIDDLE_TIP, MIDDLE_PIP),
    "ring":   (RING_TIP, RING_PIP),
    "pinky":  (PINKY_TIP, PINKY_PIP),
}

DEFAULT_THUMB_INDEX_BASE_MIN = 0.12
DEFAULT_THUMB_WRIST_MIN = 0.18


def distance(a: np.ndarray, b: np.ndarray) -> float:
    """Euclidean distance between two landmarks in the image plane."""
    return float(np.hypot(a[0] - b[0], a[1] - b[1]))


def finger_extended(landmarks: np.ndarray, tip_idx: int, pip_idx: int) -> bool:
    """A finger is extended when its tip sits above its PIP joint."""
    return bool(landmarks[tip_idx][1] < landmarks[pip_idx][1])


def thumb_extended(landmarks: np.ndarray,
                   min_from_index_base: float = DEFAULT_THUMB_INDEX_BASE_MIN,
                   min_from_wrist: float = DEFAULT_THUMB_WRIST_MIN) -> bool:
    """Thumb tip must be clear of both the index knuckle and the wrist.

    A single distance test fires on a thumb tucked across the palm.
    """
    return (distance(landmarks[THUMB_TIP], landmarks[INDEX_MCP]) > min_from_index_base
            and distance(landmarks[THUMB_TIP], landmarks[WRIST]) > min_from_wrist)


class LandmarkExtractor:
    """Extracts finger flags and geometric features from hand landmarks."""

    def __init__(self, config: dict = None):
        config = config or {}
        self._thumb_index_base_min = config.get(
            "thumb_index_base_min", DEFAULT_THUMB_INDEX_BASE_MIN)
        self._thumb_wrist_min = config.get(
            "thumb_wrist_min", DEFAULT_THUMB_WRIST_MIN)

    def get_finger_flags(self, landmarks: np.ndarray) -> FingerFlags:
        """Compute the extended/retracted flag of every finger."""
        states = {
            name: finger_extended(landmarks, tip, pip)
            for name, (tip, pip) in FINGER_TIP_PIP.items()
        }
        return FingerFlags(
            thumb=thumb_extended(landmarks, self._thumb_index_base_min, self._thumb_wrist_min),
            index=states["index"],
            middle=states["middle"],
            ring=states["ring"],
            pinky=states["pinky"],
        )

    def get_thumb_index_distance(self, landmarks: np.ndarray) -> float:
        """Distance between thumb tip and index tip (for OK sign detection)."""
        return distance(landmarks[THUMB_TIP], landmarks[INDEX_TIP])
