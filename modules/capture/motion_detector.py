"""
Frame-difference motion scoring used to wake the system from suspension.

Each frame is shrunk to a small RGBA square and compared with the
previous one on a sparse byte stride (one channel of every fourth pixel
with the default stride of 16), giving the mean absolute difference on
the 0-255 scale.
"""

import logging
from typing import Optional
import cv2
import numpy as np

logger = logging.getLogger(__name__)


class MotionDetector:
    """Scores how much the scene changed since the previous call."""

    def __init__(self, config: dict = None):
        config = config or {}
        self._sample_size = int(config.get("sample_size", 128))
        self._stride = max(1, int(config.get("stride", 16)))
        self._previous: Optional[np.ndarray] = None

    def downsample(self, frame: np.ndarray) -> np.ndarray:
        """Resize to the sample square and flatten to RGBA bytes."""
        if frame.ndim == 2:
            rgba = cv2.cvtColor(frame, cv2.COLOR_GRAY2RGBA)
        elif frame.shape[2] == 4:
            rgba = cv2.cvtColor(frame, cv2.COLOR_BGRA2RGBA)
        else:
            rgba = cv2.cvtColor(frame, cv2.COLOR_BGR2RGBA)
        small = cv2.resize(rgba, (self._sample_size, self._sample_size),
                           interpolation=cv2.INTER_AREA)
        return small.reshape(-1)

    def score(self, frame: np.ndarray) -> float:
        """Mean absolute sampled difference against the stored frame.

        Returns 0.0 when there is no previous frame. The stored frame is
        always replaced by the current one.
        """
        current = self.downsample(frame)

        score = 0.0
        if self._previous is not None and self._previous.shape == current.shape:
            cur = current[::self._stride].astype(np.int16)
            prev = self._previous[::self._stride].astype(np.int16)
            score = float(np.abs(cur - prev).sum()) / cur.size

        self._previous = current
        return score

    def reset(self):
        """Discard the baseline frame."""
        self._previous = None

    @property
    def has_baseline(self) -> bool:
        return self._previous is not None

    @property
    def sample_count(self) -> int:
        return (self._sample_size * self._sample_size * 4 + self._stride - 1) // self._stride
