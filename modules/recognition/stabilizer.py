"""
Frame-count debouncing of raw gesture classifications.

Switching to a new command needs N consecutive identical raw frames;
keeping the current command needs none. A single misclassified frame
therefore never changes the output, while a real gesture change lands
within N frames.
"""

import logging
from typing import Optional

from core.types import NavCommand

logger = logging.getLogger(__name__)


class CommandStabilizer:
    """One-sided hysteresis over the stream of raw commands."""

    def __init__(self, config: dict = None):
        config = config or {}
        self._stable_frames = max(1, int(config.get("stable_frames", 3)))
        self._last_raw: Optional[NavCommand] = None
        self._repeat_count = 0
        self._current = NavCommand.NO_SIGNAL

    def update(self, raw: NavCommand) -> NavCommand:
        """Feed one raw command and return the stable command."""
        if raw == self._last_raw:
            self._repeat_count += 1
        else:
            self._last_raw = raw
            self._repeat_count = 1

        if self._repeat_count >= self._stable_frames and raw != self._current:
            logger.debug("Stable command: %s -> %s", self._current.label, raw.label)
            self._current = raw

        return self._current

    def reset(self):
        """Forget history; the stable command goes back to NO_SIGNAL."""
        self._last_raw = None
        self._repeat_count = 0
        self._current = NavCommand.NO_SIGNAL

    @property
    def current(self) -> NavCommand:
        return self._current

    @property
    def last_raw(self) -> Optional[NavCommand]:
        return self._last_raw

    @property
    def repeat_count(self) -> int:
        return self._repeat_count

    @property
    def stable_frames(self) -> int:
        return self._stable_frames
