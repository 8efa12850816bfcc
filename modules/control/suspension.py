"""
Power-save suspension state machine.

    ACTIVE    -- no meaningful command for suspend_after_ms -->  SUSPENDED
    SUSPENDED -- motion score above motion_wake_threshold -->  ACTIVE
    either    -- manual toggle                            -->  the other

The controller only tracks mode and the activity timestamp; the pipeline
performs the side effects of waking (stabilizer and motion baseline
reset) when `wake()` reports a transition.
"""

import time
import logging
from typing import Callable, Optional

from core.types import Mode

logger = logging.getLogger(__name__)

REASON_INACTIVITY = "inactivity"
REASON_MOTION = "motion"
REASON_MANUAL = "manual"


class SuspensionController:
    """Tracks ACTIVE/SUSPENDED mode and the last-activity timestamp."""

    def __init__(self, config: dict = None, clock: Callable[[], float] = time.monotonic):
        config = config or {}
        self._suspend_after_s = config.get("suspend_after_ms", 3500) / 1000.0
        self._wake_threshold = float(config.get("motion_wake_threshold", 18))
        self._clock = clock

        self._mode = Mode.ACTIVE
        self._last_activity: Optional[float] = None
        self._on_change = []

    def on_mode_change(self, callback: Callable[[Mode, str], None]):
        """Register callback(mode, reason) for every transition."""
        self._on_change.append(callback)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def reset(self, now: float = None):
        """Back to ACTIVE with the inactivity window starting at `now`."""
        self._mode = Mode.ACTIVE
        self._last_activity = self._clock() if now is None else now

    def clear(self):
        """Back to ACTIVE with no activity timestamp."""
        self._mode = Mode.ACTIVE
        self._last_activity = None

    # =========================================================================
    # Transitions
    # =========================================================================

    def record_activity(self, now: float = None):
        self._last_activity = self._clock() if now is None else now

    def check_inactivity(self, now: float = None) -> bool:
        """Suspend if the inactivity window has elapsed. Returns True on transition."""
        if self._mode is not Mode.ACTIVE or self._last_activity is None:
            return False
        now = self._clock() if now is None else now
        idle = now - self._last_activity
        if idle > self._suspend_after_s:
            logger.info("No valid command for %.1fs, suspending", idle)
            self._set_mode(Mode.SUSPENDED, REASON_INACTIVITY)
            return True
        return False

    def should_wake(self, motion_score: float) -> bool:
        return self._mode is Mode.SUSPENDED and motion_score > self._wake_threshold

    def wake(self, reason: str = REASON_MOTION, now: float = None) -> bool:
        """Return to ACTIVE and restart the inactivity window.

        Refreshing the timestamp keeps the waking frame from suspending
        again before a gesture has had time to stabilize.
        """
        if self._mode is Mode.ACTIVE:
            return False
        self._last_activity = self._clock() if now is None else now
        self._set_mode(Mode.ACTIVE, reason)
        return True

    def suspend(self, reason: str = REASON_MANUAL) -> bool:
        if self._mode is Mode.SUSPENDED:
            return False
        self._set_mode(Mode.SUSPENDED, reason)
        return True

    def toggle(self, now: float = None) -> Mode:
        """Manual override: flip the mode regardless of timers or motion."""
        if self._mode is Mode.SUSPENDED:
            self.wake(REASON_MANUAL, now)
        else:
            self.suspend(REASON_MANUAL)
        return self._mode

    def _set_mode(self, mode: Mode, reason: str):
        self._mode = mode
        logger.info("Mode -> %s (%s)", mode.value.upper(), reason)
        for callback in list(self._on_change):
            callback(mode, reason)

    # =========================================================================
    # State
    # =========================================================================

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def is_suspended(self) -> bool:
        return self._mode is Mode.SUSPENDED

    @property
    def last_activity(self) -> Optional[float]:
        return self._last_activity

    @property
    def wake_threshold(self) -> float:
        return self._wake_threshold

    @property
    def suspend_after_s(self) -> float:
        return self._suspend_after_s
