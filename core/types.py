"""
Shared domain types for the Gesture Navigation system.

Centralizes enums, data classes, and type definitions used across modules
to eliminate circular imports and ensure type consistency.
"""

import time
from enum import Enum
from typing import Optional, NamedTuple
import numpy as np


# =============================================================================
# Command Types
# =============================================================================

class NavCommand(Enum):
    """Navigation commands produced by the gesture classifier.

    The value is the human-readable label published to listeners.
    """
    ADVANCE = "Advance"
    RETREAT = "Retreat"
    STOP = "Stop"
    TURN_RIGHT = "Turn right"
    TURN_LEFT = "Turn left"
    ROTATE_90_RIGHT = "90° right"
    ROTATE_90_LEFT = "90° left"
    ROTATE_360_RIGHT = "360° right"
    ROTATE_360_LEFT = "360° left"
    UNRECOGNIZED = "Unrecognized"
    NO_SIGNAL = "—"

    @property
    def label(self) -> str:
        return self.value

    @property
    def is_signal(self) -> bool:
        return self is not NavCommand.NO_SIGNAL

    @property
    def is_meaningful(self) -> bool:
        """True for commands that count as user activity."""
        return self not in (NavCommand.NO_SIGNAL, NavCommand.UNRECOGNIZED)


class Mode(Enum):
    """Power state of the recognition loop."""
    ACTIVE = "active"
    SUSPENDED = "suspended"


# =============================================================================
# Data Containers
# =============================================================================

class FingerFlags(NamedTuple):
    """Extended/retracted state of each finger for a single frame."""
    thumb: bool
    index: bool
    middle: bool
    ring: bool
    pinky: bool

    @property
    def count(self) -> int:
        return sum(1 for v in self if v)

    def describe(self) -> str:
        return (f"th={int(self.thumb)} idx={int(self.index)} mid={int(self.middle)} "
                f"ring={int(self.ring)} pinky={int(self.pinky)}")


NUM_LANDMARKS = 21


def to_pose(landmarks) -> np.ndarray:
    """Convert landmarks into a (21, 3) float array.

    Accepts an existing array, a sequence of (x, y[, z]) tuples, or
    MediaPipe-style objects exposing ``.x``, ``.y`` and ``.z``.
    """
    if isinstance(landmarks, np.ndarray):
        pose = landmarks.astype(np.float64)
    else:
        rows = []
        for lm in landmarks:
            if hasattr(lm, "x"):
                rows.append((lm.x, lm.y, getattr(lm, "z", 0.0)))
            else:
                x, y = lm[0], lm[1]
                z = lm[2] if len(lm) > 2 else 0.0
                rows.append((x, y, z))
        pose = np.array(rows, dtype=np.float64)

    if pose.ndim == 2 and pose.shape[1] == 2:
        pose = np.hstack([pose, np.zeros((pose.shape[0], 1))])
    return pose


class StepResult:
    """Result of a single pipeline step.

    Carries everything the display and the tests need to know about
    what happened to one frame.
    """

    __slots__ = (
        "frame_id", "timestamp", "mode", "hand_detected",
        "raw_command", "stable_command", "finger_flags",
        "motion_score", "emitted", "transition",
        "status", "debug", "frame",
    )

    def __init__(self, frame_id: int = 0, timestamp: Optional[float] = None):
        self.frame_id = frame_id
        self.timestamp = time.monotonic() if timestamp is None else timestamp
        self.mode: Mode = Mode.ACTIVE
        self.hand_detected = False
        self.raw_command: Optional[NavCommand] = None
        self.stable_command: NavCommand = NavCommand.NO_SIGNAL
        self.finger_flags: Optional[FingerFlags] = None
        self.motion_score: Optional[float] = None
        self.emitted = False
        self.transition: Optional[str] = None   # reason string when mode changed
        self.status: Optional[str] = None       # None = leave status unchanged
        self.debug = ""
        self.frame = None                       # BGR frame the step ran on

    def __repr__(self):
        return (f"StepResult(mode={self.mode.value}, raw={self.raw_command}, "
                f"stable={self.stable_command.label}, emitted={self.emitted})")
