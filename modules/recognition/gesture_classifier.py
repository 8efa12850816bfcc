"""
Rule-based navigation gesture classifier.

Finger flags are computed once per frame, then an ordered rule table is
walked top to bottom; the first rule that matches decides the command.
The order resolves poses that satisfy more than one rule (an open palm
whose thumb happens to touch the index tip is still an open palm).

    1. open_palm        all five extended           -> ADVANCE
    2. fist             all five retracted          -> RETREAT
    3. ok_sign          thumb/index tips touching   -> STOP
    4. index_pointing   index only, sideways        -> TURN_RIGHT / TURN_LEFT
    5. thumb_pointing   thumb only, sideways        -> ROTATE_90_RIGHT / LEFT
    6. three_fingers    index+middle+ring           -> ROTATE_360_RIGHT
    7. two_fingers      index+middle                -> ROTATE_360_LEFT
    otherwise                                       -> UNRECOGNIZED
"""

import logging
from typing import Callable, List, Optional, Tuple
import numpy as np

from core.types import NavCommand, FingerFlags
from modules.detection.landmark_extractor import (
    LandmarkExtractor, THUMB_TIP, THUMB_CMC, INDEX_TIP, INDEX_MCP,
)

logger = logging.getLogger(__name__)

RIGHT = "RIGHT"
LEFT = "LEFT"

Rule = Callable[[np.ndarray, FingerFlags], Optional[NavCommand]]


class GestureClassifier:
    """Maps a single hand pose to a raw navigation command."""

    def __init__(self, config: dict = None, extractor: LandmarkExtractor = None):
        """Initialize the classifier.

        Args:
            config: Recognition config section from config.yaml
            extractor: Shared LandmarkExtractor; one is created if omitted
        """
        config = config or {}
        self._extractor = extractor or LandmarkExtractor(config)
        self._ok_distance = config.get("ok_distance", 0.06)
        self._direction_deadzone = config.get("direction_deadzone", 0.08)
        self._mirrored_view = config.get("mirrored_view", True)

        self._rules: List[Tuple[str, Rule]] = [
            ("open_palm", self._rule_open_palm),
            ("fist", self._rule_fist),
            ("ok_sign", self._rule_ok_sign),
            ("index_pointing", self._rule_index_pointing),
            ("thumb_pointing", self._rule_thumb_pointing),
            ("three_fingers", self._rule_three_fingers),
            ("two_fingers", self._rule_two_fingers),
        ]

    @property
    def rules(self) -> List[Tuple[str, Rule]]:
        """Rule table in evaluation order."""
        return list(self._rules)

    @property
    def mirrored_view(self) -> bool:
        return self._mirrored_view

    def finger_flags(self, landmarks: np.ndarray) -> FingerFlags:
        return self._extractor.get_finger_flags(landmarks)

    def classify(self, landmarks: np.ndarray, flags: FingerFlags = None) -> NavCommand:
        """Classify a hand pose.

        Args:
            landmarks: np.ndarray of shape (21, 3) with normalized coordinates
            flags: Finger flags already computed for this frame, if any

        Returns:
            The first matching NavCommand, or NavCommand.UNRECOGNIZED
        """
        if flags is None:
            flags = self._extractor.get_finger_flags(landmarks)

        for name, rule in self._rules:
            command = rule(landmarks, flags)
            if command is not None:
                logger.debug("Rule '%s' matched -> %s", name, command.label)
                return command

        return NavCommand.UNRECOGNIZED

    def direction_from_dx(self, dx: float) -> Optional[str]:
        """Horizontal direction of a displacement, or None inside the deadzone.

        The camera preview is mirrored, so the raw sign is flipped once to
        match what the operator sees.
        """
        if abs(dx) < self._direction_deadzone:
            return None
        raw = RIGHT if dx > 0 else LEFT
        if not self._mirrored_view:
            return raw
        return LEFT if raw == RIGHT else RIGHT

    # =========================================================================
    # Rules
    # =========================================================================

    @staticmethod
    def _rule_open_palm(landmarks, flags):
        if flags.count == 5:
            return NavCommand.ADVANCE
        return None

    @staticmethod
    def _rule_fist(landmarks, flags):
        if flags.count == 0:
            return NavCommand.RETREAT
        return None

    def _rule_ok_sign(self, landmarks, flags):
        close = self._extractor.get_thumb_index_distance(landmarks) < self._ok_distance
        if close and (flags.middle or flags.ring or flags.pinky):
            return NavCommand.STOP
        return None

    def _rule_index_pointing(self, landmarks, flags):
        if not flags.index or flags.thumb or flags.middle or flags.ring or flags.pinky:
            return None
        direction = self.direction_from_dx(landmarks[INDEX_TIP][0] - landmarks[INDEX_MCP][0])
        if direction == RIGHT:
            return NavCommand.TURN_RIGHT
        if direction == LEFT:
            return NavCommand.TURN_LEFT
        return None

    def _rule_thumb_pointing(self, landmarks, flags):
        if not flags.thumb or flags.index or flags.middle or flags.ring or flags.pinky:
            return None
        direction = self.direction_from_dx(landmarks[THUMB_TIP][0] - landmarks[THUMB_CMC][0])
        if direction == RIGHT:
            return NavCommand.ROTATE_90_RIGHT
        if direction == LEFT:
            return NavCommand.ROTATE_90_LEFT
        return None

    @staticmethod
    def _rule_three_fingers(landmarks, flags):
        if (flags.index and flags.middle and flags.ring
                and not flags.thumb and not flags.pinky):
            return NavCommand.ROTATE_360_RIGHT
        return None

    @staticmethod
    def _rule_two_fingers(landmarks, flags):
        if (flags.index and flags.middle
                and not flags.thumb and not flags.ring and not flags.pinky):
            return NavCommand.ROTATE_360_LEFT
        return None
