"""
Tests for Command Stabilizer
=============================
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.types import NavCommand
from modules.recognition.stabilizer import CommandStabilizer


class TestCommandStabilizer:
    """Test suite for CommandStabilizer."""

    @pytest.fixture
    def stabilizer(self):
        return CommandStabilizer({"stable_frames": 3})

    def test_initial_state(self, stabilizer):
        assert stabilizer.current == NavCommand.NO_SIGNAL
        assert stabilizer.last_raw is None
        assert stabilizer.repeat_count == 0

    def test_switches_on_third_frame(self, stabilizer):
        outputs = [stabilizer.update(NavCommand.RETREAT) for _ in range(5)]
        assert outputs == [
            NavCommand.NO_SIGNAL,
            NavCommand.NO_SIGNAL,
            NavCommand.RETREAT,
            NavCommand.RETREAT,
            NavCommand.RETREAT,
        ]

    def test_single_glitch_does_not_change_output(self, stabilizer):
        for _ in range(3):
            stabilizer.update(NavCommand.ADVANCE)

        assert stabilizer.update(NavCommand.UNRECOGNIZED) == NavCommand.ADVANCE
        assert stabilizer.update(NavCommand.ADVANCE) == NavCommand.ADVANCE
        assert stabilizer.repeat_count == 1

    def test_two_frames_keep_previous(self, stabilizer):
        for _ in range(3):
            stabilizer.update(NavCommand.ADVANCE)
        stabilizer.update(NavCommand.STOP)
        assert stabilizer.update(NavCommand.STOP) == NavCommand.ADVANCE
        assert stabilizer.update(NavCommand.STOP) == NavCommand.STOP

    def test_no_signal_is_debounced_too(self, stabilizer):
        for _ in range(3):
            stabilizer.update(NavCommand.TURN_LEFT)
        assert stabilizer.update(NavCommand.NO_SIGNAL) == NavCommand.TURN_LEFT
        assert stabilizer.update(NavCommand.NO_SIGNAL) == NavCommand.TURN_LEFT
        assert stabilizer.update(NavCommand.NO_SIGNAL) == NavCommand.NO_SIGNAL

    def test_reset(self, stabilizer):
        for _ in range(3):
            stabilizer.update(NavCommand.ADVANCE)
        stabilizer.reset()

        assert stabilizer.current == NavCommand.NO_SIGNAL
        assert stabilizer.last_raw is None
        assert stabilizer.update(NavCommand.ADVANCE) == NavCommand.NO_SIGNAL

    def test_repeat_count_keeps_growing(self, stabilizer):
        for _ in range(10):
            stabilizer.update(NavCommand.STOP)
        assert stabilizer.repeat_count == 10
        assert stabilizer.current == NavCommand.STOP

    def test_configurable_window(self):
        stabilizer = CommandStabilizer({"stable_frames": 1})
        assert stabilizer.update(NavCommand.STOP) == NavCommand.STOP

    def test_window_is_at_least_one(self):
        assert CommandStabilizer({"stable_frames": 0}).stable_frames == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
