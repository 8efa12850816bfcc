"""
Tests for Capture Module
=========================
"""

import pytest
import numpy as np
import cv2
import sys
from pathlib import Path
from unittest.mock import patch, MagicMock

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from modules.capture.camera_manager import CameraManager
from modules.capture.motion_detector import MotionDetector


def gray_frame(value: int, width: int = 64, height: int = 48) -> np.ndarray:
    return np.full((height, width, 3), value, dtype=np.uint8)


class TestMotionDetector:
    """Test suite for MotionDetector."""

    @pytest.fixture
    def detector(self):
        return MotionDetector({"sample_size": 128, "stride": 16})

    def test_first_frame_scores_zero(self, detector):
        assert detector.score(gray_frame(200)) == 0.0
        assert detector.has_baseline

    def test_static_scene_scores_zero(self, detector):
        detector.score(gray_frame(80))
        assert detector.score(gray_frame(80)) == 0.0

    def test_uniform_change_scores_its_magnitude(self, detector):
        detector.score(gray_frame(0))
        assert detector.score(gray_frame(100)) == pytest.approx(100.0)

    def test_score_is_symmetric(self, detector):
        detector.score(gray_frame(100))
        assert detector.score(gray_frame(40)) == pytest.approx(60.0)

    def test_baseline_always_replaced(self, detector):
        detector.score(gray_frame(0))
        detector.score(gray_frame(50))
        assert detector.score(gray_frame(50)) == 0.0

    def test_reset_discards_baseline(self, detector):
        detector.score(gray_frame(0))
        detector.reset()
        assert not detector.has_baseline
        assert detector.score(gray_frame(255)) == 0.0

    def test_small_local_change_stays_low(self, detector):
        still = gray_frame(100, 320, 240)
        moved = still.copy()
        moved[100:120, 150:170] = 110
        detector.score(still)
        assert detector.score(moved) < 18

    def test_frame_size_independent(self, detector):
        detector.score(gray_frame(0, 640, 480))
        assert detector.score(gray_frame(30, 320, 240)) == pytest.approx(30.0)

    def test_accepts_grayscale(self, detector):
        detector.score(np.zeros((48, 64), dtype=np.uint8))
        assert detector.score(np.full((48, 64), 20, dtype=np.uint8)) == pytest.approx(20.0)

    def test_downsample_shape(self, detector):
        samples = detector.downsample(gray_frame(10))
        assert samples.shape == (128 * 128 * 4,)
        assert detector.sample_count == 4096


class TestCameraManager:
    """Test suite for CameraManager."""

    @pytest.fixture
    def mock_capture(self):
        """Mock OpenCV VideoCapture."""
        with patch("modules.capture.camera_manager.cv2.VideoCapture") as mock:
            mock_cap = MagicMock()
            mock_cap.isOpened.return_value = True
            frame = np.zeros((240, 320, 3), dtype=np.uint8)
            frame[:, :10] = 255
            mock_cap.read.return_value = (True, frame)
            mock_cap.get.side_effect = lambda prop: {
                cv2.CAP_PROP_FRAME_WIDTH: 320.0,
                cv2.CAP_PROP_FRAME_HEIGHT: 240.0,
            }.get(prop, 30.0)
            mock.return_value = mock_cap
            yield mock_cap

    def test_resolution_defaults(self):
        camera = CameraManager({"width": 800, "height": 600})
        assert camera.resolution == (800, 600)
        assert not camera.is_open

    def test_open_success(self, mock_capture):
        camera = CameraManager({"warmup_frames": 2})

        assert camera.open() is True
        assert camera.is_open
        assert camera.resolution == (320, 240)
        assert camera.last_error is None

        camera.stop()
        assert not camera.is_open
        mock_capture.release.assert_called_once()

    def test_open_unavailable(self, mock_capture):
        mock_capture.isOpened.return_value = False
        camera = CameraManager({"device_id": 3})

        assert camera.open() is False
        assert "camera 3" in camera.last_error
        assert not camera.is_open

    def test_open_without_frames(self, mock_capture):
        mock_capture.read.return_value = (False, None)
        camera = CameraManager({"warmup_frames": 2})

        assert camera.open() is False
        assert "no frames" in camera.last_error

    def test_read_sync_counts_frames(self, mock_capture):
        camera = CameraManager({"warmup_frames": 1})
        camera.open()

        first_id, frame = camera.read_sync()
        second_id, _ = camera.read_sync()

        assert frame.shape == (240, 320, 3)
        assert (first_id, second_id) == (1, 2)

    def test_read_sync_flip(self, mock_capture):
        camera = CameraManager({"warmup_frames": 1, "flip_horizontal": True})
        camera.open()

        _, frame = camera.read_sync()
        assert frame[0, -1, 0] == 255
        assert frame[0, 0, 0] == 0

    def test_read_sync_when_closed(self):
        assert CameraManager({}).read_sync() == (None, None)

    def test_context_manager(self, mock_capture):
        with CameraManager({"warmup_frames": 1}) as camera:
            assert camera.is_open
        assert not camera.is_open


class TestCameraIntegration:
    """Integration tests requiring real camera (marked as slow)."""

    @pytest.mark.skip(reason="Requires physical camera")
    def test_real_camera_capture(self):
        camera = CameraManager({"warmup_frames": 5})
        try:
            if camera.open():
                frame_id, frame = camera.read_sync()
                assert frame_id == 1
                assert frame.shape[0] > 0
        finally:
            camera.stop()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
