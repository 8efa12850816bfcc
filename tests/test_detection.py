"""
Tests for Hand Detection Module
================================

Covers the parts of HandDetector that do not need the landmark model.
"""

import pytest
import numpy as np
import sys
import urllib.error
from pathlib import Path
from unittest.mock import patch

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

pytest.importorskip("mediapipe")

from core.errors import ModelLoadError, SetupError
from modules.detection.hand_detector import HandDetector, download_model, HAND_CONNECTIONS


def fist_pose() -> np.ndarray:
    points = [(0.5, 0.8), (0.45, 0.75), (0.42, 0.70), (0.45, 0.68), (0.47, 0.65)]
    for x in (0.45, 0.50, 0.55, 0.60):
        points += [(x, 0.60), (x, 0.50), (x, 0.55), (x, 0.58)]
    return np.array([(x, y, 0.0) for x, y in points])


class TestHandDetector:
    """Test suite for HandDetector."""

    @pytest.fixture
    def detector(self, tmp_path):
        return HandDetector({"model_path": str(tmp_path / "hand_landmarker.task")})

    def test_timestamps_strictly_increase(self, detector):
        stamps = [detector._next_timestamp_ms() for _ in range(50)]
        assert all(b > a for a, b in zip(stamps, stamps[1:]))

    def test_no_pose_before_detection(self, detector):
        assert detector.last_pose is None

    def test_draw_landmarks(self, detector):
        frame = np.zeros((100, 100, 3), dtype=np.uint8)
        out = detector.draw_landmarks(frame, fist_pose())
        assert out is frame
        assert frame.any()

    def test_draw_without_pose_is_noop(self, detector):
        frame = np.zeros((10, 10, 3), dtype=np.uint8)
        detector.draw_landmarks(frame)
        assert not frame.any()

    def test_connections_cover_all_landmarks(self):
        used = {i for pair in HAND_CONNECTIONS for i in pair}
        assert used == set(range(21))

    def test_close_without_initialize(self, detector):
        # Should not raise
        detector.close()


class TestDownloadModel:
    """Test suite for download_model."""

    def test_existing_file_is_kept(self, tmp_path):
        path = tmp_path / "model.task"
        path.write_bytes(b"model")
        with patch("modules.detection.hand_detector.urllib.request.urlretrieve") as fetch:
            download_model("http://example.invalid/model.task", path)
        fetch.assert_not_called()

    def test_network_failure_is_setup_error(self, tmp_path):
        path = tmp_path / "models" / "model.task"
        with patch("modules.detection.hand_detector.urllib.request.urlretrieve",
                   side_effect=OSError("network unreachable")):
            with pytest.raises(ModelLoadError) as exc_info:
                download_model("http://example.invalid/model.task", path)
        assert isinstance(exc_info.value, SetupError)
        assert "network unreachable" in str(exc_info.value)

    def test_interrupted_download_is_retried(self, tmp_path):
        path = tmp_path / "model.task"

        def truncated(url, filename):
            Path(filename).write_bytes(b"trunc")
            raise urllib.error.ContentTooShortError("retrieval incomplete", None)

        with patch("modules.detection.hand_detector.urllib.request.urlretrieve",
                   side_effect=truncated):
            with pytest.raises(ModelLoadError):
                download_model("http://example.invalid/model.task", path)

        assert not path.exists()
        assert list(tmp_path.iterdir()) == []

        def complete(url, filename):
            Path(filename).write_bytes(b"model")

        with patch("modules.detection.hand_detector.urllib.request.urlretrieve",
                   side_effect=complete) as fetch:
            download_model("http://example.invalid/model.task", path)

        fetch.assert_called_once()
        assert path.read_bytes() == b"model"
        assert list(tmp_path.iterdir()) == [path]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
