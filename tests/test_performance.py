"""
Tests for Performance Module
=============================
"""

import pytest
import time
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from modules.utils.performance_monitor import PerformanceMonitor, STAGES


class TestPerformanceMonitor:
    """Test suite for PerformanceMonitor class."""

    @pytest.fixture
    def monitor(self):
        """Create performance monitor."""
        return PerformanceMonitor(window_size=5)

    def test_fps_calculation(self, monitor):
        """Test FPS calculation."""
        # Simulate frames at ~50 FPS
        for _ in range(6):
            time.sleep(0.02)
            monitor.tick("active")

        assert 20 < monitor.fps < 60

    def test_fps_needs_two_intervals(self, monitor):
        monitor.tick()
        assert monitor.fps == 0.0

    def test_stage_timing(self, monitor):
        """Test per-stage timing."""
        for _ in range(3):
            with monitor.measure("capture"):
                time.sleep(0.005)
            with monitor.measure("detection"):
                time.sleep(0.010)

        capture_time = monitor.get_stage_latency("capture")
        detection_time = monitor.get_stage_latency("detection")

        assert capture_time >= 4
        assert detection_time >= 9
        assert detection_time > capture_time

    def test_measure_records_on_error(self, monitor):
        with pytest.raises(ValueError):
            with monitor.measure("motion"):
                raise ValueError("boom")
        assert monitor.get_stage_latency("motion") >= 0.0
        assert len(monitor._stage_times["motion"]) == 1

    def test_unknown_stage(self, monitor):
        assert monitor.get_stage_latency("nothing") == 0.0
        with monitor.measure("custom"):
            pass
        assert "custom" in monitor.get_report()["latencies_ms"]

    def test_mode_share(self, monitor):
        for mode in ("active", "active", "active", "suspended"):
            monitor.tick(mode)
        assert monitor.frame_count == 4
        assert monitor.mode_share("active") == pytest.approx(0.75)
        assert monitor.mode_share("suspended") == pytest.approx(0.25)

    def test_report(self, monitor):
        monitor.tick("active")
        report = monitor.get_report()

        assert report["total_frames"] == 1
        assert report["mode_frames"] == {"active": 1}
        assert set(STAGES) <= set(report["latencies_ms"])

    def test_print_report(self, monitor):
        monitor.tick("suspended")
        # Should not raise
        monitor.print_report()

    def test_reset(self, monitor):
        monitor.tick("active")
        with monitor.measure("total"):
            pass
        monitor.reset()

        assert monitor.frame_count == 0
        assert monitor.mode_share("active") == 0.0
        assert monitor.total_latency_ms == 0.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
