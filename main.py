#!/usr/bin/env python3
"""
Gesture Navigation - hand-gesture navigation commands from a webcam.
Main application entry point and control surface.

Architecture:
    - core.NavigationPipeline handles classify -> stabilize -> emit per frame
    - core.EventBus carries navigation commands to whoever subscribes
    - SuspensionController drops to motion-only sensing when idle
    - GestureNavigator owns the camera, the detector and the window

Usage:
    python main.py                     # Default: camera 0, preview window
    python main.py --camera 1          # Another capture device
    python main.py --no-window         # Headless, commands go to the log
    python main.py --log-level DEBUG   # Per-frame debug lines

Keys (preview window):
    q       quit
    space   suspend / resume
    s       stop / start
"""

import sys
import os
import time
import signal
import argparse
import logging
from typing import Callable, Optional

import cv2

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

from modules.utils.config import Config
from modules.utils.logger import setup_logging, CommandLogger
from modules.capture.camera_manager import CameraManager
from modules.detection.hand_detector import HandDetector
from modules.visualization.dashboard import Dashboard

from core.types import NavCommand, Mode, StepResult
from core.errors import SetupError, CameraUnavailableError
from core.events import EventBus, Events
from core.pipeline import NavigationPipeline, STATUS_READY, STATUS_RECOGNIZING, STATUS_STOPPED

logger = logging.getLogger(__name__)

STATUS_REQUESTING_CAMERA = "Requesting camera..."
STATUS_LOADING_MODEL = "Loading hand model..."

IDLE_WAIT_S = 0.03


class GestureNavigator:
    """Start/Stop/ToggleSuspend control surface around NavigationPipeline.

    The camera, hand detector and dashboard can be injected, which is how
    the tests drive the whole application without hardware.
    """

    def __init__(self, config: Config, event_bus: EventBus = None, camera=None,
                 detector=None, dashboard=None,
                 clock: Callable[[], float] = time.monotonic):
        self._config = config
        self._clock = clock
        self._running = False
        self._quit = False

        self._bus = event_bus or EventBus()

        self._camera = camera or CameraManager(config.camera)
        self._detector = detector or HandDetector(config.mediapipe)
        self._dashboard = dashboard or Dashboard(config.visualization)

        self._pipeline = NavigationPipeline.from_config(
            config, event_bus=self._bus, camera=self._camera,
            detector=self._detector, clock=clock,
        )
        self._command_logger = CommandLogger().attach(self._bus)

        self._status = STATUS_READY
        self._debug = ""

        logger.info("GestureNavigator initialized")

    # =========================================================================
    # Control surface
    # =========================================================================

    def start(self) -> bool:
        """Acquire the camera and the hand model, then begin recognition.

        Returns False (and leaves every state at its default) when setup fails.
        """
        if self._running:
            return True

        try:
            self._status = STATUS_REQUESTING_CAMERA
            if not self._camera.open():
                raise CameraUnavailableError(
                    self._camera.last_error or "camera unavailable"
                )
            self._status = STATUS_LOADING_MODEL
            self._detector.initialize()
        except SetupError as e:
            logger.error("Setup failed: %s", e)
            self._camera.stop()
            self._pipeline.clear()
            self._status = f"Error: {e}"
            self._debug = ""
            self._bus.emit(Events.SETUP_FAILED, error=str(e))
            return False

        self._pipeline.reset(self._clock())
        self._running = True
        self._status = STATUS_RECOGNIZING
        self._debug = ""
        self._bus.emit(Events.SYSTEM_STARTED)
        logger.info("Recognition started")
        return True

    def stop(self):
        """Halt recognition, release the camera and model, reset displayed state."""
        was_running = self._running
        self._running = False
        self._camera.stop()
        self._detector.close()
        self._pipeline.clear()
        self._status = STATUS_STOPPED
        self._debug = ""
        if was_running:
            self._bus.emit(Events.SYSTEM_STOPPED)
            logger.info("Recognition stopped")

    def toggle_suspend(self):
        """Manual suspend/resume. Ignored while stopped."""
        if not self._running:
            logger.debug("Toggle ignored: not running")
            return
        self._status = self._pipeline.toggle_suspend(self._clock())

    def process_frame(self) -> Optional[StepResult]:
        """Run one pipeline step if recognition is running."""
        if not self._running:
            return None
        result = self._pipeline.tick()
        if result is None:
            return None
        if result.status is not None:
            self._status = result.status
        self._debug = result.debug
        if result.debug:
            logger.debug("[%s] %s", result.mode.value, result.debug)
        return result

    def build_state(self) -> dict:
        """Snapshot of what the dashboard shows."""
        return {
            "mode": self.mode.value,
            "command": self.command.label,
            "status": self._status,
            "debug": self._debug,
            "fps": self._pipeline.performance.fps,
        }

    # =========================================================================
    # Main loop
    # =========================================================================

    def run(self, show_window: bool = True):
        """Frame loop until quit (or until stopped, when headless)."""
        window_name = self._config.get("visualization.window_name", "Gesture Navigation")
        show_window = show_window and self._config.get("visualization.enabled", True)
        show_landmarks = self._config.get("visualization.show_landmarks", True)

        while not self._quit:
            if not self._running and not show_window:
                break

            result = self.process_frame()
            if result is None:
                # No frame this round (stopped, or the camera went quiet)
                time.sleep(IDLE_WAIT_S)

            if show_window:
                if result is not None and result.frame is not None:
                    frame = result.frame.copy()
                    if show_landmarks and result.hand_detected:
                        self._detector.draw_landmarks(frame)
                    frame = self._dashboard.render(frame, self.build_state())
                    cv2.imshow(window_name, frame)
                self._handle_key(cv2.waitKey(1) & 0xFF)

        self.shutdown()

    def _handle_key(self, key: int):
        if key == ord("q"):
            self._quit = True
        elif key == ord(" "):
            self.toggle_suspend()
        elif key == ord("s"):
            if self._running:
                self.stop()
            else:
                self.start()

    def shutdown(self):
        """Clean shutdown of all modules."""
        logger.info("Shutting down...")
        self._quit = True
        self.stop()
        cv2.destroyAllWindows()

        self._pipeline.performance.print_report()
        logger.info("Commands logged: %d", self._command_logger.total_commands)
        logger.info("Shutdown complete.")

    def handle_signal(self, signum, frame):
        """Handle SIGINT/SIGTERM for graceful shutdown."""
        logger.info("Signal %d received, shutting down...", signum)
        self._quit = True

    # =========================================================================
    # State
    # =========================================================================

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def mode(self) -> Mode:
        return self._pipeline.mode

    @property
    def command(self) -> NavCommand:
        return self._pipeline.stable_command

    @property
    def status(self) -> str:
        return self._status

    @property
    def debug(self) -> str:
        return self._debug

    @property
    def event_bus(self) -> EventBus:
        return self._bus

    @property
    def pipeline(self) -> NavigationPipeline:
        return self._pipeline


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Gesture Navigation - hand-gesture navigation commands from a webcam"
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="Path to config.yaml"
    )
    parser.add_argument(
        "--camera", type=int, default=None,
        help="Camera device ID"
    )
    parser.add_argument(
        "--no-window", action="store_true",
        help="Run without the preview window"
    )
    parser.add_argument(
        "--log-level", type=str, default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override logging.level from the config"
    )
    parser.add_argument(
        "--emit-on-change", action="store_true",
        help="Publish a command only when the stable command changes"
    )
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    # Load configuration
    config = Config()
    config.load(config_path=args.config)

    # CLI overrides
    if args.camera is not None:
        config.set("camera.device_id", args.camera)
    if args.log_level:
        config.set("logging.level", args.log_level)
    if args.emit_on_change:
        config.set("emitter.emit_on_change_only", True)

    # Setup logging
    log_cfg = config.get_section("logging")
    setup_logging(
        level=log_cfg.get("level", "INFO"),
        log_file=log_cfg.get("file"),
        max_size_mb=log_cfg.get("max_size_mb", 10),
        backup_count=log_cfg.get("backup_count", 3),
    )

    logger.info("=" * 60)
    logger.info("  GESTURE NAVIGATION")
    logger.info("  Camera: %s", config.get("camera.device_id", 0))
    logger.info("  Suspend after: %d ms", config.get("suspension.suspend_after_ms", 3500))
    logger.info("=" * 60)

    app = GestureNavigator(config)

    # Register signal handlers
    signal.signal(signal.SIGINT, app.handle_signal)
    signal.signal(signal.SIGTERM, app.handle_signal)

    if not app.start():
        app.shutdown()
        return 1

    app.run(show_window=not args.no_window)
    return 0


if __name__ == "__main__":
    sys.exit(main())
