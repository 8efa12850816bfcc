"""
Core pipeline for the gesture navigation system.

One call to `step()` processes one frame:

    ACTIVE:     pose -> GestureClassifier -> CommandStabilizer
                -> SuspensionController (activity / inactivity check)
                -> CommandEmitter
    SUSPENDED:  frame -> MotionDetector -> SuspensionController (wake check)

All state lives on the pipeline instance; whoever drives it (the camera
loop in main.py, or a test) decides when the next frame is processed.
"""

import time
import logging
from typing import Callable, Optional
import numpy as np

from core.types import NavCommand, Mode, StepResult
from core.events import EventBus, Events
from modules.recognition.gesture_classifier import GestureClassifier
from modules.recognition.stabilizer import CommandStabilizer
from modules.capture.motion_detector import MotionDetector
from modules.control.suspension import (
    SuspensionController, REASON_INACTIVITY, REASON_MOTION, REASON_MANUAL,
)
from modules.control.command_emitter import CommandEmitter
from modules.utils.performance_monitor import PerformanceMonitor

logger = logging.getLogger(__name__)

STATUS_READY = "Ready to start."
STATUS_RECOGNIZING = "Recognizing gestures..."
STATUS_INCOHERENT = "Hand detected but gesture not coherent."
STATUS_SUSPENDED_IDLE = "Suspended due to inactivity (no valid command)."
STATUS_AWAKE = "Awake: resuming recognition..."
STATUS_SUSPENDED_MANUAL = "Suspended manually."
STATUS_STOPPED = "Stopped."

DEBUG_NO_HAND = "No hand detected."


class NavigationPipeline:
    """Classification, stabilization, suspension and emission for one frame at a time."""

    def __init__(
        self,
        classifier: GestureClassifier,
        stabilizer: CommandStabilizer,
        motion_detector: MotionDetector,
        suspension: SuspensionController,
        emitter: CommandEmitter,
        event_bus: EventBus = None,
        performance_monitor: PerformanceMonitor = None,
        camera=None,
        detector=None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._classifier = classifier
        self._stabilizer = stabilizer
        self._motion = motion_detector
        self._suspension = suspension
        self._emitter = emitter
        self._bus = event_bus or EventBus()
        self._perf = performance_monitor or PerformanceMonitor()
        self._camera = camera
        self._detector = detector
        self._clock = clock

        self._frame_count = 0
        self._hand_present = False
        self._last_result: Optional[StepResult] = None

        self._suspension.on_mode_change(self._on_mode_change)

    @classmethod
    def from_config(cls, config, event_bus: EventBus = None, camera=None,
                    detector=None, clock: Callable[[], float] = time.monotonic):
        """Build a pipeline from a Config (or any object with get_section)."""
        bus = event_bus or EventBus()
        return cls(
            classifier=GestureClassifier(config.get_section("recognition")),
            stabilizer=CommandStabilizer(config.get_section("recognition")),
            motion_detector=MotionDetector(config.get_section("motion")),
            suspension=SuspensionController(config.get_section("suspension"), clock=clock),
            emitter=CommandEmitter(bus, config.get_section("emitter")),
            event_bus=bus,
            performance_monitor=PerformanceMonitor(
                window_size=config.get("performance.metrics_window", 100)
            ),
            camera=camera,
            detector=detector,
            clock=clock,
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def reset(self, now: float = None):
        """Fresh state for a new run: ACTIVE, empty history, timer started at `now`."""
        now = self._clock() if now is None else now
        self._clear_recognition_state()
        self._suspension.reset(now)
        self._frame_count = 0
        self._perf.reset()
        logger.debug("Pipeline reset at t=%.3f", now)

    def clear(self):
        """Tear down to initial defaults (no activity timestamp)."""
        self._clear_recognition_state()
        self._suspension.clear()
        self._last_result = None

    def _clear_recognition_state(self):
        self._stabilizer.reset()
        self._motion.reset()
        self._emitter.reset()
        self._hand_present = False

    def toggle_suspend(self, now: float = None) -> str:
        """Manual override. Returns the status text for the new mode."""
        now = self._clock() if now is None else now
        if self._suspension.is_suspended:
            self._wake(REASON_MANUAL, now)
            return STATUS_RECOGNIZING
        self._suspension.suspend(REASON_MANUAL)
        return STATUS_SUSPENDED_MANUAL

    def _wake(self, reason: str, now: float):
        self._suspension.wake(reason, now)
        self._clear_recognition_state()

    def _on_mode_change(self, mode: Mode, reason: str):
        self._bus.emit(Events.MODE_CHANGED, mode=mode.value, reason=reason)

    # =========================================================================
    # Per-frame processing
    # =========================================================================

    def tick(self) -> Optional[StepResult]:
        """Read one camera frame, detect a hand when ACTIVE, and run `step()`.

        Returns None when the camera produced no frame.
        """
        with self._perf.measure("capture"):
            frame_id, frame = self._camera.read_sync()
        if frame is None:
            return None

        pose = None
        if not self._suspension.is_suspended:
            with self._perf.measure("detection"):
                pose = self._detector.detect_bgr(frame)

        result = self.step(frame, pose)
        result.frame = frame
        return result

    def step(self, frame: Optional[np.ndarray], pose: Optional[np.ndarray],
             now: float = None) -> StepResult:
        """Process one frame.

        Args:
            frame: BGR frame, used for motion scoring while SUSPENDED
            pose: (21, 3) landmarks of the first detected hand, or None
            now: monotonic timestamp in seconds (defaults to the clock)
        """
        now = self._clock() if now is None else now
        self._frame_count += 1
        result = StepResult(self._frame_count, now)

        with self._perf.measure("total"):
            if self._suspension.is_suspended:
                self._step_suspended(frame, now, result)
            else:
                self._step_active(pose, now, result)

        result.mode = self._suspension.mode
        self._perf.tick(result.mode.value)
        self._last_result = result
        return result

    def _step_suspended(self, frame, now, result):
        score = 0.0
        if frame is not None:
            with self._perf.measure("motion"):
                score = self._motion.score(frame)
        result.motion_score = score
        result.debug = f"Motion: {score:.1f} (threshold {self._suspension.wake_threshold:g})"

        if self._suspension.should_wake(score):
            self._wake(REASON_MOTION, now)
            result.transition = REASON_MOTION
            result.status = STATUS_AWAKE

        result.stable_command = self._stabilizer.current

    def _step_active(self, pose, now, result):
        if pose is not None:
            with self._perf.measure("classification"):
                flags = self._classifier.finger_flags(pose)
                raw = self._classifier.classify(pose, flags)
            result.hand_detected = True
            result.finger_flags = flags
            if not self._hand_present:
                self._bus.emit(Events.HAND_DETECTED)
        else:
            raw = NavCommand.NO_SIGNAL
            if self._hand_present:
                self._bus.emit(Events.HAND_LOST)
        self._hand_present = pose is not None

        stable = self._stabilizer.update(raw)
        result.raw_command = raw
        result.stable_command = stable
        result.emitted = self._emitter.emit(stable)

        if stable.is_meaningful:
            self._suspension.record_activity(now)
            result.status = STATUS_RECOGNIZING
        elif result.hand_detected:
            result.status = STATUS_INCOHERENT

        if result.hand_detected:
            flags = result.finger_flags
            result.debug = (f"Fingers={flags.count} | {flags.describe()} | "
                            f"Raw={raw.label} | Stable={stable.label}")
        else:
            result.debug = DEBUG_NO_HAND

        if self._suspension.check_inactivity(now):
            result.transition = REASON_INACTIVITY
            result.status = STATUS_SUSPENDED_IDLE

    # =========================================================================
    # State
    # =========================================================================

    @property
    def mode(self) -> Mode:
        return self._suspension.mode

    @property
    def stable_command(self) -> NavCommand:
        return self._stabilizer.current

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def last_result(self) -> Optional[StepResult]:
        return self._last_result

    @property
    def event_bus(self) -> EventBus:
        return self._bus

    @property
    def performance(self) -> PerformanceMonitor:
        return self._perf

    @property
    def suspension(self) -> SuspensionController:
        return self._suspension

    @property
    def stabilizer(self) -> CommandStabilizer:
        return self._stabilizer

    @property
    def motion_detector(self) -> MotionDetector:
        return self._motion

    def set_sources(self, camera, detector):
        """Attach the camera and hand detector used by `tick()`."""
        self._camera = camera
        self._detector = detector
