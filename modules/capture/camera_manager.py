"""
Synchronous OpenCV camera capture.

Frames are read on demand by the frame loop, one per step, so there is
no capture thread and no frame buffer to go stale.
"""

import time
import logging
import cv2

logger = logging.getLogger(__name__)

BACKENDS = {
    "auto": cv2.CAP_ANY,
    "v4l2": cv2.CAP_V4L2,
    "dshow": cv2.CAP_DSHOW,
    "msmf": cv2.CAP_MSMF,
    "gstreamer": cv2.CAP_GSTREAMER,
}


class CameraManager:
    """Opens a capture device and hands out frames one at a time."""

    def __init__(self, config: dict):
        self._device_id = config.get("device_id", 0)
        self._width = config.get("width", 640)
        self._height = config.get("height", 480)
        self._fps = config.get("fps", 30)
        self._backend = config.get("backend", "auto")
        self._buffer_size = config.get("buffer_size", 1)
        self._flip_h = config.get("flip_horizontal", False)
        self._warmup_frames = config.get("warmup_frames", 5)

        self._cap = None
        self._frame_id = 0
        self._last_error = None

    def open(self) -> bool:
        """Open the camera and make sure it actually delivers frames."""
        backend = BACKENDS.get(self._backend, cv2.CAP_ANY)

        self._cap = cv2.VideoCapture(self._device_id, backend)
        if not self._cap.isOpened():
            self._last_error = (f"camera {self._device_id} unavailable "
                                f"(backend {self._backend})")
            logger.error("Failed to open %s", self._last_error)
            self._release()
            return False

        self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, self._width)
        self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self._height)
        self._cap.set(cv2.CAP_PROP_FPS, self._fps)
        self._cap.set(cv2.CAP_PROP_BUFFERSIZE, self._buffer_size)

        actual_w = int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_h = int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        actual_fps = self._cap.get(cv2.CAP_PROP_FPS)
        if actual_w > 0 and actual_h > 0:
            self._width, self._height = actual_w, actual_h
        logger.info("Camera opened: %dx%d @ %.0f FPS", self._width, self._height, actual_fps)

        # Warmup: auto-exposure settles, and a device we may not read from
        # (permission denied, held by another process) shows up here
        got_frame = False
        for _ in range(max(1, self._warmup_frames)):
            ret, _frame = self._cap.read()
            got_frame = got_frame or ret
        if not got_frame:
            self._last_error = f"camera {self._device_id} opened but returned no frames"
            logger.error("%s (in use or permission denied?)", self._last_error)
            self._release()
            return False

        self._last_error = None
        return True

    def read_sync(self):
        """Read the next frame.

        Returns:
            tuple: (frame_id, BGR numpy array) or (None, None)
        """
        if self._cap is None:
            return None, None
        start = time.perf_counter()
        ret, frame = self._cap.read()
        if not ret or frame is None:
            logger.debug("Camera read failed after %.1fms",
                         (time.perf_counter() - start) * 1000)
            return None, None
        if self._flip_h:
            frame = cv2.flip(frame, 1)
        self._frame_id += 1
        return self._frame_id, frame

    @property
    def resolution(self) -> tuple:
        return (self._width, self._height)

    @property
    def is_open(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    @property
    def last_error(self):
        return self._last_error

    def _release(self):
        if self._cap is not None:
            self._cap.release()
            self._cap = None

    def stop(self):
        """Release the camera."""
        was_open = self._cap is not None
        self._release()
        if was_open:
            logger.info("Camera stopped")

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, *args):
        self.stop()
