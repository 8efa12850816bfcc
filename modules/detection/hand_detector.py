"""
MediaPipe HandLandmarker (Tasks API) wrapper.

Runs in VIDEO mode with a single hand and returns the first detected
hand as a (21, 3) numpy pose. The model file is downloaded on first use.
"""

import time
import logging
import urllib.request
from pathlib import Path
from typing import Optional
import cv2
import numpy as np

import mediapipe as mp
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from core.errors import ModelLoadError
from modules.utils.logger import log_timing

logger = logging.getLogger(__name__)

HAND_LANDMARKER_MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/hand_landmarker/"
    "hand_landmarker/float16/1/hand_landmarker.task"
)
DEFAULT_MODEL_PATH = Path(__file__).parent.parent.parent / "models" / "hand_landmarker.task"

HAND_CONNECTIONS = [
    (0, 1), (1, 2), (2, 3), (3, 4),          # Thumb
    (0, 5), (5, 6), (6, 7), (7, 8),          # Index
    (5, 9), (9, 10), (10, 11), (11, 12),     # Middle
    (9, 13), (13, 14), (14, 15), (15, 16),   # Ring
    (13, 17), (17, 18), (18, 19), (19, 20),  # Pinky
    (0, 17),                                 # Palm base
]


def download_model(url: str, save_path: Path):
    """Download the hand landmarker model if not present.

    The file is fetched into a ``.part`` sibling and only moved onto
    ``save_path`` once complete, so an interrupted download is retried
    on the next call.

    Raises:
        ModelLoadError: the download failed
    """
    if save_path.exists():
        return
    partial = save_path.with_suffix(save_path.suffix + ".part")
    try:
        save_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Downloading hand landmarker model to %s...", save_path)
        urllib.request.urlretrieve(url, str(partial))
        partial.replace(save_path)
        logger.info("Model download complete")
    except OSError as e:
        partial.unlink(missing_ok=True)
        raise ModelLoadError(f"could not download the hand model: {e}") from e


class HandDetector:
    """Single-hand landmark detection on BGR camera frames."""

    def __init__(self, config: dict):
        self._model_path = Path(config.get("model_path") or DEFAULT_MODEL_PATH)
        self._model_url = config.get("model_url", HAND_LANDMARKER_MODEL_URL)
        self._min_detect_conf = config.get("min_detection_confidence", 0.5)
        self._min_presence_conf = config.get("min_presence_confidence", 0.5)
        self._min_track_conf = config.get("min_tracking_confidence", 0.5)

        self._landmarker = None
        self._last_timestamp_ms = 0
        self._last_pose: Optional[np.ndarray] = None

    @log_timing
    def initialize(self):
        """Fetch the model if needed and create the landmarker.

        Raises:
            ModelLoadError: the model could not be fetched or loaded
        """
        if self._landmarker is not None:
            return
        download_model(self._model_url, self._model_path)

        options = vision.HandLandmarkerOptions(
            base_options=python.BaseOptions(model_asset_path=str(self._model_path)),
            running_mode=vision.RunningMode.VIDEO,
            num_hands=1,
            min_hand_detection_confidence=self._min_detect_conf,
            min_hand_presence_confidence=self._min_presence_conf,
            min_tracking_confidence=self._min_track_conf,
        )
        try:
            self._landmarker = vision.HandLandmarker.create_from_options(options)
        except (RuntimeError, ValueError) as e:
            raise ModelLoadError(f"could not load the hand model: {e}") from e
        logger.info("HandLandmarker initialized (model: %s)", self._model_path.name)

    def _next_timestamp_ms(self) -> int:
        # VIDEO mode rejects timestamps that do not strictly increase
        now_ms = int(time.monotonic() * 1000)
        self._last_timestamp_ms = max(now_ms, self._last_timestamp_ms + 1)
        return self._last_timestamp_ms

    def detect(self, rgb_frame: np.ndarray) -> Optional[np.ndarray]:
        """Detect a hand in an RGB frame.

        Returns:
            (21, 3) landmarks of the first hand, or None when no hand is visible
        """
        if self._landmarker is None:
            self.initialize()

        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_frame)
        result = self._landmarker.detect_for_video(mp_image, self._next_timestamp_ms())

        if not result.hand_landmarks:
            self._last_pose = None
            return None

        hand = result.hand_landmarks[0]
        self._last_pose = np.array([[lm.x, lm.y, lm.z] for lm in hand], dtype=np.float64)
        return self._last_pose

    def detect_bgr(self, bgr_frame: np.ndarray) -> Optional[np.ndarray]:
        rgb = np.ascontiguousarray(cv2.cvtColor(bgr_frame, cv2.COLOR_BGR2RGB))
        return self.detect(rgb)

    @property
    def last_pose(self) -> Optional[np.ndarray]:
        return self._last_pose

    def draw_landmarks(self, frame: np.ndarray, pose: np.ndarray = None,
                       color=(0, 255, 0), tip_color=(0, 0, 255)) -> np.ndarray:
        """Draw hand landmarks and connections on a BGR frame."""
        pose = self._last_pose if pose is None else pose
        if pose is None:
            return frame
        h, w = frame.shape[:2]
        points = [(int(x * w), int(y * h)) for x, y in pose[:, :2]]
        for start, end in HAND_CONNECTIONS:
            cv2.line(frame, points[start], points[end], (255, 255, 255), 2)
        for i, pos in enumerate(points):
            cv2.circle(frame, pos, 4, tip_color if i in (4, 8, 12, 16, 20) else color, -1)
        return frame

    def close(self):
        """Release MediaPipe resources."""
        if self._landmarker is not None:
            self._landmarker.close()
            self._landmarker = None
            logger.info("HandLandmarker closed")
        self._last_pose = None

    def __enter__(self):
        self.initialize()
        return self

    def __exit__(self, *args):
        self.close()
