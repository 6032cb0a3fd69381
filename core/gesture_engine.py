"""
Gesture Engine
==============
Webcam hand-landmark capability for the viewer.

Usage:
    from core.gesture_engine import GestureEngine

    with GestureEngine(settings.gesture) as engine:
        while running:
            sample = engine.poll()
            if sample is not None:
                signal = processor.update(sample.hands)
            ...
            engine.render_pip(frame)

The camera and MediaPipe detection run on a background thread at whatever
rate inference allows. The main loop picks up the newest sample with
``poll()``; each sample is delivered at most once.
"""

import logging
import os
import threading
import time
import urllib.request
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import cv2
import mediapipe as mp
import numpy as np
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

logger = logging.getLogger(__name__)


MODEL_PATH = "hand_landmarker.task"
MODEL_URL = "https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/latest/hand_landmarker.task"

HAND_CONNECTIONS = [
    (0, 1), (1, 2), (2, 3), (3, 4),
    (0, 5), (5, 6), (6, 7), (7, 8),
    (0, 9), (9, 10), (10, 11), (11, 12),
    (0, 13), (13, 14), (14, 15), (15, 16),
    (0, 17), (17, 18), (18, 19), (19, 20),
    (5, 9), (9, 13), (13, 17)
]


# =====================
# SAMPLE
# =====================
@dataclass
class GestureSample:
    """
    One inference result.

    ``hands`` holds each detected hand as 21 (x, y, z) landmarks in source
    image pixels (unmirrored camera orientation). Empty when no hand is seen.
    """
    sequence: int
    timestamp: float
    image_size: Tuple[int, int]
    hands: List[List[Tuple[float, float, float]]] = field(default_factory=list)


def ensure_model(path: str = MODEL_PATH, url: str = MODEL_URL) -> str:
    """Download the hand landmarker model on first use."""
    if not os.path.exists(path):
        logger.info("Downloading hand landmarker model to %s", path)
        urllib.request.urlretrieve(url, path)
        logger.info("Hand landmarker model downloaded")
    return path


def landmarks_to_pixels(hand_landmarks, width: int, height: int) -> List[Tuple[float, float, float]]:
    """Convert normalized MediaPipe landmarks to image pixel coordinates."""
    return [(lm.x * width, lm.y * height, lm.z * width) for lm in hand_landmarks]


# =====================
# GESTURE ENGINE
# =====================
class GestureEngine:
    """
    Threaded webcam capture plus MediaPipe hand landmark detection.

    Args:
        settings: GestureSettings (camera index, capture size)
        model_path: Hand landmarker task file
    """

    def __init__(self, settings, model_path: str = MODEL_PATH):
        self.settings = settings

        self.cap = cv2.VideoCapture(settings.camera_index)
        if not self.cap.isOpened():
            raise RuntimeError(f"Cannot open camera {settings.camera_index}")

        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, settings.image_width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, settings.image_height)

        self.detector = vision.HandLandmarker.create_from_options(
            vision.HandLandmarkerOptions(
                base_options=python.BaseOptions(model_asset_path=ensure_model(model_path)),
                running_mode=vision.RunningMode.VIDEO,
                num_hands=1,
                min_hand_detection_confidence=0.5,
                min_tracking_confidence=0.5
            )
        )

        self._frame_count = 0
        self._last_delivered = -1
        self._current_frame: Optional[np.ndarray] = None

        # Shared between capture thread and main loop
        self._lock = threading.Lock()
        self._latest: Optional[GestureSample] = None
        self._latest_frame: Optional[np.ndarray] = None

        self._thread_running = True
        self._capture_thread = threading.Thread(target=self._capture_loop, daemon=True)
        self._capture_thread.start()

        logger.info("Gesture engine started on camera %d", settings.camera_index)

    def _detect(self, frame: np.ndarray) -> GestureSample:
        """Run inference on one frame."""
        h, w = frame.shape[:2]
        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_frame)
        timestamp_ms = int(self._frame_count * (1000 / 30))
        self._frame_count += 1

        results = self.detector.detect_for_video(mp_image, timestamp_ms)
        hands = [landmarks_to_pixels(hand, w, h) for hand in (results.hand_landmarks or [])]
        return GestureSample(
            sequence=self._frame_count,
            timestamp=time.time(),
            image_size=(w, h),
            hands=hands,
        )

    def _capture_loop(self):
        """Background thread: capture frames and run detection."""
        while self._thread_running:
            ret, frame = self.cap.read()
            if not ret:
                time.sleep(0.01)
                continue

            sample = self._detect(frame)
            with self._lock:
                self._latest = sample
                self._latest_frame = frame

    def poll(self) -> Optional[GestureSample]:
        """Newest sample not yet delivered, or None."""
        with self._lock:
            sample = self._latest
            if self._latest_frame is not None:
                self._current_frame = self._latest_frame

        if sample is None or sample.sequence == self._last_delivered:
            return None
        self._last_delivered = sample.sequence
        return sample

    def render_pip(self, frame: np.ndarray, landmarks: Optional[List] = None,
                   pip_width: int = 160, pip_height: int = 120,
                   padding: int = 10, engaged: bool = False) -> np.ndarray:
        """
        Draw the mirrored camera preview in the bottom-right corner.

        Args:
            frame: Viewer frame to draw on (modified in place)
            landmarks: Pixel landmarks of the hand to overlay
            pip_width: Preview width
            pip_height: Preview height
            padding: Pixels from the frame edge
            engaged: Draw the skeleton in the "pinching" colour
        """
        if self._current_frame is None:
            return frame

        pip_frame = self._current_frame.copy()
        if landmarks:
            draw_skeleton(pip_frame, landmarks, engaged)
        pip_frame = cv2.flip(pip_frame, 1)
        pip_resized = cv2.resize(pip_frame, (pip_width, pip_height))

        h, w = frame.shape[:2]
        x = w - pip_width - padding
        y = h - pip_height - padding
        if x < 0 or y < 0:
            return frame

        cv2.rectangle(frame, (x - 2, y - 2),
                      (x + pip_width + 2, y + pip_height + 2),
                      (80, 80, 80), 2)
        frame[y:y + pip_height, x:x + pip_width] = pip_resized
        return frame

    def close(self):
        """Stop the capture thread and release the camera."""
        self._thread_running = False
        self._capture_thread.join(timeout=1.0)

        self.cap.release()
        self.detector.close()
        logger.info("Gesture engine stopped")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def draw_skeleton(frame: np.ndarray, landmarks, engaged: bool = False):
    """Draw a hand skeleton from pixel landmarks."""
    color = (0, 255, 0) if engaged else (200, 200, 200)
    points = [(int(p[0]), int(p[1])) for p in landmarks]

    for start, end in HAND_CONNECTIONS:
        if start < len(points) and end < len(points):
            cv2.line(frame, points[start], points[end], color, 2)

    for pt in points:
        cv2.circle(frame, pt, 3, color, -1)
