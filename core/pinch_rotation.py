"""
Pinch Rotation
==============
Turns raw hand landmarks into a smoothed pinch-drag rotation signal.

Features:
- Thumb/index pinch detection against a pixel contact threshold
- Mirror correction and image-to-viewport coordinate mapping
- Exponential smoothing of the fingertip position
- Zero delta on the first engaged sample (no jump when contact begins)
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


# MediaPipe hand model landmark indices
THUMB_TIP = 4
INDEX_TIP = 8


# =====================
# SMOOTHING FILTER
# =====================
class ExponentialFilter2D:
    """
    Exponential low-pass filter over a 2D position stream.

    The first sample after a reset is passed through unchanged so the
    estimate never starts from a degenerate zero value.
    """

    def __init__(self, alpha: float = 0.1):
        self.alpha = alpha
        self.x_prev: Optional[float] = None
        self.y_prev: Optional[float] = None

    @property
    def initialized(self) -> bool:
        return self.x_prev is not None

    @property
    def value(self) -> Optional[Tuple[float, float]]:
        if self.x_prev is None:
            return None
        return self.x_prev, self.y_prev

    def filter(self, x: float, y: float) -> Tuple[float, float]:
        if self.x_prev is None:
            self.x_prev = x
            self.y_prev = y
            return x, y

        self.x_prev = self.x_prev + self.alpha * (x - self.x_prev)
        self.y_prev = self.y_prev + self.alpha * (y - self.y_prev)
        return self.x_prev, self.y_prev

    def reset(self):
        self.x_prev = None
        self.y_prev = None


# =====================
# GESTURE SIGNAL
# =====================
@dataclass
class PinchSignal:
    """Result of processing one landmark sample."""
    engaged: bool = False
    just_engaged: bool = False
    just_released: bool = False
    position: Optional[Tuple[float, float]] = None  # smoothed viewport pixels
    delta_x: float = 0.0  # rotation delta candidate (yaw axis)
    delta_y: float = 0.0  # rotation delta candidate (pitch axis)

    @property
    def has_delta(self) -> bool:
        return self.delta_x != 0.0 or self.delta_y != 0.0


class PinchRotationProcessor:
    """
    Converts per-sample hand landmarks into a pinch signal and rotation delta.

    Landmarks are given in source image pixel coordinates. While the thumb
    tip and index tip are within ``pinch_threshold`` pixels, the mirrored
    index tip position is mapped into the viewport, smoothed, and the change
    in smoothed position (times ``position_multiplier``) is emitted as a
    rotation delta. The secondary rotation scale is applied by the consumer.

    Args:
        smoothing: Exponential smoothing coefficient, in (0, 1)
        position_multiplier: Pixel-to-rotation multiplier
        pinch_threshold: Maximum thumb/index distance for contact, in pixels
        image_size: Source image (width, height) in pixels
        viewport_size: Target viewport (width, height) in pixels
    """

    def __init__(self,
                 smoothing: float = 0.1,
                 position_multiplier: float = 0.005,
                 pinch_threshold: float = 40.0,
                 image_size: Tuple[int, int] = (640, 480),
                 viewport_size: Tuple[int, int] = (800, 600)):
        self.position_multiplier = position_multiplier
        self.pinch_threshold = pinch_threshold
        self.image_size = image_size
        self.viewport_size = viewport_size

        self._filter = ExponentialFilter2D(smoothing)
        self.is_pinching = False

    @property
    def smoothed_position(self) -> Optional[Tuple[float, float]]:
        """Last smoothed position, or None when no pinch is active."""
        return self._filter.value

    def set_viewport_size(self, width: int, height: int):
        self.viewport_size = (width, height)

    def map_to_viewport(self, x: float, y: float) -> Tuple[float, float]:
        """Mirror horizontally and scale image pixels to viewport pixels."""
        img_w, img_h = self.image_size
        view_w, view_h = self.viewport_size
        mirrored_x = img_w - x
        return mirrored_x / img_w * view_w, y / img_h * view_h

    def update(self, hands: Optional[Sequence[Sequence[Sequence[float]]]]) -> PinchSignal:
        """
        Process one landmark sample.

        ``hands`` is a list of detected hands, each an ordered list of
        (x, y[, z]) landmark coordinates. Only the first hand is used.
        """
        landmarks = hands[0] if hands else None
        if landmarks is None or len(landmarks) <= max(THUMB_TIP, INDEX_TIP):
            return self._release()

        thumb = landmarks[THUMB_TIP]
        index = landmarks[INDEX_TIP]
        distance = math.hypot(thumb[0] - index[0], thumb[1] - index[1])
        if distance > self.pinch_threshold:
            return self._release()

        just_engaged = not self.is_pinching
        if just_engaged:
            logger.debug("Pinch engaged (distance %.1fpx)", distance)
        self.is_pinching = True

        mapped_x, mapped_y = self.map_to_viewport(index[0], index[1])
        previous = self._filter.value
        smoothed = self._filter.filter(mapped_x, mapped_y)

        if previous is None:
            # Fresh reference point
            return PinchSignal(engaged=True, just_engaged=just_engaged, position=smoothed)

        return PinchSignal(
            engaged=True,
            just_engaged=just_engaged,
            position=smoothed,
            delta_x=(smoothed[0] - previous[0]) * self.position_multiplier,
            delta_y=(smoothed[1] - previous[1]) * self.position_multiplier,
        )

    def _release(self) -> PinchSignal:
        was_pinching = self.is_pinching
        if was_pinching:
            logger.debug("Pinch released")
        self.is_pinching = False
        self._filter.reset()
        return PinchSignal(just_released=was_pinching)

    def reset(self):
        self.is_pinching = False
        self._filter.reset()
