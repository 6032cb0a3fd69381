"""Pytest configuration and shared fixtures."""

import pytest

from systems.auto_rotate import AutoRotateArbiter
from systems.camera import ViewCamera
from systems.input_state import InputStateTracker
from systems.transform import ObjectOrientation, TransformController
from ui.settings import MotionSettings


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def make_hand(thumb, index, rest=(320.0, 240.0)):
    """21 landmarks with the thumb tip and index tip placed explicitly."""
    points = [(rest[0], rest[1], 0.0) for _ in range(21)]
    points[4] = (thumb[0], thumb[1], 0.0)
    points[8] = (index[0], index[1], 0.0)
    return points


def pinch_at(x, y):
    """A single-hand sample pinching at image pixel (x, y)."""
    return [make_hand((x + 5.0, y + 5.0), (x, y))]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def motion():
    return MotionSettings()


@pytest.fixture
def camera():
    cam = ViewCamera(aspect=800 / 600)
    cam.set_position(0.0, 0.0, 10.0)
    cam.look_at((0.0, 0.0, 0.0))
    return cam


@pytest.fixture
def arbiter(clock):
    return AutoRotateArbiter(enabled=True, resume_delay=1.0, clock=clock)


@pytest.fixture
def orientation():
    return ObjectOrientation()


@pytest.fixture
def controller(camera, arbiter, motion, orientation):
    return TransformController(
        camera, InputStateTracker(), arbiter, motion,
        orientation=orientation, gesture_scale=0.2,
    )
