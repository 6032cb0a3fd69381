"""Tests for the smoothing filter and pinch rotation processor."""

import pytest

from core.pinch_rotation import ExponentialFilter2D, PinchRotationProcessor
from conftest import make_hand, pinch_at


def make_processor(**kwargs):
    params = dict(
        smoothing=0.1,
        position_multiplier=0.005,
        pinch_threshold=40.0,
        image_size=(640, 480),
        viewport_size=(640, 480),
    )
    params.update(kwargs)
    return PinchRotationProcessor(**params)


class TestExponentialFilter2D:
    """Test the exponential smoothing filter."""

    def test_first_sample_passes_through(self):
        """First sample after construction is not smoothed toward zero."""
        f = ExponentialFilter2D(0.1)
        assert f.filter(250.0, -40.0) == (250.0, -40.0)

    def test_step_toward_sample(self):
        """Each step moves alpha of the way to the new sample, per axis."""
        f = ExponentialFilter2D(0.1)
        f.filter(100.0, 200.0)
        x, y = f.filter(110.0, 100.0)
        assert x == pytest.approx(101.0)
        assert y == pytest.approx(190.0)

    def test_converges_monotonically_without_overshoot(self):
        """Constant input is approached monotonically and never overshot."""
        f = ExponentialFilter2D(0.3)
        f.filter(0.0, 50.0)
        prev_x, prev_y = 0.0, 50.0
        for _ in range(200):
            x, y = f.filter(10.0, -5.0)
            assert prev_x <= x <= 10.0
            assert -5.0 <= y <= prev_y
            prev_x, prev_y = x, y
        assert x == pytest.approx(10.0)
        assert y == pytest.approx(-5.0)

    def test_reset_restarts_from_next_sample(self):
        """After reset the next sample becomes the estimate directly."""
        f = ExponentialFilter2D(0.1)
        f.filter(0.0, 0.0)
        f.filter(100.0, 100.0)
        f.reset()
        assert f.value is None
        assert f.filter(300.0, 300.0) == (300.0, 300.0)


class TestPinchRotationProcessor:
    """Test landmark → pinch signal → rotation delta."""

    def test_no_hand_is_disengaged(self):
        """An empty hand list yields no pinch and no delta."""
        processor = make_processor()
        signal = processor.update([])
        assert not signal.engaged
        assert not signal.has_delta
        assert processor.update(None).engaged is False

    def test_too_few_landmarks_is_disengaged(self):
        """Hands missing the index tip are treated as no gesture."""
        processor = make_processor()
        signal = processor.update([[(10.0, 10.0, 0.0)] * 5])
        assert not signal.engaged
        assert processor.smoothed_position is None

    def test_first_engaged_sample_has_zero_delta(self):
        """Pinch start stores a reference without rotating."""
        processor = make_processor()
        signal = processor.update(pinch_at(540.0, 100.0))
        assert signal.engaged
        assert signal.just_engaged
        assert signal.delta_x == 0.0
        assert signal.delta_y == 0.0
        assert signal.position == pytest.approx((100.0, 100.0))

    def test_scenario_one_smoothing_step(self):
        """(100,100) then (110,100) mapped → smoothed (101,100), delta 0.005 on x."""
        processor = make_processor()
        processor.update(pinch_at(540.0, 100.0))
        signal = processor.update(pinch_at(530.0, 100.0))

        assert signal.position == pytest.approx((101.0, 100.0))
        assert signal.delta_x == pytest.approx(0.005)
        assert signal.delta_y == pytest.approx(0.0)
        # Consumer applies the 0.2 secondary scale
        assert signal.delta_x * 0.2 == pytest.approx(0.001)

    def test_distance_above_threshold_discards_reference(self):
        """45px apart against a 40px threshold releases the pinch and clears smoothing."""
        processor = make_processor()
        processor.update(pinch_at(540.0, 100.0))
        assert processor.smoothed_position is not None

        signal = processor.update([make_hand((300.0, 200.0), (345.0, 200.0))])
        assert not signal.engaged
        assert signal.just_released
        assert processor.smoothed_position is None

    def test_distance_at_threshold_is_engaged(self):
        """Contact requires distance not exceeding the threshold."""
        processor = make_processor()
        signal = processor.update([make_hand((300.0, 200.0), (340.0, 200.0))])
        assert signal.engaged

    def test_reengagement_starts_fresh(self):
        """After a release, the next pinch has zero delta even far away."""
        processor = make_processor()
        processor.update(pinch_at(540.0, 100.0))
        processor.update(pinch_at(530.0, 100.0))
        processor.update([])

        signal = processor.update(pinch_at(100.0, 400.0))
        assert signal.just_engaged
        assert not signal.has_delta
        assert signal.position == pytest.approx((540.0, 400.0))

    def test_mirror_and_scale_mapping(self):
        """x is mirrored across the image width and both axes scale to the viewport."""
        processor = make_processor(viewport_size=(1280, 960))
        assert processor.map_to_viewport(160.0, 120.0) == pytest.approx((960.0, 240.0))

    def test_vertical_motion_gives_pitch_delta(self):
        """Moving down in the image produces a positive y delta."""
        processor = make_processor(smoothing=0.5)
        processor.update(pinch_at(320.0, 100.0))
        signal = processor.update(pinch_at(320.0, 140.0))
        assert signal.delta_x == pytest.approx(0.0)
        assert signal.delta_y == pytest.approx(20.0 * 0.005)

    def test_only_first_hand_used(self):
        """A second detected hand does not affect the signal."""
        processor = make_processor()
        hands = pinch_at(540.0, 100.0) + [make_hand((0.0, 0.0), (500.0, 0.0))]
        assert processor.update(hands).engaged
