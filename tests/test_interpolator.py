"""Tests for the unified interpolator."""

import math

import numpy as np
import pytest

from vocalwave.errors import ConfigurationError
from vocalwave.mapping.interpolator import UnifiedInterpolator, VisualParams
from vocalwave.mapping.params import (
    DEFAULT_COLOR,
    DEFAULT_DYNAMIC,
    DEFAULT_SHAPE,
    ColorParams,
    DynamicParams,
    ShapeParams,
    SpacingMode,
    WavePattern,
)
from vocalwave.utils.hsl import HSLColor

TARGET_COLOR = ColorParams(
    primary=HSLColor(0.0, 95.0, 60.0),
    secondary=HSLColor(10.0, 90.0, 50.0),
    glow=HSLColor(0.0, 100.0, 70.0),
)
TARGET_SHAPE = ShapeParams(
    amplitude=0.95,
    spacing=2.0,
    active_count=24,
    variance=0.8,
    spacing_mode=SpacingMode.IRREGULAR,
)
TARGET_DYNAMIC = DynamicParams(
    speed_multiplier=1.5,
    wave_pattern=WavePattern.SHAKING.value,
    glow_intensity=1.0,
    transition_duration=200.0,
)


class TestUnifiedInterpolator:
    """Tests for frame-rate independent easing."""

    def test_starts_at_defaults(self):
        current = UnifiedInterpolator().current
        assert current == VisualParams(DEFAULT_COLOR, DEFAULT_SHAPE, DEFAULT_DYNAMIC)

    def test_zero_delta_holds(self):
        interpolator = UnifiedInterpolator()
        result = interpolator.interpolate(TARGET_COLOR, TARGET_SHAPE, TARGET_DYNAMIC, 0.0)
        assert result.shape.amplitude == DEFAULT_SHAPE.amplitude
        assert result.color == DEFAULT_COLOR

    def test_single_step_blend(self):
        interpolator = UnifiedInterpolator(lerp_speed=5.0)
        result = interpolator.interpolate(TARGET_COLOR, TARGET_SHAPE, TARGET_DYNAMIC, 100.0)

        t = 1.0 - math.exp(-0.5)
        assert np.isclose(result.shape.amplitude, 0.3 + (0.95 - 0.3) * t)
        assert np.isclose(result.dynamic.transition_duration, 500.0 + (200.0 - 500.0) * t)
        assert isinstance(result.shape.active_count, int)

    def test_categorical_fields_hold_on_small_steps(self):
        """t = 0.39 keeps the old spacing mode and wave pattern."""
        interpolator = UnifiedInterpolator(lerp_speed=5.0)
        result = interpolator.interpolate(TARGET_COLOR, TARGET_SHAPE, TARGET_DYNAMIC, 100.0)
        assert result.shape.spacing_mode == SpacingMode.UNIFORM
        assert result.dynamic.wave_pattern == "breathing"

    def test_categorical_fields_switch_on_large_steps(self):
        interpolator = UnifiedInterpolator(lerp_speed=5.0)
        result = interpolator.interpolate(TARGET_COLOR, TARGET_SHAPE, TARGET_DYNAMIC, 500.0)
        assert result.shape.spacing_mode == SpacingMode.IRREGULAR
        assert result.dynamic.wave_pattern == "shaking"

    def test_categorical_fields_hold_at_60fps(self):
        """Each 60 fps frame blends by ~0.08, so spacing mode and pattern never switch."""
        interpolator = UnifiedInterpolator(lerp_speed=5.0)
        tight = ShapeParams(
            amplitude=0.5,
            spacing=2.0,
            active_count=20,
            variance=0.3,
            spacing_mode=SpacingMode.TIGHT,
        )
        results = [
            interpolator.interpolate(DEFAULT_COLOR, tight, TARGET_DYNAMIC, 1000.0 / 60)
            for _ in range(30)
        ]
        assert [r.shape.spacing_mode for r in results] == [SpacingMode.UNIFORM] * 30
        assert [r.dynamic.wave_pattern for r in results] == ["breathing"] * 30

    def test_categorical_switch_is_per_frame(self):
        """Many small steps never switch; one step with t > 0.5 does."""
        interpolator = UnifiedInterpolator(lerp_speed=5.0)
        for _ in range(20):
            result = interpolator.interpolate(TARGET_COLOR, TARGET_SHAPE, TARGET_DYNAMIC, 10.0)
        assert result.dynamic.wave_pattern == "breathing"

        pulsing = DynamicParams(1.8, WavePattern.PULSING.value, 0.9, 300.0)
        result = interpolator.interpolate(TARGET_COLOR, TARGET_SHAPE, pulsing, 200.0)
        assert result.dynamic.wave_pattern == "pulsing"
        assert result.shape.spacing_mode == SpacingMode.IRREGULAR

    def test_converges_at_60fps(self):
        interpolator = UnifiedInterpolator(lerp_speed=5.0)
        for _ in range(300):
            result = interpolator.interpolate(TARGET_COLOR, TARGET_SHAPE, TARGET_DYNAMIC, 1000.0 / 60)

        assert np.isclose(result.shape.amplitude, 0.95, atol=1e-3)
        assert result.shape.active_count == 24
        assert np.isclose(result.dynamic.speed_multiplier, 1.5, atol=1e-3)
        assert result.shape.spacing_mode == SpacingMode.UNIFORM
        assert np.isclose(result.color.primary.saturation, 95.0, atol=0.1)

    def test_frame_rate_independence(self):
        """One 100 ms step lands where ten 10 ms steps do."""
        coarse = UnifiedInterpolator()
        fine = UnifiedInterpolator()
        coarse.interpolate(TARGET_COLOR, TARGET_SHAPE, TARGET_DYNAMIC, 100.0)
        for _ in range(10):
            fine.interpolate(TARGET_COLOR, TARGET_SHAPE, TARGET_DYNAMIC, 10.0)

        assert np.isclose(coarse.current.shape.amplitude, fine.current.shape.amplitude)
        assert np.isclose(coarse.current.dynamic.glow_intensity, fine.current.dynamic.glow_intensity)

    def test_hue_takes_shortest_arc(self):
        """210 -> 0 goes up through 270 (150 degrees), never down through 180."""
        interpolator = UnifiedInterpolator()
        hue = interpolator.interpolate(TARGET_COLOR, TARGET_SHAPE, TARGET_DYNAMIC, 100.0).color.primary.hue
        t = 1.0 - math.exp(-0.5)
        assert np.isclose(hue, 210.0 + 150.0 * t)

    def test_small_steps_reach_full_bar_count(self):
        """Sub-bar steps accumulate instead of stalling on rounding."""
        interpolator = UnifiedInterpolator(lerp_speed=5.0)
        counts = [
            interpolator.interpolate(DEFAULT_COLOR, TARGET_SHAPE, DEFAULT_DYNAMIC, 1000.0 / 60).shape.active_count
            for _ in range(120)
        ]
        assert counts == sorted(counts)
        assert counts[-1] == 24

    def test_snap(self):
        interpolator = UnifiedInterpolator()
        result = interpolator.snap(TARGET_COLOR, TARGET_SHAPE, TARGET_DYNAMIC)
        assert result == VisualParams(TARGET_COLOR, TARGET_SHAPE, TARGET_DYNAMIC)
        assert interpolator.current.shape.spacing_mode == SpacingMode.IRREGULAR

    def test_zero_delta_after_snap_keeps_snapped_values(self):
        interpolator = UnifiedInterpolator()
        snapped = interpolator.snap(TARGET_COLOR, TARGET_SHAPE, TARGET_DYNAMIC)
        result = interpolator.interpolate(DEFAULT_COLOR, DEFAULT_SHAPE, DEFAULT_DYNAMIC, 0.0)
        assert result == snapped

    def test_reset(self):
        interpolator = UnifiedInterpolator()
        interpolator.snap(TARGET_COLOR, TARGET_SHAPE, TARGET_DYNAMIC)
        interpolator.reset()
        assert interpolator.current.shape == DEFAULT_SHAPE

    @pytest.mark.parametrize("speed", [0.0, -1.0])
    def test_invalid_lerp_speed(self, speed):
        with pytest.raises(ConfigurationError):
            UnifiedInterpolator(lerp_speed=speed)
