"""Tests for the dynamic channel and wave patterns."""

import numpy as np
import pytest

from vocalwave.core.speed import SpeedData
from vocalwave.core.volume import VolumeData
from vocalwave.mapping.dynamic import DynamicChannel, WavePatternDefinition
from vocalwave.mapping.params import WavePattern
from vocalwave.mapping.presets import EMOTION_PRESETS


def speed(activity_rate: float) -> SpeedData:
    return SpeedData(activity_rate=activity_rate, change_rate=0.0, is_active=activity_rate > 0)


def volume(peak: float) -> VolumeData:
    return VolumeData(rms=peak, peak=peak, smoothed=peak)


class TestDynamicChannel:
    """Tests for rhythm -> motion mapping."""

    @pytest.mark.parametrize("activity,expected_speed,expected_transition", [
        (0.0, 0.4, 800.0),
        (0.5, 1.1, 500.0),
        (1.0, 1.8, 200.0),
    ])
    def test_activity_drives_speed_and_transition(self, activity, expected_speed, expected_transition):
        params = DynamicChannel().map(speed(activity), volume(0.0))
        assert np.isclose(params.speed_multiplier, expected_speed)
        assert np.isclose(params.transition_duration, expected_transition)

    def test_speed_multiplier_clamped(self):
        params = DynamicChannel().map(speed(1.5), volume(0.0))
        assert np.isclose(params.speed_multiplier, 1.8)

    @pytest.mark.parametrize("peak,expected", [(0.0, 0.0), (0.5, 0.6), (0.9, 1.0)])
    def test_glow_follows_peak(self, peak, expected):
        params = DynamicChannel().map(speed(0.0), volume(peak))
        assert np.isclose(params.glow_intensity, expected)

    def test_default_pattern_is_breathing(self):
        params = DynamicChannel().map(speed(0.0), volume(0.0))
        assert params.wave_pattern == "breathing"

    def test_preset_sets_pattern(self):
        channel = DynamicChannel()
        channel.apply_preset(EMOTION_PRESETS["angry"])
        assert channel.map(speed(0.0), volume(0.0)).wave_pattern == "shaking"

    def test_set_speed_range(self):
        channel = DynamicChannel()
        channel.set_speed_range((1.0, 2.0))
        assert np.isclose(channel.map(speed(0.5), volume(0.0)).speed_multiplier, 1.5)


class TestWavePatterns:
    """Tests for the pattern modulator registry."""

    def test_builtin_patterns(self):
        channel = DynamicChannel()
        assert set(channel.patterns) == {p.value for p in WavePattern}

    def test_steady_is_constant(self):
        modulate = DynamicChannel().get_pattern_modulator("steady").modulate
        assert modulate(0.0, 0.7) == 0.7
        assert modulate(12.3, 0.7) == 0.7

    @pytest.mark.parametrize("pattern", [p.value for p in WavePattern])
    def test_modulation_stays_within_base(self, pattern):
        modulate = DynamicChannel(seed=3).get_pattern_modulator(pattern).modulate
        for phase in np.linspace(0.0, 10.0, 200):
            value = modulate(phase, 0.8)
            assert -1e-9 <= value <= 0.8 + 1e-9

    def test_breathing_at_zero_phase(self):
        modulate = DynamicChannel().get_pattern_modulator(WavePattern.BREATHING).modulate
        assert np.isclose(modulate(0.0, 1.0), 0.8)

    def test_unknown_pattern_falls_back_to_breathing(self):
        channel = DynamicChannel()
        assert channel.get_pattern_modulator("wobble") is channel.get_pattern_modulator("breathing")

    def test_register_pattern(self):
        channel = DynamicChannel()
        square = WavePatternDefinition(lambda phase, base: base if int(phase) % 2 == 0 else 0.0, "square")
        channel.register_pattern("square", square)

        assert channel.get_pattern_modulator("square") is square
        assert "square" in channel.patterns

    def test_shaking_is_reproducible_with_seed(self):
        first = DynamicChannel(seed=7).get_pattern_modulator("shaking").modulate
        second = DynamicChannel(seed=7).get_pattern_modulator("shaking").modulate
        assert [first(p, 1.0) for p in range(5)] == [second(p, 1.0) for p in range(5)]
