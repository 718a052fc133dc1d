"""Tests for the shape channel."""

import numpy as np
import pytest

from vocalwave.core.pitch import PitchData
from vocalwave.core.volume import VolumeData
from vocalwave.errors import ConfigurationError
from vocalwave.mapping.params import SpacingMode, ValueRange
from vocalwave.mapping.presets import EMOTION_PRESETS
from vocalwave.mapping.shape import ShapeChannel


def volume(smoothed: float = 0.0, peak: float = 0.0) -> VolumeData:
    return VolumeData(rms=smoothed, peak=peak, smoothed=smoothed)


def pitch(frequency: float = 0.0, confidence: float = 0.0, change_rate: float = 0.0) -> PitchData:
    return PitchData(frequency=frequency, confidence=confidence, change_rate=change_rate)


class TestShapeChannel:
    """Tests for volume/pitch -> shape mapping."""

    def test_amplitude_follows_smoothed_volume(self):
        shape = ShapeChannel().map(volume(smoothed=0.5), pitch())
        assert np.isclose(shape.amplitude, 0.5)

    def test_preset_narrows_amplitude_range(self):
        channel = ShapeChannel()
        channel.apply_preset(EMOTION_PRESETS["happy"])

        assert np.isclose(channel.map(volume(smoothed=0.0), pitch()).amplitude, 0.8)
        assert np.isclose(channel.map(volume(smoothed=0.5), pitch()).amplitude, 0.9)
        assert channel.map(volume(), pitch()).spacing_mode == SpacingMode.TIGHT

    @pytest.mark.parametrize("frequency,expected", [
        (600.0, 1.0),
        (80.0, 10.0),
        (1000.0, 1.0),
        (40.0, 10.0),
        (340.0, 5.5),
    ])
    def test_high_pitch_tightens_spacing(self, frequency, expected):
        shape = ShapeChannel().map(volume(), pitch(frequency, confidence=0.9))
        assert np.isclose(shape.spacing, expected)

    def test_unconfident_pitch_uses_midpoint(self):
        shape = ShapeChannel().map(volume(), pitch(600.0, confidence=0.4))
        assert np.isclose(shape.spacing, 5.5)

    @pytest.mark.parametrize("peak,expected", [(0.0, 7), (0.5, 16), (1.0, 24)])
    def test_active_count(self, peak, expected):
        shape = ShapeChannel(bar_count=24).map(volume(peak=peak), pitch())
        assert shape.active_count == expected

    @pytest.mark.parametrize("change_rate,expected", [(0.0, 0.0), (100.0, 0.5), (-400.0, 1.0)])
    def test_variance_follows_pitch_movement(self, change_rate, expected):
        shape = ShapeChannel().map(volume(), pitch(200.0, confidence=0.9, change_rate=change_rate))
        assert np.isclose(shape.variance, expected)

    def test_variance_fallback(self):
        shape = ShapeChannel().map(volume(), pitch(200.0, confidence=0.2, change_rate=500.0))
        assert shape.variance == 0.2

    def test_outputs_bounded(self):
        channel = ShapeChannel()
        shape = channel.map(volume(smoothed=1.0, peak=1.0), pitch(300.0, 1.0, 1e6))
        assert 0.0 <= shape.amplitude <= 1.0
        assert 0 <= shape.active_count <= channel.bar_count
        assert 0.0 <= shape.variance <= 1.0

    def test_setters(self):
        channel = ShapeChannel()
        channel.set_spacing_range((2.0, 4.0))
        channel.set_amplitude_range({"min": 0.1, "max": 0.2})
        channel.set_bar_count(10)

        shape = channel.map(volume(smoothed=1.0, peak=1.0), pitch())
        assert np.isclose(shape.spacing, 3.0)
        assert np.isclose(shape.amplitude, 0.2)
        assert shape.active_count == 10
        assert channel.spacing_range == ValueRange(2.0, 4.0)

    def test_invalid_setters(self):
        channel = ShapeChannel()
        with pytest.raises(ConfigurationError):
            channel.set_bar_count(0)
        with pytest.raises(ConfigurationError):
            channel.set_spacing_range((5.0, 1.0))
