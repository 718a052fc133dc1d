"""
Shape channel: volume and pitch -> static form.

Volume drives amplitude and how many bars are lit; pitch drives spacing
(high voice, tight spacing) and the height variance between bars.
"""

from vocalwave.core.pitch import PitchData
from vocalwave.core.volume import VolumeData
from vocalwave.errors import require
from vocalwave.mapping.params import ShapeParams, SpacingMode, ValueRange
from vocalwave.mapping.presets import EmotionColorPreset
from vocalwave.utils.numeric import clamp, map_range, round_half_up

PITCH_CONFIDENCE_GATE = 0.5
FALLBACK_VARIANCE = 0.2
# Pitch change (Hz/s) that maps to full variance.
VARIANCE_CHANGE_RATE = 200.0
# Share of bars that stay lit at zero peak.
MIN_ACTIVE_SHARE = 0.3


class ShapeChannel:
    """Maps volume and pitch features to ShapeParams."""

    def __init__(
        self,
        amplitude_range=ValueRange(0.0, 1.0),
        spacing_range=ValueRange(1.0, 10.0),
        bar_count: int = 24,
        pitch_range=ValueRange(80.0, 600.0),
    ):
        """
        Initialize the channel.

        Args:
            amplitude_range: Output amplitude range; replaced by presets.
            spacing_range: Output spacing range.
            bar_count: Total number of bars available to the renderer.
            pitch_range: Voice pitch range mapped across the spacing range.
        """
        self.set_amplitude_range(amplitude_range)
        self.set_spacing_range(spacing_range)
        self.set_bar_count(bar_count)
        self.pitch_range = ValueRange.of(pitch_range)
        self.spacing_mode = SpacingMode.UNIFORM

    def set_amplitude_range(self, value_range) -> None:
        self.amplitude_range = ValueRange.of(value_range)

    def set_spacing_range(self, value_range) -> None:
        self.spacing_range = ValueRange.of(value_range)

    def set_bar_count(self, count: int) -> None:
        require(int(count) == count and count >= 1, f"bar_count must be a positive integer, got {count}")
        self.bar_count = int(count)

    def apply_preset(self, preset: EmotionColorPreset) -> None:
        """Adopt an emotion's amplitude range and spacing mode."""
        self.amplitude_range = preset.amplitude_range
        self.spacing_mode = preset.spacing_mode

    def map(self, volume: VolumeData, pitch: PitchData) -> ShapeParams:
        amplitude = clamp(
            map_range(volume.smoothed, 0.0, 1.0, self.amplitude_range.min, self.amplitude_range.max),
            0.0,
            1.0,
        )

        pitch_confident = pitch.confidence > PITCH_CONFIDENCE_GATE
        if pitch_confident and pitch.frequency > 0:
            low, high = self.pitch_range.min, self.pitch_range.max
            spacing = map_range(
                clamp(pitch.frequency, low, high),
                low,
                high,
                self.spacing_range.max,
                self.spacing_range.min,
            )
        else:
            spacing = self.spacing_range.midpoint

        active_count = round_half_up(
            map_range(volume.peak, 0.0, 1.0, int(self.bar_count * MIN_ACTIVE_SHARE), self.bar_count)
        )

        if pitch_confident:
            variance = clamp(abs(pitch.change_rate) / VARIANCE_CHANGE_RATE, 0.0, 1.0)
        else:
            variance = FALLBACK_VARIANCE

        return ShapeParams(
            amplitude=amplitude,
            spacing=spacing,
            active_count=active_count,
            variance=variance,
            spacing_mode=self.spacing_mode,
        )
