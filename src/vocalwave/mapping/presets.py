"""
Emotion presets.

One preset per emotion defines the baseline look of all three channels:
colors, amplitude range, spacing mode, wave pattern and glow. The
built-in table is read-only; channels take their own copy and accept
additional presets through explicit registration.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from vocalwave.core.emotion import EmotionType
from vocalwave.errors import ConfigurationError
from vocalwave.mapping.params import SpacingMode, ValueRange, WavePattern
from vocalwave.utils.hsl import HSLColor, hsl


@dataclass(frozen=True)
class EmotionColorPreset:
    """Baseline visual behavior for one emotion."""

    primary: HSLColor
    secondary: HSLColor
    glow: HSLColor
    amplitude_range: ValueRange
    speed_multiplier: float
    spacing_mode: SpacingMode
    wave_pattern: str
    glow_intensity: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EmotionColorPreset":
        """
        Build a preset from a JSON-style mapping.

        Colors are [hue, saturation, lightness] lists or
        {"hue", "saturation", "lightness"} mappings.
        """
        def color(value) -> HSLColor:
            if isinstance(value, Mapping):
                return hsl(value["hue"], value["saturation"], value["lightness"])
            hue, saturation, lightness = value
            return hsl(hue, saturation, lightness)

        try:
            return cls(
                primary=color(data["primary"]),
                secondary=color(data["secondary"]),
                glow=color(data["glow"]),
                amplitude_range=ValueRange.of(data["amplitude_range"]),
                speed_multiplier=float(data["speed_multiplier"]),
                spacing_mode=SpacingMode(data["spacing_mode"]),
                wave_pattern=str(data["wave_pattern"]),
                glow_intensity=float(data["glow_intensity"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid emotion preset: {e}") from e


def preset_key(name) -> str:
    """Registry key for an emotion or custom preset name."""
    return name.value if isinstance(name, Enum) else str(name)


EMOTION_PRESETS: Mapping[str, EmotionColorPreset] = MappingProxyType({
    EmotionType.HAPPY.value: EmotionColorPreset(
        primary=HSLColor(180.0, 90.0, 85.0),
        secondary=HSLColor(170.0, 80.0, 75.0),
        glow=HSLColor(180.0, 100.0, 90.0),
        amplitude_range=ValueRange(0.8, 1.0),
        speed_multiplier=1.2,
        spacing_mode=SpacingMode.TIGHT,
        wave_pattern=WavePattern.ACTIVE.value,
        glow_intensity=0.8,
    ),
    EmotionType.SAD.value: EmotionColorPreset(
        primary=HSLColor(270.0, 60.0, 55.0),
        secondary=HSLColor(280.0, 50.0, 45.0),
        glow=HSLColor(270.0, 70.0, 60.0),
        amplitude_range=ValueRange(0.3, 0.6),
        speed_multiplier=0.6,
        spacing_mode=SpacingMode.SPARSE,
        wave_pattern=WavePattern.SLOW.value,
        glow_intensity=0.3,
    ),
    EmotionType.CALM.value: EmotionColorPreset(
        primary=HSLColor(0.0, 10.0, 70.0),
        secondary=HSLColor(0.0, 5.0, 60.0),
        glow=HSLColor(0.0, 15.0, 80.0),
        amplitude_range=ValueRange(0.1, 0.3),
        speed_multiplier=0.4,
        spacing_mode=SpacingMode.UNIFORM,
        wave_pattern=WavePattern.BREATHING.value,
        glow_intensity=0.1,
    ),
    EmotionType.ANGRY.value: EmotionColorPreset(
        primary=HSLColor(0.0, 95.0, 60.0),
        secondary=HSLColor(10.0, 90.0, 50.0),
        glow=HSLColor(0.0, 100.0, 70.0),
        amplitude_range=ValueRange(0.9, 1.0),
        speed_multiplier=1.5,
        spacing_mode=SpacingMode.IRREGULAR,
        wave_pattern=WavePattern.SHAKING.value,
        glow_intensity=1.0,
    ),
    EmotionType.EXCITED.value: EmotionColorPreset(
        primary=HSLColor(60.0, 85.0, 80.0),
        secondary=HSLColor(50.0, 80.0, 70.0),
        glow=HSLColor(60.0, 90.0, 85.0),
        amplitude_range=ValueRange(0.7, 1.0),
        speed_multiplier=1.8,
        spacing_mode=SpacingMode.JUMPING,
        wave_pattern=WavePattern.PULSING.value,
        glow_intensity=0.9,
    ),
    EmotionType.NEUTRAL.value: EmotionColorPreset(
        primary=HSLColor(210.0, 30.0, 50.0),
        secondary=HSLColor(220.0, 25.0, 40.0),
        glow=HSLColor(210.0, 35.0, 55.0),
        amplitude_range=ValueRange(0.2, 0.4),
        speed_multiplier=0.8,
        spacing_mode=SpacingMode.UNIFORM,
        wave_pattern=WavePattern.BREATHING.value,
        glow_intensity=0.2,
    ),
})
