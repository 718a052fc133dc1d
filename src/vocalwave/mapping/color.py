"""
Color channel: emotion -> HSL palette.

Looks up the preset for the current emotion and lifts saturation and
lightness with arousal. Also owns the preset registry shared with the
other channels.
"""

import logging
from types import MappingProxyType
from typing import Mapping

from vocalwave.core.emotion import EmotionData, EmotionType
from vocalwave.mapping.params import DEFAULT_COLOR, ColorParams
from vocalwave.mapping.presets import EMOTION_PRESETS, EmotionColorPreset, preset_key
from vocalwave.utils.hsl import HSLColor, blend_hsl
from vocalwave.utils.numeric import clamp

logger = logging.getLogger(__name__)

# (saturation, lightness) gain per unit of arousal.
PRIMARY_AROUSAL_GAIN = (10.0, 5.0)
SECONDARY_AROUSAL_GAIN = (8.0, 5.0)
GLOW_AROUSAL_GAIN = (5.0, 5.0)


def _lift(color: HSLColor, arousal: float, gain: tuple[float, float]) -> HSLColor:
    saturation_gain, lightness_gain = gain
    return HSLColor(
        hue=color.hue,
        saturation=clamp(color.saturation + arousal * saturation_gain, 0.0, 100.0),
        lightness=clamp(color.lightness + arousal * lightness_gain, 0.0, 100.0),
    )


class ColorChannel:
    """Maps EmotionData to ColorParams."""

    def __init__(self, presets: Mapping[str, EmotionColorPreset] = EMOTION_PRESETS):
        """
        Args:
            presets: Initial preset table; the channel keeps its own copy.
        """
        self._presets: dict[str, EmotionColorPreset] = {
            preset_key(name): preset for name, preset in presets.items()
        }

    def get_preset(self, name) -> EmotionColorPreset | None:
        return self._presets.get(preset_key(name))

    def get_presets(self) -> Mapping[str, EmotionColorPreset]:
        """Read-only view of all registered presets."""
        return MappingProxyType(self._presets)

    def register_preset(self, name, preset: EmotionColorPreset) -> None:
        """Add or replace a preset."""
        key = preset_key(name)
        action = "Replaced" if key in self._presets else "Registered"
        self._presets[key] = preset
        logger.debug("%s emotion preset %r", action, key)

    def map(self, emotion: EmotionData) -> ColorParams:
        """
        Color for a single emotion.

        Unknown emotions fall back to the neutral preset (unmodified), then
        to the built-in neutral palette.
        """
        preset = self.get_preset(emotion.type)
        if preset is None:
            neutral = self.get_preset(EmotionType.NEUTRAL)
            if neutral is not None:
                return ColorParams(primary=neutral.primary, secondary=neutral.secondary, glow=neutral.glow)
            return DEFAULT_COLOR

        arousal = emotion.arousal
        return ColorParams(
            primary=_lift(preset.primary, arousal, PRIMARY_AROUSAL_GAIN),
            secondary=_lift(preset.secondary, arousal, SECONDARY_AROUSAL_GAIN),
            glow=_lift(preset.glow, arousal, GLOW_AROUSAL_GAIN),
        )

    def map_blended(self, weights: Mapping[str, float]) -> ColorParams:
        """
        Color for a weighted mix of emotions.

        Example: {"happy": 0.7, "excited": 0.3}. Names without a preset and
        non-positive weights are skipped.
        """
        primaries = []
        secondaries = []
        glows = []

        for name, weight in weights.items():
            preset = self.get_preset(name)
            if preset is not None and weight > 0:
                primaries.append((preset.primary, weight))
                secondaries.append((preset.secondary, weight))
                glows.append((preset.glow, weight))

        return ColorParams(
            primary=blend_hsl(primaries),
            secondary=blend_hsl(secondaries),
            glow=blend_hsl(glows),
        )
