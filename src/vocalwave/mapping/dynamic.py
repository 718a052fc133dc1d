"""
Dynamic channel: speaking rhythm -> motion.

Activity rate drives animation speed and transition length, the volume
peak drives glow. The wave pattern comes from the active emotion preset
and is resolved to an amplitude modulator through a pattern registry.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from vocalwave.core.speed import SpeedData
from vocalwave.core.volume import VolumeData
from vocalwave.mapping.params import DynamicParams, ValueRange, WavePattern
from vocalwave.mapping.presets import EmotionColorPreset, preset_key
from vocalwave.utils.numeric import clamp, map_range

logger = logging.getLogger(__name__)

GLOW_GAIN = 1.2


@dataclass(frozen=True)
class WavePatternDefinition:
    """Amplitude modulator for a wave pattern."""

    modulate: Callable[[float, float], float]  # (phase, base_amplitude) -> amplitude
    description: str = ""


def builtin_patterns(rng: np.random.Generator) -> dict[str, WavePatternDefinition]:
    """Built-in modulators. `rng` supplies the jitter for the shaking pattern."""
    return {
        WavePattern.STEADY.value: WavePatternDefinition(
            lambda phase, base: base,
            "constant amplitude",
        ),
        WavePattern.ACTIVE.value: WavePatternDefinition(
            lambda phase, base: base * (0.8 + 0.2 * np.sin(phase * 8)),
            "lively bounce",
        ),
        WavePattern.SLOW.value: WavePatternDefinition(
            lambda phase, base: base * (0.7 + 0.3 * np.sin(phase * 2)),
            "slow swell",
        ),
        WavePattern.SHAKING.value: WavePatternDefinition(
            lambda phase, base: base * (0.6 + 0.4 * np.sin(phase * 15 + rng.random() * 0.5)),
            "violent tremor",
        ),
        WavePattern.PULSING.value: WavePatternDefinition(
            lambda phase, base: base * (0.5 + 0.5 * abs(np.sin(phase * 6))),
            "fast pulse",
        ),
        WavePattern.BREATHING.value: WavePatternDefinition(
            lambda phase, base: base * (0.8 + 0.2 * np.sin(phase * 1.5)),
            "steady breathing",
        ),
    }


class DynamicChannel:
    """Maps speed and volume features to DynamicParams."""

    def __init__(
        self,
        speed_range=ValueRange(0.4, 1.8),
        transition_range=ValueRange(200.0, 800.0),
        seed: Optional[int] = None,
    ):
        """
        Initialize the channel.

        Args:
            speed_range: Animation speed multiplier range.
            transition_range: Transition duration range in milliseconds.
            seed: Seed for the shaking pattern jitter.
        """
        self.set_speed_range(speed_range)
        self.transition_range = ValueRange.of(transition_range)
        self._patterns = builtin_patterns(np.random.default_rng(seed))
        self.current_pattern: str = WavePattern.BREATHING.value

    def set_speed_range(self, value_range) -> None:
        self.speed_range = ValueRange.of(value_range)

    def apply_preset(self, preset: EmotionColorPreset) -> None:
        """Adopt an emotion's wave pattern."""
        self.current_pattern = preset_key(preset.wave_pattern)

    def register_pattern(self, name, definition: WavePatternDefinition) -> None:
        self._patterns[preset_key(name)] = definition
        logger.debug("Registered wave pattern %r", preset_key(name))

    def get_pattern_modulator(self, name) -> WavePatternDefinition:
        """Modulator for `name`; unknown patterns breathe."""
        return self._patterns.get(preset_key(name), self._patterns[WavePattern.BREATHING.value])

    @property
    def patterns(self) -> tuple[str, ...]:
        return tuple(self._patterns)

    def map(self, speed: SpeedData, volume: VolumeData) -> DynamicParams:
        low, high = self.speed_range.min, self.speed_range.max
        speed_multiplier = clamp(map_range(speed.activity_rate, 0.0, 1.0, low, high), low, high)

        transition_duration = map_range(
            speed.activity_rate,
            0.0,
            1.0,
            self.transition_range.max,
            self.transition_range.min,
        )

        return DynamicParams(
            speed_multiplier=speed_multiplier,
            wave_pattern=self.current_pattern,
            glow_intensity=clamp(volume.peak * GLOW_GAIN, 0.0, 1.0),
            transition_duration=transition_duration,
        )
