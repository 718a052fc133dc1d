"""
Pipeline configuration.

Grouped dataclasses with validated defaults. A JSON file with the same
nested layout (snake_case keys, every key optional) can be loaded with
load_config():

    {
        "audio": {"fft_size": 2048, "band_count": 32},
        "pitch": {"algorithm": "autocorrelation"},
        "vad": {"threshold": 0.02},
        "mapping": {
            "initial_emotion": "calm",
            "presets": {"focused": {...}}
        },
        "animation": {"fps": 30, "lerp_speed": 8.0}
    }
"""

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping, Union

from vocalwave.core.emotion import EmotionType, parse_emotion
from vocalwave.core.pitch import PITCH_ALGORITHMS
from vocalwave.errors import ConfigurationError, require
from vocalwave.mapping.params import ValueRange
from vocalwave.mapping.presets import EmotionColorPreset


def _require_unit(name: str, value: float) -> None:
    require(0.0 <= value <= 1.0, f"{name} must be in [0, 1], got {value}")


@dataclass
class AudioConfig:
    """Analyser and spectrum processing settings."""

    fft_size: int = 2048
    smoothing_time_constant: float = 0.8  # Capture smoothing and volume EMA
    min_decibels: float = -90.0
    max_decibels: float = -10.0
    band_count: int = 24
    band_smoothing: float = 0.7
    peak_decay: float = 0.995
    silence_floor: float = 1e-4  # Time-domain peak below which a frame is silent

    def __post_init__(self):
        require(
            self.fft_size >= 32 and self.fft_size & (self.fft_size - 1) == 0,
            f"fft_size must be a power of two >= 32, got {self.fft_size}",
        )
        require(
            self.min_decibels < self.max_decibels,
            f"min_decibels ({self.min_decibels}) must be below max_decibels ({self.max_decibels})",
        )
        require(self.band_count >= 1, f"band_count must be positive, got {self.band_count}")
        require(self.silence_floor >= 0, f"silence_floor must be non-negative, got {self.silence_floor}")
        _require_unit("smoothing_time_constant", self.smoothing_time_constant)
        _require_unit("band_smoothing", self.band_smoothing)
        _require_unit("peak_decay", self.peak_decay)


@dataclass
class PitchConfig:
    """Pitch detector settings."""

    algorithm: str = "yin"
    min_frequency: float = 80.0
    max_frequency: float = 600.0
    confidence_threshold: float = 0.8

    def __post_init__(self):
        require(
            self.algorithm in PITCH_ALGORITHMS,
            f"Unknown pitch algorithm {self.algorithm!r}, expected one of {PITCH_ALGORITHMS}",
        )
        require(
            0 < self.min_frequency < self.max_frequency,
            f"Invalid frequency range ({self.min_frequency}, {self.max_frequency})",
        )
        _require_unit("confidence_threshold", self.confidence_threshold)


@dataclass
class VADConfig:
    """Voice activity detection settings."""

    threshold: float = 0.01
    window_size: int = 30

    def __post_init__(self):
        _require_unit("vad threshold", self.threshold)
        require(
            int(self.window_size) == self.window_size and self.window_size >= 1,
            f"window_size must be a positive integer, got {self.window_size}",
        )


@dataclass
class MappingConfig:
    """Channel output ranges, emotion settings and custom presets."""

    amplitude_range: ValueRange = ValueRange(0.0, 1.0)
    spacing_range: ValueRange = ValueRange(1.0, 10.0)
    speed_range: ValueRange = ValueRange(0.4, 1.8)
    transition_range: ValueRange = ValueRange(200.0, 800.0)  # Milliseconds
    emotion_smoothing: float = 0.9
    initial_emotion: EmotionType = EmotionType.NEUTRAL
    presets: dict[str, EmotionColorPreset] = field(default_factory=dict)

    def __post_init__(self):
        self.amplitude_range = ValueRange.of(self.amplitude_range)
        self.spacing_range = ValueRange.of(self.spacing_range)
        self.speed_range = ValueRange.of(self.speed_range)
        self.transition_range = ValueRange.of(self.transition_range)
        self.initial_emotion = parse_emotion(self.initial_emotion)
        _require_unit("emotion_smoothing", self.emotion_smoothing)
        self.presets = {
            str(name): preset if isinstance(preset, EmotionColorPreset) else EmotionColorPreset.from_dict(preset)
            for name, preset in self.presets.items()
        }


@dataclass
class AnimationConfig:
    """Frame timing and interpolation settings."""

    fps: int = 60
    lerp_speed: float = 5.0
    seed: int | None = None  # Seed for randomized wave patterns

    def __post_init__(self):
        require(self.fps > 0, f"fps must be positive, got {self.fps}")
        require(self.lerp_speed > 0, f"lerp_speed must be positive, got {self.lerp_speed}")


@dataclass
class PipelineConfig:
    """Complete configuration for a VoicePipeline."""

    audio: AudioConfig = field(default_factory=AudioConfig)
    pitch: PitchConfig = field(default_factory=PitchConfig)
    vad: VADConfig = field(default_factory=VADConfig)
    mapping: MappingConfig = field(default_factory=MappingConfig)
    animation: AnimationConfig = field(default_factory=AnimationConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PipelineConfig":
        """
        Build a configuration from nested mappings.

        Raises:
            ConfigurationError: Unknown sections or keys, or invalid values.
        """
        sections = {f.name: f for f in fields(cls)}
        unknown = set(data) - set(sections)
        if unknown:
            raise ConfigurationError(f"Unknown config sections: {sorted(unknown)}")

        kwargs = {}
        for name, values in data.items():
            section_type = sections[name].default_factory
            if not isinstance(values, Mapping):
                raise ConfigurationError(f"Config section {name!r} must be an object")
            allowed = {f.name for f in fields(section_type)}
            bad_keys = set(values) - allowed
            if bad_keys:
                raise ConfigurationError(f"Unknown keys in {name!r}: {sorted(bad_keys)}")
            try:
                kwargs[name] = section_type(**values)
            except (TypeError, KeyError) as e:
                raise ConfigurationError(f"Invalid {name!r} section: {e}") from e
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable summary (custom presets listed by name)."""
        mapping = self.mapping
        return {
            "audio": vars(self.audio).copy(),
            "pitch": vars(self.pitch).copy(),
            "vad": vars(self.vad).copy(),
            "mapping": {
                "amplitude_range": [mapping.amplitude_range.min, mapping.amplitude_range.max],
                "spacing_range": [mapping.spacing_range.min, mapping.spacing_range.max],
                "speed_range": [mapping.speed_range.min, mapping.speed_range.max],
                "transition_range": [mapping.transition_range.min, mapping.transition_range.max],
                "emotion_smoothing": mapping.emotion_smoothing,
                "initial_emotion": mapping.initial_emotion.value,
                "presets": sorted(mapping.presets),
            },
            "animation": vars(self.animation).copy(),
        }


def load_config(path: Union[str, Path]) -> PipelineConfig:
    """
    Load a PipelineConfig from a JSON file.

    Raises:
        FileNotFoundError: The file does not exist.
        ConfigurationError: The file is not valid JSON or has invalid values.
    """
    path = Path(path)
    with open(path) as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Config root in {path} must be an object")
    return PipelineConfig.from_dict(data)
