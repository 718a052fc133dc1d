"""
Visual parameter sets produced by the three mapping channels.

Each channel owns one disjoint set: color (emotion -> hue), shape
(volume/pitch -> form) and dynamic (rhythm -> motion).
"""

from dataclasses import dataclass
from enum import Enum

from vocalwave.errors import ConfigurationError, require
from vocalwave.utils.hsl import HSLColor


class SpacingMode(str, Enum):
    """How bars or curves are laid out."""

    UNIFORM = "uniform"
    TIGHT = "tight"
    SPARSE = "sparse"
    IRREGULAR = "irregular"
    JUMPING = "jumping"


class WavePattern(str, Enum):
    """Amplitude modulation style."""

    STEADY = "steady"
    ACTIVE = "active"
    SLOW = "slow"
    SHAKING = "shaking"
    PULSING = "pulsing"
    BREATHING = "breathing"


@dataclass(frozen=True)
class ValueRange:
    """Closed interval [min, max]."""

    min: float
    max: float

    def __post_init__(self):
        require(self.min <= self.max, f"Inverted range ({self.min}, {self.max})")

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) / 2

    @classmethod
    def of(cls, value) -> "ValueRange":
        """Accept a ValueRange, a (min, max) pair or a {"min", "max"} mapping."""
        if isinstance(value, cls):
            return value
        try:
            if isinstance(value, dict):
                low, high = value["min"], value["max"]
            else:
                low, high = value
            low, high = float(low), float(high)
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid range {value!r}: expected (min, max)") from e
        return cls(low, high)


@dataclass(frozen=True)
class ColorParams:
    """Channel 1 output."""

    primary: HSLColor
    secondary: HSLColor
    glow: HSLColor


@dataclass(frozen=True)
class ShapeParams:
    """Channel 2 output."""

    amplitude: float   # [0.0, 1.0]
    spacing: float     # Gap between elements, in spacing-range units
    active_count: int  # Number of lit bars
    variance: float    # Height variation between bars, [0.0, 1.0]
    spacing_mode: SpacingMode


@dataclass(frozen=True)
class DynamicParams:
    """Channel 3 output."""

    speed_multiplier: float
    wave_pattern: str  # WavePattern value or a registered custom pattern
    glow_intensity: float       # [0.0, 1.0]
    transition_duration: float  # Milliseconds


DEFAULT_COLOR = ColorParams(
    primary=HSLColor(210.0, 30.0, 50.0),
    secondary=HSLColor(220.0, 25.0, 40.0),
    glow=HSLColor(210.0, 35.0, 55.0),
)

DEFAULT_SHAPE = ShapeParams(
    amplitude=0.3,
    spacing=5.0,
    active_count=12,
    variance=0.2,
    spacing_mode=SpacingMode.UNIFORM,
)

DEFAULT_DYNAMIC = DynamicParams(
    speed_multiplier=0.8,
    wave_pattern=WavePattern.BREATHING.value,
    glow_intensity=0.2,
    transition_duration=500.0,
)
