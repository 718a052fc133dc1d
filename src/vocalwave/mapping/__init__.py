"""Feature -> visual parameter mapping."""

from vocalwave.mapping.color import ColorChannel
from vocalwave.mapping.dynamic import DynamicChannel, WavePatternDefinition
from vocalwave.mapping.interpolator import UnifiedInterpolator, VisualParams
from vocalwave.mapping.params import (
    ColorParams,
    DynamicParams,
    ShapeParams,
    SpacingMode,
    ValueRange,
    WavePattern,
)
from vocalwave.mapping.presets import EMOTION_PRESETS, EmotionColorPreset
from vocalwave.mapping.shape import ShapeChannel

__all__ = [
    "ColorChannel",
    "DynamicChannel",
    "WavePatternDefinition",
    "UnifiedInterpolator",
    "VisualParams",
    "ColorParams",
    "DynamicParams",
    "ShapeParams",
    "SpacingMode",
    "ValueRange",
    "WavePattern",
    "EMOTION_PRESETS",
    "EmotionColorPreset",
    "ShapeChannel",
]
