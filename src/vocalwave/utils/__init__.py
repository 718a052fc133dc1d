"""Numeric and color helpers."""

from vocalwave.utils.hsl import HSLColor, blend_hsl, hsl, lerp_hsl
from vocalwave.utils.numeric import clamp, lerp, map_range, normalize_decibels

__all__ = [
    "HSLColor",
    "blend_hsl",
    "hsl",
    "lerp_hsl",
    "clamp",
    "lerp",
    "map_range",
    "normalize_decibels",
]
