"""
HSL color helpers.

Hue is in degrees [0, 360), saturation and lightness are percentages
[0, 100], matching CSS hsl() notation.
"""

import colorsys
import math
from dataclasses import dataclass
from typing import Iterable, Tuple

from vocalwave.utils.numeric import clamp, lerp


@dataclass(frozen=True)
class HSLColor:
    """A single HSL color."""

    hue: float
    saturation: float
    lightness: float


def wrap_hue(hue: float) -> float:
    """Wrap any angle into [0, 360)."""
    return ((hue % 360.0) + 360.0) % 360.0


def hsl(hue: float, saturation: float, lightness: float) -> HSLColor:
    """Build an HSLColor with the hue wrapped and the percentages clamped."""
    return HSLColor(
        hue=wrap_hue(hue),
        saturation=clamp(saturation, 0.0, 100.0),
        lightness=clamp(lightness, 0.0, 100.0),
    )


def hsl_to_string(color: HSLColor) -> str:
    """CSS hsl() string."""
    return f"hsl({color.hue:g}, {color.saturation:g}%, {color.lightness:g}%)"


def hsla_to_string(color: HSLColor, alpha: float) -> str:
    """CSS hsla() string with alpha clamped to [0, 1]."""
    return (
        f"hsla({color.hue:g}, {color.saturation:g}%, "
        f"{color.lightness:g}%, {clamp(alpha, 0.0, 1.0):g})"
    )


def hsl_to_rgb(color: HSLColor) -> Tuple[int, int, int]:
    """Convert to an 8-bit RGB triple."""
    r, g, b = colorsys.hls_to_rgb(
        color.hue / 360.0,
        color.lightness / 100.0,
        color.saturation / 100.0,
    )
    return (round(r * 255), round(g * 255), round(b * 255))


def lerp_hsl(a: HSLColor, b: HSLColor, t: float) -> HSLColor:
    """
    Interpolate two colors.

    Hue travels along the shortest arc of the color wheel, so 350 -> 10
    passes through 0 rather than sweeping through green.
    """
    hue_diff = b.hue - a.hue
    if hue_diff > 180.0:
        hue_diff -= 360.0
    if hue_diff < -180.0:
        hue_diff += 360.0

    return HSLColor(
        hue=wrap_hue(a.hue + hue_diff * clamp(t, 0.0, 1.0)),
        saturation=lerp(a.saturation, b.saturation, t),
        lightness=lerp(a.lightness, b.lightness, t),
    )


def adjust_lightness(color: HSLColor, delta: float) -> HSLColor:
    return HSLColor(color.hue, color.saturation, clamp(color.lightness + delta, 0.0, 100.0))


def adjust_saturation(color: HSLColor, delta: float) -> HSLColor:
    return HSLColor(color.hue, clamp(color.saturation + delta, 0.0, 100.0), color.lightness)


def blend_hsl(colors: Iterable[Tuple[HSLColor, float]]) -> HSLColor:
    """
    Weighted blend of several colors.

    Hue is averaged as a vector sum of unit vectors on the color wheel
    (circular mean); saturation and lightness are plain weighted means.
    An empty or zero-weight input yields neutral grey.

    Args:
        colors: Iterable of (color, weight) pairs.

    Returns:
        The blended color.
    """
    total_weight = 0.0
    hue_x = 0.0
    hue_y = 0.0
    saturation = 0.0
    lightness = 0.0

    for color, weight in colors:
        total_weight += weight
        hue_rad = math.radians(color.hue)
        hue_x += math.cos(hue_rad) * weight
        hue_y += math.sin(hue_rad) * weight
        saturation += color.saturation * weight
        lightness += color.lightness * weight

    if total_weight == 0:
        return hsl(0.0, 0.0, 50.0)

    avg_hue = wrap_hue(math.degrees(math.atan2(hue_y / total_weight, hue_x / total_weight)))

    return HSLColor(
        hue=avg_hue,
        saturation=clamp(saturation / total_weight, 0.0, 100.0),
        lightness=clamp(lightness / total_weight, 0.0, 100.0),
    )
