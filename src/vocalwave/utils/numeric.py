"""
Numeric helpers shared by the extractors and mapping channels.

Scalar helpers return plain floats; the decibel normalizer accepts arrays
so extractors can stay vectorized.
"""

import math

import numpy as np


def clamp(value: float, low: float, high: float) -> float:
    """Constrain value to [low, high]."""
    return min(max(value, low), high)


def map_range(
    value: float,
    in_min: float,
    in_max: float,
    out_min: float,
    out_max: float,
) -> float:
    """
    Linearly remap value from [in_min, in_max] onto [out_min, out_max].

    Passing out_min > out_max gives an inverse mapping. A zero-width
    input range maps everything to out_min.
    """
    span = in_max - in_min
    if span == 0:
        return out_min
    normalized = (value - in_min) / span
    return out_min + normalized * (out_max - out_min)


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation with t clamped to [0, 1]."""
    return a + (b - a) * clamp(t, 0.0, 1.0)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity."""
    return int(math.floor(value + 0.5))


def ema(previous, sample, factor: float):
    """Exponential moving average step: factor * previous + (1 - factor) * sample."""
    return factor * previous + (1.0 - factor) * sample


def time_lerp_factor(speed: float, delta_ms: float) -> float:
    """
    Frame-rate independent blend factor.

    Uses exponential decay, 1 - exp(-speed * dt), so the same wall-clock
    interval converges equally whether it is covered by one frame or many.

    Args:
        speed: Convergence rate per second.
        delta_ms: Elapsed time in milliseconds.

    Returns:
        Blend factor in [0, 1].
    """
    return clamp(1.0 - math.exp(-speed * delta_ms / 1000.0), 0.0, 1.0)


def normalize_decibels(
    values,
    min_db: float,
    max_db: float,
) -> np.ndarray:
    """
    Map decibel magnitudes onto [0, 1].

    -inf (digital silence) and NaN bins land on 0, +inf on 1.

    Args:
        values: Scalar or array of decibel values.
        min_db: Decibel level mapped to 0.
        max_db: Decibel level mapped to 1.

    Returns:
        Array of normalized values, same shape as the input.
    """
    db = np.nan_to_num(
        np.asarray(values, dtype=np.float64),
        nan=min_db,
        posinf=max_db,
        neginf=min_db,
    )
    return np.clip((db - min_db) / (max_db - min_db), 0.0, 1.0)
