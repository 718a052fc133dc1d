"""
Multiband spectrum aggregation.

Groups FFT bins into power-law spaced bands (narrow at the bottom,
wide at the top) and smooths each band independently, giving renderers
one ready-to-draw value per bar.
"""

import numpy as np

from vocalwave.errors import require
from vocalwave.utils.numeric import ema, normalize_decibels

# Exponent of the power-law band boundary function.
BAND_EXPONENT = 1.5


def band_edges(band_count: int, total_bins: int) -> tuple[np.ndarray, np.ndarray]:
    """
    Start and end bin indices for each band.

    start(i) = floor((i / band_count) ** 1.5 * total_bins). Short buffers
    produce empty ranges for some low bands rather than an overflow.

    Returns:
        (starts, ends) integer arrays of length band_count.
    """
    ratios = (np.arange(band_count + 1) / band_count) ** BAND_EXPONENT
    boundaries = np.minimum(np.floor(ratios * total_bins).astype(int), total_bins)
    return boundaries[:-1], boundaries[1:]


class MultibandProcessor:
    """Aggregates a decibel spectrum into smoothed [0, 1] bands."""

    def __init__(
        self,
        band_count: int = 24,
        min_db: float = -90.0,
        max_db: float = -10.0,
        smoothing_factor: float = 0.7,
    ):
        """
        Initialize the processor.

        Args:
            band_count: Number of output bands.
            min_db: Decibel floor mapped to 0.
            max_db: Decibel ceiling mapped to 1.
            smoothing_factor: Per-band EMA weight of the previous value.
        """
        require(min_db < max_db, f"min_db ({min_db}) must be below max_db ({max_db})")
        require(
            0.0 <= smoothing_factor <= 1.0,
            f"band smoothing must be in [0, 1], got {smoothing_factor}",
        )
        self.min_db = min_db
        self.max_db = max_db
        self.smoothing_factor = smoothing_factor
        self.set_band_count(band_count)

    @property
    def band_count(self) -> int:
        return self._band_count

    def set_band_count(self, count: int) -> None:
        """Change the number of bands; smoothing state starts over at zero."""
        require(int(count) == count and count >= 1, f"band_count must be a positive integer, got {count}")
        self._band_count = int(count)
        self._smoothed = np.zeros(self._band_count)

    def process(self, frequency_data) -> np.ndarray:
        """
        Aggregate one frame.

        Args:
            frequency_data: Magnitudes in decibels.

        Returns:
            Array of band_count values in [0, 1]. An empty buffer yields
            zeros and leaves smoothing state untouched.
        """
        db = np.asarray(frequency_data, dtype=np.float64)
        if db.size == 0:
            return np.zeros(self._band_count)

        normalized = normalize_decibels(db, self.min_db, self.max_db)
        starts, ends = band_edges(self._band_count, normalized.size)

        cumulative = np.concatenate(([0.0], np.cumsum(normalized)))
        counts = ends - starts
        sums = cumulative[ends] - cumulative[starts]
        bands = np.zeros(self._band_count)
        np.divide(sums, counts, out=bands, where=counts > 0)

        self._smoothed = ema(self._smoothed, bands, self.smoothing_factor)
        return np.clip(self._smoothed, 0.0, 1.0)

    def reset(self) -> None:
        self._smoothed = np.zeros(self._band_count)
