"""
Volume feature extraction.

Computes RMS and peak loudness in the normalized decibel domain from a
frequency-domain buffer, with EMA smoothing and a peak envelope follower.
"""

from dataclasses import dataclass

import numpy as np

from vocalwave.errors import require
from vocalwave.utils.numeric import clamp, ema, normalize_decibels


@dataclass(frozen=True)
class VolumeData:
    """Per-frame loudness, all values in [0.0, 1.0]."""

    rms: float
    peak: float      # Peak envelope (instant attack, slow release)
    smoothed: float  # EMA of rms across frames


class VolumeExtractor:
    """
    Extracts loudness from decibel spectra.

    Each bin is normalized against the [min_db, max_db] window, so the
    result tracks perceived level rather than raw linear amplitude.
    """

    def __init__(
        self,
        smoothing_factor: float = 0.8,
        min_db: float = -90.0,
        max_db: float = -10.0,
        peak_decay: float = 0.995,
    ):
        """
        Initialize the extractor.

        Args:
            smoothing_factor: EMA weight of the previous smoothed value.
            min_db: Decibel floor mapped to 0.
            max_db: Decibel ceiling mapped to 1.
            peak_decay: Per-frame multiplier applied to the held peak.
        """
        require(min_db < max_db, f"min_db ({min_db}) must be below max_db ({max_db})")
        require(0.0 <= peak_decay <= 1.0, f"peak_decay must be in [0, 1], got {peak_decay}")
        self.min_db = min_db
        self.max_db = max_db
        self.peak_decay = peak_decay
        self.set_smoothing_factor(smoothing_factor)

        self._current_volume = 0.0
        self._peak_volume = 0.0

    def set_smoothing_factor(self, factor: float) -> None:
        require(0.0 <= factor <= 1.0, f"smoothing factor must be in [0, 1], got {factor}")
        self.smoothing_factor = factor

    def extract(self, frequency_data) -> VolumeData:
        """
        Extract loudness from one frequency-domain frame.

        Args:
            frequency_data: Magnitudes in decibels.

        Returns:
            VolumeData. An empty buffer yields zeros and leaves state untouched.
        """
        db = np.asarray(frequency_data, dtype=np.float64)
        if db.size == 0:
            return VolumeData(rms=0.0, peak=0.0, smoothed=0.0)

        normalized = normalize_decibels(db, self.min_db, self.max_db)
        rms = float(np.sqrt(np.mean(normalized ** 2)))
        peak = float(normalize_decibels(np.max(db), self.min_db, self.max_db))

        self._current_volume = ema(self._current_volume, rms, self.smoothing_factor)
        self._peak_volume = max(peak, self._peak_volume * self.peak_decay)

        return VolumeData(
            rms=clamp(rms, 0.0, 1.0),
            peak=clamp(self._peak_volume, 0.0, 1.0),
            smoothed=clamp(self._current_volume, 0.0, 1.0),
        )

    def reset(self) -> None:
        """Clear the smoothed level and the held peak."""
        self._current_volume = 0.0
        self._peak_volume = 0.0
