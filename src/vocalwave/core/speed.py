"""
Speech-rate estimation via voice-activity detection.

A frame is active when its mean normalized spectral energy exceeds a
threshold; the fraction of active frames over a trailing window stands in
for speaking rate.
"""

import time
from collections import deque
from dataclasses import dataclass

import numpy as np

from vocalwave.errors import require
from vocalwave.utils.numeric import clamp


@dataclass(frozen=True)
class SpeedData:
    """Per-frame speech activity."""

    activity_rate: float  # Fraction of active frames in the window, [0.0, 1.0]
    change_rate: float    # Change of activity_rate per second
    is_active: bool       # VAD decision for this frame


class SpeedExtractor:
    """Sliding-window energy VAD."""

    def __init__(
        self,
        threshold: float = 0.01,
        window_size: int = 30,
        min_db: float = -90.0,
        max_db: float = -10.0,
    ):
        """
        Initialize the detector.

        Args:
            threshold: Mean normalized energy above which a frame is active.
            window_size: Number of trailing frames in the activity window.
            min_db: Decibel floor mapped to 0.
            max_db: Decibel ceiling mapped to 1.
        """
        require(min_db < max_db, f"min_db ({min_db}) must be below max_db ({max_db})")
        self.min_db = min_db
        self.max_db = max_db
        self.set_threshold(threshold)
        self._history: deque[bool] = deque(maxlen=self._validated_window(window_size))
        self._last_activity_rate = 0.0
        self._last_timestamp: float | None = None

    @staticmethod
    def _validated_window(size: int) -> int:
        require(int(size) == size and size >= 1, f"window_size must be a positive integer, got {size}")
        return int(size)

    @property
    def window_size(self) -> int:
        return self._history.maxlen

    @property
    def history(self) -> tuple[bool, ...]:
        """Snapshot of the trailing activity window, oldest first."""
        return tuple(self._history)

    def set_threshold(self, threshold: float) -> None:
        require(0.0 <= threshold <= 1.0, f"VAD threshold must be in [0, 1], got {threshold}")
        self.threshold = threshold

    def set_window_size(self, size: int) -> None:
        """Resize the window, keeping the newest decisions."""
        self._history = deque(self._history, maxlen=self._validated_window(size))

    def frame_energy(self, frequency_data: np.ndarray) -> float:
        """Mean normalized energy of a frame; bins below the floor count as zero."""
        db = np.nan_to_num(frequency_data, nan=self.min_db, neginf=self.min_db, posinf=self.max_db)
        normalized = (db - self.min_db) / (self.max_db - self.min_db)
        return float(np.mean(np.maximum(normalized, 0.0)))

    def extract(self, frequency_data, timestamp: float | None = None) -> SpeedData:
        """
        Update the activity window with one frame.

        Args:
            frequency_data: Magnitudes in decibels.
            timestamp: Frame time in seconds (defaults to a monotonic clock).

        Returns:
            SpeedData. An empty buffer yields zeros and leaves history untouched.
        """
        db = np.asarray(frequency_data, dtype=np.float64)
        if db.size == 0:
            return SpeedData(activity_rate=0.0, change_rate=0.0, is_active=False)

        is_active = self.frame_energy(db) > self.threshold
        self._history.append(is_active)

        activity_rate = sum(self._history) / len(self._history)

        now = time.perf_counter() if timestamp is None else timestamp
        change_rate = 0.0
        if self._last_timestamp is not None:
            elapsed = now - self._last_timestamp
            if elapsed > 0:
                change_rate = (activity_rate - self._last_activity_rate) / elapsed
        self._last_activity_rate = activity_rate
        self._last_timestamp = now

        return SpeedData(
            activity_rate=clamp(activity_rate, 0.0, 1.0),
            change_rate=change_rate,
            is_active=is_active,
        )

    def reset(self) -> None:
        """Empty the window and forget the previous frame."""
        self._history.clear()
        self._last_activity_rate = 0.0
        self._last_timestamp = None
