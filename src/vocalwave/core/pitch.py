"""
Pitch (fundamental frequency) extraction.

Two interchangeable detectors operate on a time-domain buffer:

- autocorrelation: normalized cross-correlation over the candidate lags
- yin: cumulative-mean-normalized difference function with absolute
  threshold and parabolic refinement (de Cheveigne & Kawahara, 2002)

Both are vectorized with FFT-based correlation from scipy.
"""

import time
from dataclasses import dataclass

import numpy as np
from scipy import signal as scipy_signal

from vocalwave.errors import require
from vocalwave.utils.numeric import clamp

PITCH_ALGORITHMS = ("autocorrelation", "yin")

# Among lags whose correlation is within this distance of the best, the
# shortest local peak is reported, so an integer multiple of the true
# period is not taken as the pitch.
OCTAVE_TOLERANCE = 0.01


@dataclass(frozen=True)
class PitchData:
    """Per-frame pitch estimate."""

    frequency: float    # Hz, 0.0 when no pitch was detected
    confidence: float   # [0.0, 1.0]
    change_rate: float  # Hz per second


@dataclass(frozen=True)
class PitchEstimate:
    """Raw detector output before change-rate tracking."""

    frequency: float
    confidence: float


NO_PITCH = PitchEstimate(frequency=0.0, confidence=0.0)


class PitchExtractor:
    """
    Detects the fundamental frequency of a voice frame.

    The sample rate is fixed at construction; a new capture connection
    builds a new extractor.
    """

    def __init__(
        self,
        sample_rate: float = 44100,
        min_frequency: float = 80.0,
        max_frequency: float = 600.0,
        confidence_threshold: float = 0.8,
        algorithm: str = "yin",
    ):
        """
        Initialize the extractor.

        Args:
            sample_rate: Sample rate of the time-domain buffers in Hz.
            min_frequency: Lowest detectable pitch in Hz.
            max_frequency: Highest detectable pitch in Hz.
            confidence_threshold: Minimum normalized correlation for the
                autocorrelation detector; absolute threshold on the
                normalized difference function for YIN.
            algorithm: "yin" or "autocorrelation".
        """
        require(sample_rate > 0, f"sample_rate must be positive, got {sample_rate}")
        require(
            algorithm in PITCH_ALGORITHMS,
            f"Unknown pitch algorithm {algorithm!r}, expected one of {PITCH_ALGORITHMS}",
        )
        self.sample_rate = sample_rate
        self.algorithm = algorithm
        self.set_frequency_range(min_frequency, max_frequency)
        self.set_confidence_threshold(confidence_threshold)

        self._last_frequency = 0.0
        self._last_change_rate = 0.0
        self._last_timestamp: float | None = None

    def set_frequency_range(self, min_frequency: float, max_frequency: float) -> None:
        require(
            0 < min_frequency < max_frequency,
            f"Invalid frequency range ({min_frequency}, {max_frequency})",
        )
        self.min_frequency = min_frequency
        self.max_frequency = max_frequency

    def set_confidence_threshold(self, threshold: float) -> None:
        require(0.0 <= threshold <= 1.0, f"confidence threshold must be in [0, 1], got {threshold}")
        self.confidence_threshold = threshold

    def extract(self, time_domain_data, timestamp: float | None = None) -> PitchData:
        """
        Estimate pitch for one frame and track its rate of change.

        Args:
            time_domain_data: Samples normalized to [-1, 1].
            timestamp: Frame time in seconds (defaults to a monotonic clock).

        Returns:
            PitchData. An empty buffer yields zeros and leaves state untouched.
        """
        x = np.asarray(time_domain_data, dtype=np.float64)
        if x.size == 0:
            return PitchData(frequency=0.0, confidence=0.0, change_rate=0.0)

        if self.algorithm == "yin":
            estimate = self.detect_yin(x)
        else:
            estimate = self.detect_autocorrelation(x)

        now = time.perf_counter() if timestamp is None else timestamp
        elapsed = None if self._last_timestamp is None else now - self._last_timestamp

        if (
            elapsed is not None
            and elapsed > 0
            and self._last_frequency > 0
            and estimate.frequency > 0
        ):
            self._last_change_rate = (estimate.frequency - self._last_frequency) / elapsed
        else:
            self._last_change_rate = 0.0

        self._last_frequency = estimate.frequency
        self._last_timestamp = now

        return PitchData(
            frequency=estimate.frequency,
            confidence=estimate.confidence,
            change_rate=self._last_change_rate,
        )

    def _period_bounds(self) -> tuple[int, int]:
        """Candidate lag range in samples for the configured frequency range."""
        min_period = int(self.sample_rate // self.max_frequency)
        max_period = int(self.sample_rate // self.min_frequency)
        return min_period, max_period

    def detect_yin(self, x: np.ndarray) -> PitchEstimate:
        """
        YIN pitch detection.

        Step 1: difference function d(t) over the first half of the buffer.
        Step 2: cumulative-mean normalization d'(t) = d(t) * t / sum d(1..t).
        Step 3: first lag below the threshold, then descend to the local minimum.
        Step 4: parabolic interpolation around that minimum.
        """
        half = len(x) // 2
        min_period, max_period = self._period_bounds()
        start = max(2, min_period)
        stop = min(half, max_period)
        if stop <= start:
            return NO_PITCH

        frame = x[:half]
        lags = np.arange(half)

        # d(t) = sum x[i]^2 + sum x[i+t]^2 - 2 sum x[i] x[i+t], i < half
        cumulative = np.concatenate(([0.0], np.cumsum(x ** 2)))
        head_energy = cumulative[half]
        shifted_energy = cumulative[lags + half] - cumulative[lags]
        cross = scipy_signal.correlate(x[: 2 * half], frame, mode="valid", method="fft")[:half]
        diff = np.maximum(head_energy + shifted_energy - 2.0 * cross, 0.0)

        cmnd = np.ones(half)
        running = np.cumsum(diff[1:])
        tail = np.ones(half - 1)
        np.divide(diff[1:] * lags[1:], running, out=tail, where=running > 0)
        cmnd[1:] = tail

        below = np.flatnonzero(cmnd[start:stop] < self.confidence_threshold)
        if below.size == 0:
            return NO_PITCH

        tau = start + int(below[0])
        while tau + 1 < half and cmnd[tau + 1] < cmnd[tau]:
            tau += 1

        s0 = cmnd[tau - 1]
        s1 = cmnd[tau]
        s2 = cmnd[tau + 1] if tau + 1 < half else s1
        denominator = 2.0 * (s0 - 2.0 * s1 + s2)
        if denominator == 0:
            denominator = 1.0
        refined_tau = tau + (s0 - s2) / denominator
        if refined_tau <= 0:
            return NO_PITCH

        return PitchEstimate(
            frequency=float(clamp(self.sample_rate / refined_tau, self.min_frequency, self.max_frequency)),
            confidence=float(clamp(1.0 - float(s1), 0.0, 1.0)),
        )

    def detect_autocorrelation(self, x: np.ndarray) -> PitchEstimate:
        """
        Normalized autocorrelation pitch detection.

        For each lag t the correlation sum x[i] x[i+t] is normalized by
        sqrt(sum x[i]^2 * sum x[i+t]^2) over the overlapping region.
        """
        n = len(x)
        min_period, max_period = self._period_bounds()
        min_period = max(1, min_period)
        max_period = min(max_period, n // 2)
        if max_period < min_period:
            return NO_PITCH

        lags = np.arange(min_period, max_period + 1)
        full = scipy_signal.correlate(x, x, mode="full", method="fft")
        cross = full[n - 1 + lags]

        cumulative = np.cumsum(x ** 2)
        head_energy = cumulative[n - 1 - lags]
        tail_energy = cumulative[-1] - cumulative[lags - 1]
        denominator = np.sqrt(np.maximum(head_energy * tail_energy, 0.0))
        denominator[denominator == 0] = 1.0
        correlation = cross / denominator

        best = float(np.max(correlation))
        if best < self.confidence_threshold:
            return NO_PITCH

        left = np.concatenate(([-np.inf], correlation[:-1]))
        right = np.concatenate((correlation[1:], [-np.inf]))
        candidates = np.flatnonzero(
            (correlation >= left)
            & (correlation >= right)
            & (correlation >= best - OCTAVE_TOLERANCE)
        )
        index = int(candidates[0]) if candidates.size else int(np.argmax(correlation))
        return PitchEstimate(
            frequency=float(clamp(self.sample_rate / lags[index], self.min_frequency, self.max_frequency)),
            confidence=float(clamp(best, 0.0, 1.0)),
        )

    def reset(self) -> None:
        """Forget the previous frame."""
        self._last_frequency = 0.0
        self._last_change_rate = 0.0
        self._last_timestamp = None
