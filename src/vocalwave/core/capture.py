"""
Capture sources.

A capture source hands the pipeline two read-only snapshots per frame: a
decibel magnitude spectrum and a normalized time-domain buffer, plus the
sample rate. Live device capture lives outside this package; the
SignalCaptureSource here plays back an in-memory signal through the same
analyser model so recordings can be driven offline.
"""

import abc
import logging
from pathlib import Path
from typing import Union

import librosa
import numpy as np
from scipy import signal as scipy_signal

from vocalwave.errors import CaptureError, require

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 44100

# Magnitude floor before dB conversion (-200 dB); keeps log10 finite.
AMPLITUDE_FLOOR = 1e-10


class CaptureSource(abc.ABC):
    """Interface consumed by the pipeline."""

    @property
    @abc.abstractmethod
    def sample_rate(self) -> int:
        """Sample rate of the time-domain buffer in Hz."""

    @abc.abstractmethod
    def get_frequency_data(self) -> np.ndarray:
        """Current magnitude spectrum in decibels."""

    @abc.abstractmethod
    def get_time_domain_data(self) -> np.ndarray:
        """Current waveform, samples in [-1, 1]."""

    def disconnect(self) -> None:
        """Release the source. Default: nothing to release."""


class SignalCaptureSource(CaptureSource):
    """
    Analyser over an in-memory mono signal.

    A read cursor moves through the signal; each snapshot covers the
    fft_size samples ending at the cursor. The spectrum is a
    Blackman-windowed FFT magnitude, smoothed over successive snapshots
    and converted to decibels.
    """

    def __init__(
        self,
        samples: np.ndarray,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        fft_size: int = 2048,
        smoothing_time_constant: float = 0.8,
    ):
        """
        Initialize the source.

        Args:
            samples: Mono audio, normalized to [-1, 1].
            sample_rate: Sample rate of ``samples`` in Hz.
            fft_size: Analysis window length; must be a power of two.
            smoothing_time_constant: Weight of the previous spectrum.
        """
        require(sample_rate > 0, f"sample_rate must be positive, got {sample_rate}")
        require(
            fft_size >= 32 and fft_size & (fft_size - 1) == 0,
            f"fft_size must be a power of two >= 32, got {fft_size}",
        )
        require(
            0.0 <= smoothing_time_constant <= 1.0,
            f"smoothing_time_constant must be in [0, 1], got {smoothing_time_constant}",
        )
        self.samples = np.asarray(samples, dtype=np.float64)
        require(self.samples.ndim == 1, "SignalCaptureSource expects a mono signal")

        self._sample_rate = int(sample_rate)
        self.fft_size = fft_size
        self.smoothing_time_constant = smoothing_time_constant
        self.window = scipy_signal.get_window("blackman", fft_size)

        self._cursor = 0
        self._smoothed_magnitude = np.zeros(fft_size // 2)

    @classmethod
    def from_file(
        cls,
        audio_path: Union[str, Path],
        sample_rate: int | None = None,
        **kwargs,
    ) -> "SignalCaptureSource":
        """
        Load an audio file (wav, flac, mp3) as a capture source.

        Args:
            audio_path: Path to the audio file.
            sample_rate: Target sample rate. None preserves the original.
            **kwargs: Forwarded to the constructor.
        """
        audio_path = Path(audio_path)
        if not audio_path.exists():
            raise CaptureError(f"Audio file not found: {audio_path}")

        y, sr = librosa.load(audio_path, sr=sample_rate, mono=True)
        logger.debug("Loaded %s: %d samples at %d Hz", audio_path, len(y), sr)
        return cls(y, sample_rate=sr, **kwargs)

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def duration(self) -> float:
        """Signal length in seconds."""
        return librosa.get_duration(y=self.samples, sr=self._sample_rate)

    @property
    def position(self) -> float:
        """Cursor position in seconds."""
        return self._cursor / self._sample_rate

    @property
    def finished(self) -> bool:
        return self._cursor >= len(self.samples)

    def seek(self, seconds: float) -> None:
        self._cursor = int(np.clip(round(seconds * self._sample_rate), 0, len(self.samples)))

    def advance(self, seconds: float) -> None:
        self.seek(self.position + seconds)

    def get_time_domain_data(self) -> np.ndarray:
        """Last fft_size samples up to the cursor, zero-padded at the start."""
        start = self._cursor - self.fft_size
        if start >= 0:
            return self.samples[start:self._cursor].copy()

        frame = np.zeros(self.fft_size)
        available = self.samples[:self._cursor]
        if available.size:
            frame[-available.size:] = available
        return frame

    def get_frequency_data(self) -> np.ndarray:
        """
        Smoothed magnitude spectrum in decibels.

        Returns:
            fft_size // 2 bins from DC up to just below Nyquist.
        """
        frame = self.get_time_domain_data() * self.window
        magnitude = np.abs(np.fft.rfft(frame))[: self.fft_size // 2] / self.fft_size

        tau = self.smoothing_time_constant
        self._smoothed_magnitude = tau * self._smoothed_magnitude + (1.0 - tau) * magnitude

        return librosa.amplitude_to_db(
            self._smoothed_magnitude,
            ref=1.0,
            amin=AMPLITUDE_FLOOR,
            top_db=None,
        )

    def disconnect(self) -> None:
        self._smoothed_magnitude = np.zeros(self.fft_size // 2)
