"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

# Default sample rate for test audio
TEST_SR = 44100

# Analyser buffer length
FFT_SIZE = 2048

MIN_DB = -90.0
MAX_DB = -10.0


def make_sine(frequency: float, sample_rate: int = TEST_SR, n: int = FFT_SIZE, amplitude: float = 0.5) -> np.ndarray:
    """Sine buffer of n samples."""
    t = np.arange(n) / sample_rate
    return amplitude * np.sin(2 * np.pi * frequency * t)


def flat_spectrum(db: float, bins: int = FFT_SIZE // 2) -> np.ndarray:
    """Decibel spectrum with every bin at the same level."""
    return np.full(bins, db, dtype=np.float64)


@pytest.fixture
def sample_rate() -> int:
    """Default sample rate for tests."""
    return TEST_SR


@pytest.fixture
def sine_buffer():
    """Factory for sine buffers: sine_buffer(frequency, n=2048)."""
    return make_sine


@pytest.fixture
def spectrum():
    """Factory for flat decibel spectra: spectrum(db, bins=1024)."""
    return flat_spectrum


@pytest.fixture
def silent_spectrum() -> np.ndarray:
    """Spectrum sitting at the decibel floor."""
    return flat_spectrum(MIN_DB)


@pytest.fixture
def loud_spectrum() -> np.ndarray:
    """Spectrum sitting at the decibel ceiling."""
    return flat_spectrum(MAX_DB)


@pytest.fixture
def voice_signal(sample_rate: int) -> tuple[np.ndarray, int]:
    """
    One second of a voiced tone: 220 Hz fundamental with two harmonics.

    Returns:
        Tuple of (audio_signal, sample_rate).
    """
    duration = 1.0
    t = np.linspace(0, duration, int(sample_rate * duration), endpoint=False)
    y = (
        0.4 * np.sin(2 * np.pi * 220.0 * t)
        + 0.15 * np.sin(2 * np.pi * 440.0 * t)
        + 0.05 * np.sin(2 * np.pi * 660.0 * t)
    )
    return y.astype(np.float32), sample_rate


@pytest.fixture
def temp_audio_file(tmp_path, voice_signal):
    """Create a temporary audio file for testing file I/O."""
    import soundfile as sf

    y, sr = voice_signal
    audio_path = tmp_path / "test_voice.wav"
    sf.write(audio_path, y, sr)
    return audio_path
