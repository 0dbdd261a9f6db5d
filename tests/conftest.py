"""Shared pytest fixtures for iqdsp tests."""

import numpy as np
import pytest

from iqdsp.dsp.fft import FFTCapability, detect_capability


@pytest.fixture
def sample_rate() -> int:
    """Default audio-rate sample rate for tests."""
    return 48_000


@pytest.fixture
def iq_sample_rate() -> int:
    """Default IQ sample rate for tests."""
    return 240_000


@pytest.fixture
def scipy_fft() -> FFTCapability:
    """Capability backed by scipy.fft, skipping the test if it cannot load."""
    capability = detect_capability("scipy")
    if not capability.available:
        pytest.skip(f"scipy FFT backend unavailable: {capability.reason}")
    return capability


@pytest.fixture
def no_fft() -> FFTCapability:
    """Capability representing a failed backend load."""
    return FFTCapability.unavailable("libfftw3 not found")


@pytest.fixture
def generate_fm_signal():
    """Factory to generate synthetic FM-modulated IQ signals."""
    def _generate(
        sample_rate: int,
        duration_s: float,
        audio_freq: float = 1000.0,
        deviation: float = 75_000.0,
    ) -> tuple[np.ndarray, np.ndarray]:
        """Generate FM-modulated IQ and the modulating tone.

        Args:
            sample_rate: Sample rate in Hz
            duration_s: Duration in seconds
            audio_freq: Modulating audio frequency in Hz
            deviation: FM deviation in Hz

        Returns:
            Tuple of (IQ samples, modulating audio)
        """
        n_samples = int(sample_rate * duration_s)
        t = np.arange(n_samples, dtype=np.float64) / sample_rate

        audio = np.sin(2 * np.pi * audio_freq * t)

        # Phase is the integral of instantaneous frequency deviation*cos(...)
        modulation_index = deviation / audio_freq
        phase = modulation_index * np.sin(2 * np.pi * audio_freq * t)
        iq = np.exp(1j * phase)

        return iq, audio

    return _generate


@pytest.fixture
def generate_am_signal():
    """Factory to generate AM IQ signals with an optional carrier phase offset."""
    def _generate(
        sample_rate: int,
        duration_s: float,
        audio_freq: float = 1000.0,
        depth: float = 0.5,
        carrier_phase: float = 0.0,
    ) -> tuple[np.ndarray, np.ndarray]:
        n_samples = int(sample_rate * duration_s)
        t = np.arange(n_samples, dtype=np.float64) / sample_rate
        audio = np.sin(2 * np.pi * audio_freq * t)
        iq = (1.0 + depth * audio) * np.exp(1j * carrier_phase)
        return iq, audio

    return _generate


@pytest.fixture
def generate_tone():
    """Factory to generate complex baseband tones."""
    def _generate(
        sample_rate: int,
        n_samples: int,
        frequency: float,
        amplitude: float = 1.0,
    ) -> np.ndarray:
        t = np.arange(n_samples, dtype=np.float64) / sample_rate
        return amplitude * np.exp(2j * np.pi * frequency * t)

    return _generate


@pytest.fixture
def generate_fsk_signal():
    """Factory to generate continuous-phase 2-FSK IQ for a bit sequence."""
    def _generate(
        bits: list[int],
        sample_rate: int,
        baud_rate: float,
        mark_hz: float = 2200.0,
        space_hz: float = 1200.0,
    ) -> np.ndarray:
        samples_per_bit = int(sample_rate / baud_rate)
        freqs = np.repeat([mark_hz if b else space_hz for b in bits], samples_per_bit)
        phase = 2 * np.pi * np.cumsum(freqs) / sample_rate
        return np.exp(1j * phase)

    return _generate
