from __future__ import annotations

import numpy as np

from iqdsp.typing import NDArrayComplex, NDArraySamples


def complex_oscillator(length: int, freq_hz: float, sample_rate: float) -> NDArrayComplex:
    """exp(j*2*pi*freq*n/rate) for n in 0..length-1."""
    if length <= 0:
        return np.empty(0, dtype=np.complex128)
    t = np.arange(length, dtype=np.float64) / float(sample_rate)
    return np.exp(2j * np.pi * freq_hz * t)


def mix(samples: NDArraySamples, freq_hz: float, sample_rate: float) -> NDArrayComplex:
    """Shift a signal by `freq_hz` (positive = up). Magnitudes are unchanged.

    Args:
        samples: Complex IQ samples
        freq_hz: Frequency shift in Hz
        sample_rate: Sample rate in Hz
    """
    x = np.asarray(samples, dtype=np.complex128)
    if x.size == 0:
        return x
    return x * complex_oscillator(x.size, freq_hz, sample_rate)
