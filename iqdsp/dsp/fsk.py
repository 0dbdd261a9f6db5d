"""FSK demodulation.

The discriminator output is high for one tone and low for the other, so
after smoothing and decimating to ~4 samples per symbol, a threshold at the
block mean splits mark from space. One decision is taken per symbol, half a
symbol in.
"""

from __future__ import annotations

import numpy as np

from iqdsp.typing import NDArrayFloat, NDArrayInt, NDArraySamples

from .filters import DEFAULT_TAPS, FIRFilter
from .fm import phase_diff
from .resample import MAX_RESAMPLE_FACTOR, RESAMPLER_TAPS, resample

# Decision rate relative to baud
SAMPLES_PER_SYMBOL_TARGET = 4


def _smoothed_discriminator(samples: NDArraySamples, sample_rate: int, baud_rate: float) -> NDArrayFloat:
    freq = phase_diff(samples)
    if freq.size == 0:
        return freq
    cutoff = min(baud_rate * 1.5, sample_rate / 2.0 - 1)
    return FIRFilter.lowpass(cutoff, sample_rate, DEFAULT_TAPS).apply(freq)


def fsk_raw_demod(samples: NDArraySamples, sample_rate: int, baud_rate: float) -> NDArrayFloat:
    """Lowpassed discriminator waveform, for inspection or custom slicing."""
    if baud_rate <= 0:
        raise ValueError(f"Baud rate must be positive, got {baud_rate}")
    return _smoothed_discriminator(samples, sample_rate, baud_rate)


def fsk_demod(
    samples: NDArraySamples,
    sample_rate: int,
    baud_rate: float,
    invert: bool = False,
    resampler_taps: int = RESAMPLER_TAPS,
    max_factor: int = MAX_RESAMPLE_FACTOR,
) -> NDArrayInt:
    """Recover bits from a 2-FSK signal.

    Args:
        samples: Complex IQ samples, tones around 0 Hz
        sample_rate: IQ sample rate in Hz
        baud_rate: Symbol rate (e.g. 1200 for Bell 202, 45.45 for RTTY)
        invert: Swap mark and space

    Returns:
        uint8 array of bits, one per symbol. If the decision rate ends up
        below one sample per symbol, every raw decision is returned.
    """
    if baud_rate <= 0:
        raise ValueError(f"Baud rate must be positive, got {baud_rate}")
    smoothed = _smoothed_discriminator(samples, sample_rate, baud_rate)
    if smoothed.size == 0:
        return np.empty(0, dtype=np.uint8)

    target_rate = min(int(baud_rate * SAMPLES_PER_SYMBOL_TARGET), int(sample_rate))
    if sample_rate > target_rate > 0:
        decisions = resample(smoothed, sample_rate, target_rate, resampler_taps, max_factor)
        effective_rate = target_rate
    else:
        decisions = smoothed
        effective_rate = sample_rate
    if decisions.size == 0:
        return np.empty(0, dtype=np.uint8)

    bits = (decisions > decisions.mean()).astype(np.uint8)
    if invert:
        bits = 1 - bits

    samples_per_symbol = effective_rate / baud_rate
    if samples_per_symbol < 1:
        return bits
    offset = int(samples_per_symbol / 2)
    step = max(1, round(samples_per_symbol))
    return bits[offset::step].copy()
