"""Spectral analysis: transforms, windowing, dB power spectra and shifts.

Transforms go through an FFTCapability. Callers may inject one (e.g. the
engine's configured capability); otherwise the process default is used.
`power_spectrum` is the FFT-free fallback and is NOT a frequency-domain
estimate: it returns the tapered magnitude-squared time series.
"""

from __future__ import annotations

import logging

import numpy as np

from iqdsp.typing import NDArrayComplex, NDArrayFloat, NDArraySamples

from .fft.base import FFTCapability
from .fft.registry import fft_capability
from .windows import WindowKind, parse_window, window_array

logger = logging.getLogger(__name__)

# Added before log10 so empty bins stay finite
POWER_FLOOR = 1e-20


def _capability(fft: FFTCapability | None) -> FFTCapability:
    return fft if fft is not None else fft_capability()


def forward(samples: NDArraySamples, fft: FFTCapability | None = None) -> NDArrayComplex:
    """Complex forward DFT. Raises FFTUnavailableError without a backend."""
    return _capability(fft).forward(samples)


def backward(spectrum: NDArrayComplex, fft: FFTCapability | None = None) -> NDArrayComplex:
    """Inverse DFT normalized by 1/N. Raises FFTUnavailableError without a backend."""
    return _capability(fft).backward(spectrum)


def apply_window(
    samples: NDArraySamples, kind: WindowKind | str = WindowKind.HANNING
) -> NDArraySamples:
    """Multiply samples by a taper.

    `none` and unrecognized kinds return the input unchanged.
    """
    x = np.asarray(samples)
    if x.size == 0:
        return x
    resolved = parse_window(kind)
    if resolved is None:
        logger.debug(f"Unknown window kind {kind!r}, samples passed through untapered")
        return x
    if resolved is WindowKind.NONE:
        return x
    return x * window_array(x.size, resolved)


def fft_shift(spectrum: NDArraySamples) -> NDArraySamples:
    """Move the zero-frequency bin to the center: split at N//2."""
    x = np.asarray(spectrum)
    split = x.size // 2
    return np.concatenate((x[split:], x[:split]))


def ifft_shift(spectrum: NDArraySamples) -> NDArraySamples:
    """Inverse of `fft_shift`: split at (N+1)//2."""
    x = np.asarray(spectrum)
    split = (x.size + 1) // 2
    return np.concatenate((x[split:], x[:split]))


def fft_power_db(
    samples: NDArraySamples,
    window: WindowKind | str = WindowKind.HANNING,
    fft: FFTCapability | None = None,
) -> NDArrayFloat:
    """Per-bin power in dB, natural (unshifted) bin order.

    Raises:
        FFTUnavailableError: No FFT backend could be loaded
    """
    capability = _capability(fft)
    windowed = apply_window(samples, window)
    bins = capability.forward(windowed)
    if bins.size == 0:
        return np.empty(0, dtype=np.float64)
    return 10.0 * np.log10(np.abs(bins) ** 2 + POWER_FLOOR)


def power_spectrum(samples: NDArraySamples, window_size: int = 1024) -> NDArrayFloat:
    """FFT-free fallback: |x|^2 of the Hanning-tapered first `window_size` samples.

    Returns an empty array if fewer than `window_size` samples are given.
    """
    x = np.asarray(samples)
    if window_size <= 0 or x.size < window_size:
        return np.empty(0, dtype=np.float64)
    tapered = apply_window(x[:window_size], WindowKind.HANNING)
    return np.abs(tapered) ** 2
