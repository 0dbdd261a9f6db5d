"""Pluggable FFT backends.

- fftw: native FFTW3 via pyFFTW (optional extra)
- scipy: scipy.fft

Usage:
    from iqdsp.dsp.fft import fft_capability, detect_capability

    fft = fft_capability()          # process default, resolved once
    if fft.available:
        spectrum = fft.forward(samples)

    fft = detect_capability("fftw")  # explicit, unavailable if pyFFTW is missing
"""

from .base import FFTBackend, FFTCapability, FFTUnavailableError
from .registry import (
    available_backends,
    detect_capability,
    fft_available,
    fft_capability,
    get_backend,
    register,
)

__all__ = [
    "FFTBackend",
    "FFTCapability",
    "FFTUnavailableError",
    "available_backends",
    "detect_capability",
    "fft_available",
    "fft_capability",
    "get_backend",
    "register",
]
