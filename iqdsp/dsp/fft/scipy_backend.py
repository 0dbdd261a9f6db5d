"""SciPy FFT backend using scipy.fft (pocketfft)."""

from __future__ import annotations

import numpy as np
from scipy import fft as sp_fft

from iqdsp.typing import NDArrayComplex

from .base import FFTBackend


class ScipyFFTBackend(FFTBackend):
    """CPU FFT backend using scipy.fft.

    `backward` uses the "backward" norm, i.e. the 1/N factor is applied on
    the inverse transform only.
    """

    def __init__(self, workers: int | None = None):
        self._workers = workers

    def forward(self, samples: NDArrayComplex) -> NDArrayComplex:
        return np.asarray(sp_fft.fft(samples, workers=self._workers), dtype=np.complex128)

    def backward(self, spectrum: NDArrayComplex) -> NDArrayComplex:
        return np.asarray(sp_fft.ifft(spectrum, workers=self._workers), dtype=np.complex128)

    @property
    def name(self) -> str:
        """Return backend name."""
        return "scipy"
