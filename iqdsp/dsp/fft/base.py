"""Base classes for FFT backends.

This module defines the abstract interface for FFT backends and the
capability object handed to consumers. A capability is resolved once and
then only read: it either wraps a working backend or carries the reason
no backend could be loaded.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np

from iqdsp.typing import NDArrayComplex


class FFTUnavailableError(RuntimeError):
    """Raised when a transform is requested but no FFT backend is loaded."""

    def __init__(self, reason: str):
        super().__init__(f"FFT not available: {reason}")
        self.reason = reason


class FFTBackend(ABC):
    """Abstract base class for FFT backends.

    All backends must implement:
    - forward(): unnormalized complex DFT
    - backward(): inverse DFT normalized by 1/N
    - name property: backend identifier
    """

    @abstractmethod
    def forward(self, samples: NDArrayComplex) -> NDArrayComplex:
        """Complex forward transform of a non-empty 1-D array."""

    @abstractmethod
    def backward(self, spectrum: NDArrayComplex) -> NDArrayComplex:
        """Inverse transform of a non-empty 1-D array, scaled by 1/N."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return backend identifier (e.g., 'scipy', 'fftw')."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


@dataclass(frozen=True)
class FFTCapability:
    """Process-level answer to "can we do FFTs, and with what?"."""

    backend: FFTBackend | None
    reason: str = ""

    @classmethod
    def unavailable(cls, reason: str) -> FFTCapability:
        return cls(backend=None, reason=reason)

    @property
    def available(self) -> bool:
        return self.backend is not None

    @property
    def name(self) -> str:
        return self.backend.name if self.backend is not None else "none"

    def _require(self) -> FFTBackend:
        if self.backend is None:
            raise FFTUnavailableError(self.reason or "no backend loaded")
        return self.backend

    def forward(self, samples: object) -> NDArrayComplex:
        backend = self._require()
        x = np.asarray(samples, dtype=np.complex128)
        if x.size == 0:
            return x
        return backend.forward(x)

    def backward(self, spectrum: object) -> NDArrayComplex:
        backend = self._require()
        x = np.asarray(spectrum, dtype=np.complex128)
        if x.size == 0:
            return x
        return backend.backward(x)
