"""pyFFTW backend - native FFTW3 transforms.

Uses FFTW via the pyFFTW bindings. Plans are built per transform size with
FFTW_ESTIMATE and kept in a small LRU cache, since sizes vary between
calls (spectra, frequency responses).

Install: pip install pyfftw
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Any

import numpy as np

from iqdsp.typing import NDArrayComplex

from .base import FFTBackend

logger = logging.getLogger(__name__)

# Least recently used plans beyond this are dropped along with their buffers
MAX_CACHED_PLANS = 16

# Try to import pyFFTW
_pyfftw: Any | None = None
PYFFTW_AVAILABLE = False
PYFFTW_IMPORT_ERROR = ""

try:
    import pyfftw

    _pyfftw = pyfftw
    PYFFTW_AVAILABLE = True
except ImportError as e:
    PYFFTW_IMPORT_ERROR = str(e)


class FFTWBackend(FFTBackend):
    """FFTW-based backend with a bounded LRU cache of per-size plans.

    Each plan owns aligned input/output buffers, so execution is guarded by
    a lock to keep concurrent callers from sharing a buffer mid-transform.
    """

    def __init__(self, threads: int = 1, max_plans: int = MAX_CACHED_PLANS):
        """Initialize FFTW backend.

        Args:
            threads: Number of threads for FFT computation
            max_plans: Number of (size, direction) plans kept cached

        Raises:
            ImportError: If pyFFTW is not installed
        """
        if not PYFFTW_AVAILABLE or _pyfftw is None:
            raise ImportError(
                f"pyFFTW not available ({PYFFTW_IMPORT_ERROR}). Install with: pip install pyfftw"
            )

        self._pyfftw = _pyfftw
        self._threads = threads
        if max_plans < 1:
            raise ValueError(f"max_plans must be positive, got {max_plans}")
        self._max_plans = max_plans
        self._plans: OrderedDict[tuple[int, str], Any] = OrderedDict()
        self._lock = threading.Lock()

        logger.debug(f"FFTW backend initialized (threads={threads})")

    def _plan(self, size: int, direction: str) -> Any:
        key = (size, direction)
        plan = self._plans.get(key)
        if plan is not None:
            self._plans.move_to_end(key)
        else:
            src = self._pyfftw.empty_aligned(size, dtype="complex128")
            dst = self._pyfftw.empty_aligned(size, dtype="complex128")
            plan = self._pyfftw.FFTW(
                src,
                dst,
                direction=direction,
                flags=("FFTW_ESTIMATE",),
                threads=self._threads,
            )
            self._plans[key] = plan
            while len(self._plans) > self._max_plans:
                self._plans.popitem(last=False)
        return plan

    def _execute(self, data: NDArrayComplex, direction: str) -> NDArrayComplex:
        with self._lock:
            plan = self._plan(data.size, direction)
            plan.input_array[:] = data
            # execute() is the raw plan, backward scaling is applied by the caller
            plan.execute()
            return np.array(plan.output_array, dtype=np.complex128, copy=True)

    def forward(self, samples: NDArrayComplex) -> NDArrayComplex:
        return self._execute(samples, "FFTW_FORWARD")

    def backward(self, spectrum: NDArrayComplex) -> NDArrayComplex:
        return self._execute(spectrum, "FFTW_BACKWARD") / spectrum.size

    @property
    def name(self) -> str:
        """Return backend name."""
        return "fftw"


def is_available() -> bool:
    """Check if FFTW backend is available."""
    return PYFFTW_AVAILABLE
