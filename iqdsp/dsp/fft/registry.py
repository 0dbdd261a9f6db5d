"""FFT backend registry with auto-detection.

Manages available FFT backends and resolves the process-wide FFT
capability.

Priority order (auto mode):
1. pyFFTW - native FFTW3
2. scipy - pocketfft
"""

from __future__ import annotations

import logging
import threading
from functools import lru_cache
from typing import Any, Callable

from .base import FFTBackend, FFTCapability, FFTUnavailableError

logger = logging.getLogger(__name__)

AUTO_PRIORITY = ("fftw", "scipy")

# Backend registry
_BACKENDS: dict[str, type[FFTBackend]] = {}
# Import failures of optional backends, reported as capability reasons
_LOAD_ERRORS: dict[str, str] = {}
_registered = False
# Guards registration and the one-time process capability detection
_lock = threading.RLock()


def register(name: str) -> Callable[[type[FFTBackend]], type[FFTBackend]]:
    """Decorator to register an FFT backend.

    Args:
        name: Backend identifier (e.g., 'scipy', 'fftw')
    """

    def decorator(cls: type[FFTBackend]) -> type[FFTBackend]:
        _BACKENDS[name] = cls
        return cls

    return decorator


def _try_create_backend(name: str, **kwargs: Any) -> tuple[FFTBackend | None, str]:
    """Try to create a backend, returning (None, reason) if unavailable."""
    if name not in _BACKENDS:
        reason = _LOAD_ERRORS.get(name, f"unknown FFT backend '{name}'")
        return None, reason

    try:
        return _BACKENDS[name](**kwargs), ""
    except ImportError as e:
        logger.debug(f"Backend '{name}' not available: {e}")
        return None, str(e)
    except Exception as e:
        logger.warning(f"Failed to initialize backend '{name}': {e}")
        return None, f"{type(e).__name__}: {e}"


def get_backend(accelerator: str = "auto", **kwargs: Any) -> FFTBackend:
    """Get an FFT backend by name or auto-detect the best available.

    Args:
        accelerator: Backend name or 'auto' for auto-detection
            Options: 'auto', 'fftw', 'scipy'
        **kwargs: Additional backend-specific arguments

    Raises:
        FFTUnavailableError: The requested (or every auto) backend failed to load
    """
    _ensure_registered()

    if accelerator == "auto":
        reasons = []
        for name in AUTO_PRIORITY:
            backend, reason = _try_create_backend(name, **kwargs)
            if backend is not None:
                logger.info(f"Auto-selected FFT backend: {backend.name}")
                return backend
            reasons.append(f"{name}: {reason}")
        raise FFTUnavailableError("; ".join(reasons))

    backend, reason = _try_create_backend(accelerator, **kwargs)
    if backend is None:
        logger.warning(f"Requested FFT backend '{accelerator}' not available: {reason}")
        raise FFTUnavailableError(reason)
    return backend


def detect_capability(accelerator: str = "auto", **kwargs: Any) -> FFTCapability:
    """Resolve an FFTCapability without raising.

    An explicitly named backend that fails to load gives an unavailable
    capability; there is no silent fallback to another backend. 'none'
    disables transforms entirely.
    """
    if accelerator == "none":
        return FFTCapability.unavailable("FFT disabled by configuration")
    try:
        return FFTCapability(get_backend(accelerator, **kwargs))
    except FFTUnavailableError as e:
        return FFTCapability.unavailable(e.reason)


@lru_cache(maxsize=1)
def fft_capability() -> FFTCapability:
    """Process-wide capability, detected on first use and never re-checked."""
    with _lock:
        return detect_capability("auto")


def fft_available() -> bool:
    return fft_capability().available


def available_backends() -> list[str]:
    """Get list of backend names that can be constructed."""
    _ensure_registered()

    available = []
    for name in _BACKENDS:
        backend, _ = _try_create_backend(name)
        if backend is not None:
            available.append(name)
    return available


def _ensure_registered() -> None:
    """Ensure the built-in backends are registered."""
    global _registered
    if _registered:
        return

    with _lock:
        if _registered:
            return

        try:
            from .scipy_backend import ScipyFFTBackend

            _BACKENDS.setdefault("scipy", ScipyFFTBackend)
        except ImportError as e:
            _LOAD_ERRORS["scipy"] = f"scipy.fft import failed: {e}"

        from .fftw_backend import PYFFTW_IMPORT_ERROR, FFTWBackend, is_available

        if is_available():
            _BACKENDS.setdefault("fftw", FFTWBackend)
        else:
            _LOAD_ERRORS["fftw"] = f"pyFFTW import failed: {PYFFTW_IMPORT_ERROR}"

        # Only published once the registry is fully populated
        _registered = True
        logger.debug(f"Registered FFT backends: {list(_BACKENDS.keys())}")
