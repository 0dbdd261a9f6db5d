"""Window (taper) functions for filter design and spectral analysis.

Formulas use the symmetric N-1 denominator:
- hanning:  0.5 * (1 - cos(2*pi*n / (N-1)))
- hamming:  0.54 - 0.46 * cos(2*pi*n / (N-1))
- blackman: 0.42 - 0.5 * cos(2*pi*n / (N-1)) + 0.08 * cos(4*pi*n / (N-1))
- none:     1.0

A single-point window is 1.0 for every kind.
"""

from __future__ import annotations

import logging
from enum import Enum

import numpy as np

from iqdsp.typing import NDArrayFloat

logger = logging.getLogger(__name__)


class WindowKind(str, Enum):
    NONE = "none"
    HANNING = "hanning"
    HAMMING = "hamming"
    BLACKMAN = "blackman"


_ALIASES = {"rectangular": WindowKind.NONE, "hann": WindowKind.HANNING}


def parse_window(kind: WindowKind | str | None) -> WindowKind | None:
    """Return the WindowKind for a name, or None if it is not recognized."""
    if kind is None:
        return WindowKind.NONE
    if isinstance(kind, WindowKind):
        return kind
    key = str(kind).strip().lower()
    if key in _ALIASES:
        return _ALIASES[key]
    try:
        return WindowKind(key)
    except ValueError:
        return None


def resolve_window(kind: WindowKind | str | None, fallback: WindowKind) -> WindowKind:
    """Parse a window name, substituting `fallback` for unknown names."""
    parsed = parse_window(kind)
    if parsed is None:
        logger.debug(f"Unknown window kind {kind!r}, using {fallback.value}")
        return fallback
    return parsed


def window(index: int, length: int, kind: WindowKind | str = WindowKind.HAMMING) -> float:
    """Taper coefficient for sample `index` of a `length`-point window.

    Unknown kinds fall back to hamming.
    """
    resolved = resolve_window(kind, WindowKind.HAMMING)
    if resolved is WindowKind.NONE or length <= 1:
        return 1.0

    x = 2.0 * np.pi * index / (length - 1)
    if resolved is WindowKind.HANNING:
        return float(0.5 * (1.0 - np.cos(x)))
    if resolved is WindowKind.HAMMING:
        return float(0.54 - 0.46 * np.cos(x))
    return float(0.42 - 0.5 * np.cos(x) + 0.08 * np.cos(2.0 * x))


def window_array(length: int, kind: WindowKind | str = WindowKind.HAMMING) -> NDArrayFloat:
    """Vectorized form of `window` for indices 0..length-1."""
    if length <= 0:
        return np.empty(0, dtype=np.float64)

    resolved = resolve_window(kind, WindowKind.HAMMING)
    if resolved is WindowKind.NONE or length == 1:
        return np.ones(length, dtype=np.float64)

    x = 2.0 * np.pi * np.arange(length, dtype=np.float64) / (length - 1)
    if resolved is WindowKind.HANNING:
        return 0.5 * (1.0 - np.cos(x))
    if resolved is WindowKind.HAMMING:
        return 0.54 - 0.46 * np.cos(x)
    return 0.42 - 0.5 * np.cos(x) + 0.08 * np.cos(2.0 * x)
