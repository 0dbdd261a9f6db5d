"""Sample statistics used by scanners and sweep consumers."""

from __future__ import annotations

from typing import Iterable

import numpy as np
from scipy import signal

from iqdsp.typing import NDArrayComplex, NDArrayFloat, NDArraySamples

DC_BLOCK_ALPHA = 0.995
# Added before log10 so zero power stays finite
POWER_DB_FLOOR = 1e-10


def iq_to_complex(data: bytes | bytearray | memoryview | Iterable[int]) -> NDArrayComplex:
    """Convert interleaved unsigned 8-bit I/Q to complex samples in [-1, 1).

    Raw values are centered at 128. A trailing unpaired byte is dropped.
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        raw = np.frombuffer(data, dtype=np.uint8)
    else:
        raw = np.asarray(list(data), dtype=np.float64)
    pairs = raw.size // 2
    values = (raw[: pairs * 2].astype(np.float64) - 128.0) / 128.0
    return values[0::2] + 1j * values[1::2]


def average_power(samples: NDArraySamples) -> float:
    """Mean |x|^2; 0.0 for empty input."""
    x = np.asarray(samples)
    if x.size == 0:
        return 0.0
    return float(np.mean(np.abs(x) ** 2))


def power_db(power: float) -> float:
    return float(10.0 * np.log10(power + POWER_DB_FLOOR))


def magnitude(samples: NDArraySamples) -> NDArrayFloat:
    return np.abs(np.asarray(samples)).astype(np.float64)


def phase(samples: NDArraySamples) -> NDArrayFloat:
    """Per-sample phase, atan2(Q, I) in (-pi, pi]."""
    return np.angle(np.asarray(samples, dtype=np.complex128))


def remove_dc(samples: NDArraySamples, alpha: float = DC_BLOCK_ALPHA) -> NDArraySamples:
    """First-order DC blocker: y[n] = x[n] - x[n-1] + alpha * y[n-1], y[0] = x[0]."""
    x = np.asarray(samples)
    if x.size == 0:
        return x
    if not np.iscomplexobj(x):
        x = x.astype(np.float64, copy=False)
    return signal.lfilter([1.0, -1.0], [1.0, -alpha], x)


def find_peak(power_spectrum: NDArrayFloat) -> tuple[int, float]:
    """(index, value) of the largest bin; (0, 0.0) for empty input."""
    x = np.asarray(power_spectrum, dtype=np.float64)
    if x.size == 0:
        return 0, 0.0
    idx = int(np.argmax(x))
    return idx, float(x[idx])


def estimate_frequency(samples: NDArraySamples, sample_rate: float) -> float:
    """Rough tone frequency from zero crossings of the in-phase component.

    Returns 0.0 for fewer than two samples.
    """
    x = np.asarray(samples)
    if x.size < 2:
        return 0.0
    negative = np.real(x) < 0
    crossings = int(np.count_nonzero(negative[1:] != negative[:-1]))
    duration = x.size / float(sample_rate)
    return (crossings / 2.0) / duration
