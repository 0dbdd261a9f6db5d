"""Rational sample-rate conversion.

Pipeline for a rate change from_rate -> to_rate:
1. Reduce to lowest terms: L = to/g, M = from/g with g = gcd(from, to)
2. If L or M exceeds the factor ceiling, linear interpolation instead
3. Otherwise interpolate by L (zero-stuff + lowpass), then decimate by M
   (lowpass + keep every M-th sample)

Interpolation always runs before decimation so no band content is lost
between the two stages.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from iqdsp.typing import NDArraySamples

from .filters import convolve, design_lowpass

logger = logging.getLogger(__name__)

RESAMPLER_TAPS = 31
MAX_RESAMPLE_FACTOR = 100


def _as_rate(value: float, name: str) -> int:
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    rounded = round(value)
    if abs(value - rounded) > 1e-9:
        raise ValueError(f"{name} must be an integral rate in Hz, got {value}")
    return int(rounded)


@dataclass(frozen=True)
class ResamplingPlan:
    """Rational rate change: output/input rate == interpolation/decimation."""

    interpolation: int
    decimation: int
    max_factor: int = MAX_RESAMPLE_FACTOR

    @classmethod
    def for_rates(
        cls, from_rate: float, to_rate: float, max_factor: int = MAX_RESAMPLE_FACTOR
    ) -> ResamplingPlan:
        src = _as_rate(from_rate, "from_rate")
        dst = _as_rate(to_rate, "to_rate")
        g = math.gcd(src, dst)
        return cls(interpolation=dst // g, decimation=src // g, max_factor=max_factor)

    @property
    def linear_fallback(self) -> bool:
        return self.interpolation > self.max_factor or self.decimation > self.max_factor

    @property
    def ratio(self) -> float:
        return self.interpolation / self.decimation


def decimate(samples: NDArraySamples, factor: int, taps: int = RESAMPLER_TAPS) -> NDArraySamples:
    """Anti-alias lowpass at 0.5/factor, then keep every factor-th sample from index 0."""
    x = np.asarray(samples)
    if factor <= 1 or x.size == 0:
        return x
    h = design_lowpass(0.5 / factor, 1.0, taps)
    return convolve(x, h)[::factor].copy()


def interpolate(samples: NDArraySamples, factor: int, taps: int = RESAMPLER_TAPS) -> NDArraySamples:
    """Insert factor-1 zeros after each sample, lowpass at 0.5/factor, scale by factor."""
    x = np.asarray(samples)
    if factor <= 1 or x.size == 0:
        return x
    stuffed = np.zeros(x.size * factor, dtype=np.complex128 if np.iscomplexobj(x) else np.float64)
    stuffed[::factor] = x
    h = design_lowpass(0.5 / factor, 1.0, taps)
    return convolve(stuffed, h) * factor


def linear_resample(samples: NDArraySamples, from_rate: float, to_rate: float) -> NDArraySamples:
    """Resample by blending the two nearest input samples.

    Output length is floor(N * to_rate / from_rate). Positions between the
    last sample and the end use the last sample; beyond that, zero.
    """
    if from_rate <= 0 or to_rate <= 0:
        raise ValueError(f"Rates must be positive, got {from_rate} -> {to_rate}")
    x = np.asarray(samples)
    n_out = int(x.size * to_rate / from_rate)
    if x.size == 0 or n_out <= 0:
        return x[:0]

    pos = np.arange(n_out, dtype=np.float64) * (from_rate / to_rate)
    idx = np.floor(pos).astype(np.int64)
    frac = pos - idx

    last = x.size - 1
    zero = np.zeros(1, dtype=x.dtype)[0]
    lower = np.where(idx <= last, x[np.minimum(idx, last)], zero)
    upper = np.where(idx + 1 <= last, x[np.minimum(idx + 1, last)], lower)
    return lower * (1.0 - frac) + upper * frac


def resample(
    samples: NDArraySamples,
    from_rate: float,
    to_rate: float,
    taps: int = RESAMPLER_TAPS,
    max_factor: int = MAX_RESAMPLE_FACTOR,
) -> NDArraySamples:
    """Convert samples from `from_rate` to `to_rate`.

    Args:
        samples: Real or complex samples at from_rate
        from_rate: Input sample rate in Hz (positive integer)
        to_rate: Output sample rate in Hz (positive integer)
        taps: Lowpass length for the interpolation/decimation filters
        max_factor: Largest L or M handled by filtering

    Returns:
        Samples at to_rate
    """
    plan = ResamplingPlan.for_rates(from_rate, to_rate, max_factor)
    x = np.asarray(samples)
    if plan.interpolation == plan.decimation or x.size == 0:
        return x

    if plan.linear_fallback:
        logger.debug(
            f"Resample {from_rate}->{to_rate} needs L={plan.interpolation}, "
            f"M={plan.decimation}; using linear interpolation"
        )
        return linear_resample(x, from_rate, to_rate)

    y = x
    if plan.interpolation > 1:
        y = interpolate(y, plan.interpolation, taps)
    if plan.decimation > 1:
        y = decimate(y, plan.decimation, taps)
    return y
