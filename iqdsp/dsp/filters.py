"""FIR filter design and application.

Filters are designed with the windowed-sinc method:
- Lowpass: sinc kernel times a window, normalized to unity DC gain
- Highpass: spectral inversion of the lowpass at the same cutoff
- Bandpass: lowpass(high) - lowpass(low), no renormalization
- Bandstop: lowpass(low) + highpass(high), no renormalization

Coefficients are cached per (cutoff, taps, window) since the same designs
are requested repeatedly by the resampler and demodulators.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import TYPE_CHECKING, Any

import numpy as np

from iqdsp.typing import NDArrayFloat, NDArraySamples

from .windows import WindowKind, resolve_window, window_array

if TYPE_CHECKING:
    from .fft.base import FFTCapability

DEFAULT_TAPS = 63


class FilterType(str, Enum):
    LOWPASS = "lowpass"
    HIGHPASS = "highpass"
    BANDPASS = "bandpass"
    BANDSTOP = "bandstop"
    CUSTOM = "custom"


def _odd_taps(taps: int) -> int:
    if taps < 1:
        raise ValueError(f"Filter taps must be positive, got {taps}")
    return taps if taps % 2 == 1 else taps + 1


def _normalized_cutoff(cutoff_hz: float, sample_rate_hz: float) -> float:
    if sample_rate_hz <= 0:
        raise ValueError(f"Sample rate must be positive, got {sample_rate_hz}")
    normalized = cutoff_hz / sample_rate_hz
    if not 0.0 < normalized < 0.5:
        raise ValueError(
            f"Cutoff {cutoff_hz} Hz at {sample_rate_hz} Hz gives normalized cutoff "
            f"{normalized:.4f}, must be within (0, 0.5)"
        )
    return normalized


@lru_cache(maxsize=128)
def _sinc_lowpass(normalized_cutoff: float, taps: int, kind: WindowKind) -> NDArrayFloat:
    """Windowed-sinc lowpass coefficients with unity DC gain (read-only)."""
    mid = (taps - 1) / 2.0
    m = np.arange(taps, dtype=np.float64) - mid

    h = np.empty(taps, dtype=np.float64)
    center = m == 0
    h[center] = 2.0 * normalized_cutoff
    off = ~center
    h[off] = np.sin(2.0 * np.pi * normalized_cutoff * m[off]) / (np.pi * m[off])

    h *= window_array(taps, kind)
    total = h.sum()
    if total != 0.0:
        h /= total
    h.setflags(write=False)
    return h


def _spectral_inversion(h: NDArrayFloat) -> NDArrayFloat:
    inverted = -h
    mid = len(h) // 2
    inverted[mid] = 1.0 - h[mid]
    return inverted


def design_lowpass(
    cutoff_hz: float,
    sample_rate_hz: float,
    taps: int = DEFAULT_TAPS,
    window: WindowKind | str = WindowKind.HAMMING,
) -> NDArrayFloat:
    """Return lowpass coefficients (a fresh, writable copy)."""
    kind = resolve_window(window, WindowKind.HAMMING)
    normalized = _normalized_cutoff(cutoff_hz, sample_rate_hz)
    return _sinc_lowpass(normalized, _odd_taps(taps), kind).copy()


def convolve(samples: NDArraySamples, coefficients: NDArrayFloat) -> NDArraySamples:
    """Centered convolution with the same length as the input.

    output[i] = sum_j samples[i - j + taps//2] * coefficients[j], with
    out-of-range samples treated as zero. Complex input stays complex.
    """
    x = np.asarray(samples)
    if x.size == 0:
        return x.astype(np.complex128 if np.iscomplexobj(x) else np.float64)
    if not np.iscomplexobj(x):
        x = x.astype(np.float64, copy=False)

    h = np.asarray(coefficients)
    half = len(h) // 2
    return np.convolve(x, h, mode="full")[half : half + x.size]


@dataclass(frozen=True, eq=False)
class FIRFilter:
    """Immutable FIR filter: coefficients plus the design that produced them.

    Build once with one of the design classmethods, then `apply` to as many
    sample blocks as needed.
    """

    coefficients: NDArrayFloat
    filter_type: FilterType = FilterType.CUSTOM
    window: WindowKind = WindowKind.HAMMING

    def __post_init__(self) -> None:
        coeffs = np.array(self.coefficients, dtype=np.float64)
        if coeffs.ndim != 1 or coeffs.size == 0:
            raise ValueError("FIR coefficients must be a non-empty 1-D sequence")
        coeffs.setflags(write=False)
        object.__setattr__(self, "coefficients", coeffs)
        object.__setattr__(self, "filter_type", FilterType(self.filter_type))
        object.__setattr__(self, "window", resolve_window(self.window, WindowKind.HAMMING))

    @property
    def taps(self) -> int:
        return int(self.coefficients.size)

    @classmethod
    def lowpass(
        cls,
        cutoff_hz: float,
        sample_rate_hz: float,
        taps: int = DEFAULT_TAPS,
        window: WindowKind | str = WindowKind.HAMMING,
    ) -> FIRFilter:
        kind = resolve_window(window, WindowKind.HAMMING)
        coeffs = design_lowpass(cutoff_hz, sample_rate_hz, taps, kind)
        return cls(coeffs, FilterType.LOWPASS, kind)

    @classmethod
    def highpass(
        cls,
        cutoff_hz: float,
        sample_rate_hz: float,
        taps: int = DEFAULT_TAPS,
        window: WindowKind | str = WindowKind.HAMMING,
    ) -> FIRFilter:
        kind = resolve_window(window, WindowKind.HAMMING)
        lp = design_lowpass(cutoff_hz, sample_rate_hz, taps, kind)
        return cls(_spectral_inversion(lp), FilterType.HIGHPASS, kind)

    @classmethod
    def bandpass(
        cls,
        low_hz: float,
        high_hz: float,
        sample_rate_hz: float,
        taps: int = DEFAULT_TAPS,
        window: WindowKind | str = WindowKind.HAMMING,
    ) -> FIRFilter:
        """Bandpass as the difference of two lowpass designs.

        Passband gain is whatever the difference yields; it is not
        renormalized.
        """
        if low_hz >= high_hz:
            raise ValueError(f"Low cutoff ({low_hz}) must be below high cutoff ({high_hz})")
        kind = resolve_window(window, WindowKind.HAMMING)
        upper = design_lowpass(high_hz, sample_rate_hz, taps, kind)
        lower = design_lowpass(low_hz, sample_rate_hz, taps, kind)
        return cls(upper - lower, FilterType.BANDPASS, kind)

    @classmethod
    def bandstop(
        cls,
        low_hz: float,
        high_hz: float,
        sample_rate_hz: float,
        taps: int = DEFAULT_TAPS,
        window: WindowKind | str = WindowKind.HAMMING,
    ) -> FIRFilter:
        if low_hz >= high_hz:
            raise ValueError(f"Low cutoff ({low_hz}) must be below high cutoff ({high_hz})")
        kind = resolve_window(window, WindowKind.HAMMING)
        lower = design_lowpass(low_hz, sample_rate_hz, taps, kind)
        upper = _spectral_inversion(design_lowpass(high_hz, sample_rate_hz, taps, kind))
        return cls(lower + upper, FilterType.BANDSTOP, kind)

    @classmethod
    def from_coefficients(
        cls,
        coefficients: Any,
        filter_type: FilterType | str = FilterType.CUSTOM,
        window: WindowKind | str = WindowKind.HAMMING,
    ) -> FIRFilter:
        """Wrap externally designed coefficients."""
        return cls(np.asarray(coefficients, dtype=np.float64), filter_type, window)

    def apply(self, samples: NDArraySamples) -> NDArraySamples:
        """Filter samples, output aligned with and as long as the input."""
        return convolve(samples, self.coefficients)

    def apply_zero_phase(self, samples: NDArraySamples) -> NDArraySamples:
        """Forward-backward filtering: no phase shift, squared magnitude response."""
        x = np.asarray(samples)
        if x.size == 0:
            return convolve(x, self.coefficients)
        forward = convolve(x, self.coefficients)
        backward = convolve(forward[::-1], self.coefficients)
        return backward[::-1].copy()

    def group_delay(self) -> float:
        """Delay in samples of a linear-phase filter with this many taps."""
        return (self.taps - 1) / 2.0

    def frequency_response(
        self,
        points: int = 512,
        fft: FFTCapability | None = None,
    ) -> NDArrayFloat:
        """Magnitude response over `points` bins of the zero-padded coefficients.

        Raises:
            FFTUnavailableError: No FFT backend could be loaded
            ValueError: `points` is smaller than the tap count
        """
        if points < self.taps:
            raise ValueError(f"points ({points}) must be at least the tap count ({self.taps})")
        if fft is None:
            from .fft.registry import fft_capability

            fft = fft_capability()

        padded = np.zeros(points, dtype=np.complex128)
        padded[: self.taps] = self.coefficients
        return np.abs(fft.forward(padded))

    def __str__(self) -> str:
        return (
            f"{self.filter_type.value.capitalize()} FIR filter "
            f"({self.taps} taps, {self.window.value} window)"
        )
