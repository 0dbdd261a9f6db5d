"""AM and SSB demodulation.

This module implements:
- AM envelope detection
- Synchronous AM with a static (block-average) carrier phase estimate
- SSB (USB/LSB) via BFO mixing and lowpass filtering

The synchronous detector estimates one carrier phase per call. It does not
track carrier drift within a block; blocks with frequency offset should be
tuned first.
"""

from __future__ import annotations

import logging

import numpy as np

from iqdsp.typing import NDArrayFloat, NDArraySamples

from .agc import normalize_audio
from .filters import DEFAULT_TAPS, FIRFilter
from .fm import DEFAULT_AUDIO_RATE
from .mixer import mix
from .resample import MAX_RESAMPLE_FACTOR, RESAMPLER_TAPS, resample

logger = logging.getLogger(__name__)

AM_AUDIO_BANDWIDTH_HZ = 5_000.0
SSB_AUDIO_BANDWIDTH_HZ = 3_000.0
SSB_BFO_OFFSET_HZ = 1_500.0
SSB_FILTER_TAPS = 127


def _audio_lowpass(x: NDArraySamples, bandwidth: float, sample_rate: int, taps: int) -> NDArraySamples:
    """Lowpass to `bandwidth`, skipped when the bandwidth reaches Nyquist."""
    if bandwidth >= sample_rate / 2.0:
        logger.debug(
            f"Audio bandwidth {bandwidth} Hz >= Nyquist at {sample_rate} Hz, filter skipped"
        )
        return x
    return FIRFilter.lowpass(bandwidth, sample_rate, taps).apply(x)


def _finish(
    audio: NDArrayFloat, sample_rate: int, audio_rate: int, taps: int, max_factor: int
) -> NDArrayFloat:
    return normalize_audio(resample(audio, sample_rate, audio_rate, taps, max_factor))


def am_demod(
    samples: NDArraySamples,
    sample_rate: int,
    audio_rate: int = DEFAULT_AUDIO_RATE,
    audio_bandwidth: float = AM_AUDIO_BANDWIDTH_HZ,
    resampler_taps: int = RESAMPLER_TAPS,
    max_factor: int = MAX_RESAMPLE_FACTOR,
) -> NDArrayFloat:
    """Demodulate AM by envelope detection.

    Pipeline: |x| -> remove carrier DC -> lowpass -> resample -> normalize.

    Args:
        samples: Complex IQ samples, carrier at 0 Hz
        sample_rate: IQ sample rate in Hz
        audio_rate: Output audio rate in Hz
        audio_bandwidth: Audio lowpass cutoff in Hz

    Returns:
        Audio at audio_rate, peak-normalized to 0.9
    """
    x = np.asarray(samples)
    if x.size == 0:
        return np.empty(0, dtype=np.float64)

    envelope = np.abs(x).astype(np.float64)
    envelope -= envelope.mean()
    audio = _audio_lowpass(envelope, audio_bandwidth, sample_rate, DEFAULT_TAPS)
    return _finish(audio, sample_rate, audio_rate, resampler_taps, max_factor)


def am_sync_demod(
    samples: NDArraySamples,
    sample_rate: int,
    audio_rate: int = DEFAULT_AUDIO_RATE,
    audio_bandwidth: float = AM_AUDIO_BANDWIDTH_HZ,
    resampler_taps: int = RESAMPLER_TAPS,
    max_factor: int = MAX_RESAMPLE_FACTOR,
) -> NDArrayFloat:
    """Synchronous AM: de-rotate by the mean carrier phase, take the in-phase part.

    Less distortion than envelope detection on selective fading, as long as
    the carrier phase is stable over the block.
    """
    x = np.asarray(samples, dtype=np.complex128)
    if x.size == 0:
        return np.empty(0, dtype=np.float64)

    avg_phase = float(np.mean(np.angle(x)))
    baseband = (x * np.exp(-1j * avg_phase)).real
    baseband -= baseband.mean()
    audio = _audio_lowpass(baseband, audio_bandwidth, sample_rate, DEFAULT_TAPS)
    return _finish(audio, sample_rate, audio_rate, resampler_taps, max_factor)


def _ssb_demod(
    samples: NDArraySamples,
    sample_rate: int,
    bfo_hz: float,
    audio_rate: int,
    audio_bandwidth: float,
    resampler_taps: int,
    max_factor: int,
) -> NDArrayFloat:
    x = np.asarray(samples, dtype=np.complex128)
    if x.size == 0:
        return np.empty(0, dtype=np.float64)

    shifted = mix(x, bfo_hz, sample_rate)
    filtered = _audio_lowpass(shifted, audio_bandwidth, sample_rate, SSB_FILTER_TAPS)
    audio = np.real(filtered).astype(np.float64)
    return _finish(audio, sample_rate, audio_rate, resampler_taps, max_factor)


def usb_demod(
    samples: NDArraySamples,
    sample_rate: int,
    audio_rate: int = DEFAULT_AUDIO_RATE,
    bfo_offset: float = SSB_BFO_OFFSET_HZ,
    audio_bandwidth: float = SSB_AUDIO_BANDWIDTH_HZ,
    resampler_taps: int = RESAMPLER_TAPS,
    max_factor: int = MAX_RESAMPLE_FACTOR,
) -> NDArrayFloat:
    """Upper sideband: mix down by the BFO offset, lowpass, take the real part."""
    return _ssb_demod(
        samples, sample_rate, -bfo_offset, audio_rate, audio_bandwidth, resampler_taps, max_factor
    )


def lsb_demod(
    samples: NDArraySamples,
    sample_rate: int,
    audio_rate: int = DEFAULT_AUDIO_RATE,
    bfo_offset: float = SSB_BFO_OFFSET_HZ,
    audio_bandwidth: float = SSB_AUDIO_BANDWIDTH_HZ,
    resampler_taps: int = RESAMPLER_TAPS,
    max_factor: int = MAX_RESAMPLE_FACTOR,
) -> NDArrayFloat:
    """Lower sideband: mix up by the BFO offset, lowpass, take the real part."""
    return _ssb_demod(
        samples, sample_rate, bfo_offset, audio_rate, audio_bandwidth, resampler_taps, max_factor
    )
