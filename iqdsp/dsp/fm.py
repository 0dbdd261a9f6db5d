"""FM demodulation: polar discriminator, de-emphasis, resampling.

Pipeline:
1. Polar discriminator: angle(x[n] * conj(x[n-1]))
2. Scale radians/sample to deviation units: rate / (2*pi*deviation)
3. De-emphasis (single-pole IIR) when tau > 0
4. Resample to the audio rate
5. Peak-normalize to 0.9
"""

from __future__ import annotations

import numpy as np
from scipy import signal

from iqdsp.typing import NDArrayFloat, NDArraySamples

from .agc import normalize_audio
from .resample import MAX_RESAMPLE_FACTOR, RESAMPLER_TAPS, resample

DEFAULT_AUDIO_RATE = 48_000
WBFM_DEVIATION_HZ = 75_000.0
NBFM_DEVIATION_HZ = 5_000.0
WBFM_DEEMPHASIS_TAU = 75e-6


def phase_diff(samples: NDArraySamples) -> NDArrayFloat:
    """Instantaneous phase step between consecutive samples, in (-pi, pi].

    Returns len(samples) - 1 values; fewer than two samples gives an empty array.
    """
    x = np.asarray(samples, dtype=np.complex128)
    if x.size < 2:
        return np.empty(0, dtype=np.float64)
    diff = np.angle(x[1:] * np.conj(x[:-1]))
    # angle() yields -pi for a negative real with a -0.0 imaginary part
    return np.where(diff <= -np.pi, np.pi, diff)


def deemphasis(audio: NDArrayFloat, tau: float, sample_rate: float) -> NDArrayFloat:
    """Single-pole lowpass: y[n] = (1-a)*x[n] + a*y[n-1], a = exp(-1/(tau*rate)).

    tau <= 0 or empty input returns the input unchanged.
    """
    x = np.asarray(audio, dtype=np.float64)
    if tau <= 0 or x.size == 0:
        return x
    alpha = float(np.exp(-1.0 / (tau * sample_rate)))
    return signal.lfilter([1.0 - alpha], [1.0, -alpha], x)


def fm_demod(
    samples: NDArraySamples,
    sample_rate: int,
    audio_rate: int = DEFAULT_AUDIO_RATE,
    deviation: float = WBFM_DEVIATION_HZ,
    tau: float = WBFM_DEEMPHASIS_TAU,
    resampler_taps: int = RESAMPLER_TAPS,
    max_factor: int = MAX_RESAMPLE_FACTOR,
) -> NDArrayFloat:
    """Demodulate FM (wideband broadcast defaults).

    Args:
        samples: Complex IQ samples, signal centered at 0 Hz
        sample_rate: IQ sample rate in Hz
        audio_rate: Output audio rate in Hz
        deviation: Peak deviation in Hz; a full-deviation tone demodulates to ~1.0
        tau: De-emphasis time constant in seconds (75e-6 US, 50e-6 EU, 0 = off)

    Returns:
        Audio at audio_rate, peak-normalized to 0.9
    """
    diff = phase_diff(samples)
    if diff.size == 0:
        return diff

    audio = diff * (sample_rate / (2.0 * np.pi * deviation))
    if tau > 0:
        audio = deemphasis(audio, tau, sample_rate)
    audio = resample(audio, sample_rate, audio_rate, resampler_taps, max_factor)
    return normalize_audio(audio)


def nfm_demod(
    samples: NDArraySamples,
    sample_rate: int,
    audio_rate: int = DEFAULT_AUDIO_RATE,
    deviation: float = NBFM_DEVIATION_HZ,
    resampler_taps: int = RESAMPLER_TAPS,
    max_factor: int = MAX_RESAMPLE_FACTOR,
) -> NDArrayFloat:
    """Narrowband FM (voice channels): no de-emphasis, 5 kHz deviation."""
    return fm_demod(
        samples,
        sample_rate,
        audio_rate=audio_rate,
        deviation=deviation,
        tau=0.0,
        resampler_taps=resampler_taps,
        max_factor=max_factor,
    )
