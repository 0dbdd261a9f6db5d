"""Configured entry point for the DSP primitives.

The engine resolves its FFT capability once at construction and passes it
to every spectral operation, so a process can run engines with different
backends side by side. Demodulators are selected by mode name with
defaults taken from `DemodConfig`.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Callable

from .config import DSPConfig, configure_logging, load_config
from .dsp.am import am_demod, am_sync_demod, lsb_demod, usb_demod
from .dsp.fft.base import FFTCapability
from .dsp.fft.registry import detect_capability
from .dsp.filters import FilterType, FIRFilter
from .dsp.fm import fm_demod, nfm_demod
from .dsp.fsk import fsk_demod, fsk_raw_demod
from .dsp.resample import resample
from .dsp.spectrum import fft_power_db
from .dsp.windows import WindowKind
from .typing import NDArrayFloat, NDArraySamples

logger = logging.getLogger(__name__)


class DemodMode(str, Enum):
    FM = "fm"
    NFM = "nfm"
    AM = "am"
    AM_SYNC = "am_sync"
    USB = "usb"
    LSB = "lsb"
    FSK = "fsk"
    FSK_RAW = "fsk_raw"


_MODE_ALIASES = {
    "wbfm": DemodMode.FM,
    "nbfm": DemodMode.NFM,
    "sam": DemodMode.AM_SYNC,
}


def parse_mode(mode: DemodMode | str) -> DemodMode:
    if isinstance(mode, DemodMode):
        return mode
    key = str(mode).strip().lower()
    if key in _MODE_ALIASES:
        return _MODE_ALIASES[key]
    try:
        return DemodMode(key)
    except ValueError:
        valid = ", ".join(m.value for m in DemodMode)
        raise ValueError(f"Unknown demodulation mode '{mode}' (expected one of {valid})") from None


class DSPEngine:
    """DSP operations bound to one configuration and one FFT capability."""

    def __init__(self, config: DSPConfig | None = None, fft: FFTCapability | None = None):
        self.config = config if config is not None else DSPConfig()
        self.fft = fft if fft is not None else detect_capability(self.config.fft.accelerator)
        if self.fft.available:
            logger.info(f"DSP engine ready (fft backend: {self.fft.name})")
        else:
            logger.info(f"DSP engine ready without FFT ({self.fft.reason})")

    @classmethod
    def from_file(cls, path: str | Path) -> DSPEngine:
        """Load a YAML config, apply its log_level, and build the engine."""
        config = load_config(path)
        configure_logging(config.log_level)
        return cls(config)

    @property
    def fft_available(self) -> bool:
        return self.fft.available

    def design_filter(
        self,
        filter_type: FilterType | str,
        sample_rate: float,
        cutoff_hz: float | None = None,
        low_hz: float | None = None,
        high_hz: float | None = None,
        taps: int | None = None,
        window: WindowKind | str | None = None,
    ) -> FIRFilter:
        """Design a filter, with taps and window defaulting to the configured values.

        Lowpass/highpass take `cutoff_hz`; bandpass/bandstop take `low_hz`
        and `high_hz`.
        """
        kind = FilterType(filter_type)
        taps = taps if taps is not None else self.config.filter.taps
        window = window if window is not None else self.config.filter.window

        if kind in (FilterType.LOWPASS, FilterType.HIGHPASS):
            if cutoff_hz is None:
                raise ValueError(f"{kind.value} design requires cutoff_hz")
            design = FIRFilter.lowpass if kind is FilterType.LOWPASS else FIRFilter.highpass
            return design(cutoff_hz, sample_rate, taps, window)
        if kind in (FilterType.BANDPASS, FilterType.BANDSTOP):
            if low_hz is None or high_hz is None:
                raise ValueError(f"{kind.value} design requires low_hz and high_hz")
            design = FIRFilter.bandpass if kind is FilterType.BANDPASS else FIRFilter.bandstop
            return design(low_hz, high_hz, sample_rate, taps, window)
        raise ValueError("Custom filters are built with FIRFilter.from_coefficients")

    def frequency_response(self, fir: FIRFilter, points: int = 512) -> NDArrayFloat:
        return fir.frequency_response(points, fft=self.fft)

    def power_db(
        self, samples: NDArraySamples, window: WindowKind | str = WindowKind.HANNING
    ) -> NDArrayFloat:
        return fft_power_db(samples, window, fft=self.fft)

    def resample(self, samples: NDArraySamples, from_rate: float, to_rate: float) -> NDArraySamples:
        cfg = self.config.resampler
        return resample(samples, from_rate, to_rate, cfg.taps, cfg.max_factor)

    def _demod_defaults(self, mode: DemodMode) -> tuple[Callable[..., Any], dict[str, Any]]:
        demod = self.config.demod
        resampler = {
            "resampler_taps": self.config.resampler.taps,
            "max_factor": self.config.resampler.max_factor,
        }
        audio = {"audio_rate": demod.audio_rate, **resampler}

        if mode is DemodMode.FM:
            return fm_demod, {"deviation": demod.fm_deviation, "tau": demod.deemphasis_tau, **audio}
        if mode is DemodMode.NFM:
            return nfm_demod, {"deviation": demod.nfm_deviation, **audio}
        if mode is DemodMode.AM:
            return am_demod, {"audio_bandwidth": demod.am_bandwidth, **audio}
        if mode is DemodMode.AM_SYNC:
            return am_sync_demod, {"audio_bandwidth": demod.am_bandwidth, **audio}
        if mode is DemodMode.USB:
            return usb_demod, {
                "bfo_offset": demod.bfo_offset,
                "audio_bandwidth": demod.ssb_bandwidth,
                **audio,
            }
        if mode is DemodMode.LSB:
            return lsb_demod, {
                "bfo_offset": demod.bfo_offset,
                "audio_bandwidth": demod.ssb_bandwidth,
                **audio,
            }
        if mode is DemodMode.FSK:
            return fsk_demod, {"invert": demod.fsk_invert, **resampler}
        return fsk_raw_demod, {}

    def demodulate(
        self,
        mode: DemodMode | str,
        samples: NDArraySamples,
        sample_rate: int,
        **overrides: Any,
    ) -> NDArraySamples:
        """Run one demodulator over a block of IQ samples.

        Args:
            mode: fm/wbfm, nfm/nbfm, am, am_sync/sam, usb, lsb, fsk, fsk_raw
            samples: Complex IQ samples
            sample_rate: IQ sample rate in Hz
            **overrides: Per-call demodulator arguments (FSK modes require baud_rate)

        Returns:
            Normalized audio, the smoothed FSK waveform, or FSK bits
        """
        parsed = parse_mode(mode)
        if parsed in (DemodMode.FSK, DemodMode.FSK_RAW) and "baud_rate" not in overrides:
            raise ValueError(f"{parsed.value} demodulation requires baud_rate")

        func, kwargs = self._demod_defaults(parsed)
        kwargs.update(overrides)
        return func(samples, sample_rate, **kwargs)
