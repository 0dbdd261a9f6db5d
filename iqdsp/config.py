from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

import yaml

from .dsp.am import AM_AUDIO_BANDWIDTH_HZ, SSB_AUDIO_BANDWIDTH_HZ, SSB_BFO_OFFSET_HZ
from .dsp.filters import DEFAULT_TAPS
from .dsp.fm import (
    DEFAULT_AUDIO_RATE,
    NBFM_DEVIATION_HZ,
    WBFM_DEEMPHASIS_TAU,
    WBFM_DEVIATION_HZ,
)
from .dsp.resample import MAX_RESAMPLE_FACTOR, RESAMPLER_TAPS
from .dsp.windows import WindowKind, parse_window

AcceleratorName = Literal["auto", "fftw", "scipy", "none"]
_ACCELERATORS = ("auto", "fftw", "scipy", "none")

_LEVEL_ALIASES: dict[str, int] = {
    "CRITICAL": logging.CRITICAL,
    "FATAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "TRACE": logging.DEBUG,
}


@dataclass
class FilterConfig:
    taps: int = DEFAULT_TAPS
    window: str = WindowKind.HAMMING.value


@dataclass
class ResamplerConfig:
    taps: int = RESAMPLER_TAPS
    # Above this interpolation/decimation factor, fall back to linear interpolation
    max_factor: int = MAX_RESAMPLE_FACTOR


@dataclass
class DemodConfig:
    audio_rate: int = DEFAULT_AUDIO_RATE
    fm_deviation: float = WBFM_DEVIATION_HZ
    nfm_deviation: float = NBFM_DEVIATION_HZ
    deemphasis_tau: float = WBFM_DEEMPHASIS_TAU
    am_bandwidth: float = AM_AUDIO_BANDWIDTH_HZ
    ssb_bandwidth: float = SSB_AUDIO_BANDWIDTH_HZ
    bfo_offset: float = SSB_BFO_OFFSET_HZ
    fsk_invert: bool = False


@dataclass
class FFTConfig:
    accelerator: AcceleratorName = "auto"


@dataclass
class DSPConfig:
    filter: FilterConfig = field(default_factory=FilterConfig)
    resampler: ResamplerConfig = field(default_factory=ResamplerConfig)
    demod: DemodConfig = field(default_factory=DemodConfig)
    fft: FFTConfig = field(default_factory=FFTConfig)
    log_level: str = "INFO"


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError("Config root must be a mapping")
        return data


def _section(cls: type, raw: Any, name: str) -> Any:
    if raw is None:
        return cls()
    if not isinstance(raw, dict):
        raise ValueError(f"Config section '{name}' must be a mapping")
    try:
        return cls(**raw)
    except TypeError as exc:
        raise ValueError(f"Invalid keys in config section '{name}': {exc}") from exc


def validate_config(config: DSPConfig) -> None:
    """Raise ValueError if any configured value is out of range."""
    if config.filter.taps < 1:
        raise ValueError(f"filter.taps must be positive, got {config.filter.taps}")
    if parse_window(config.filter.window) is None:
        raise ValueError(f"Unknown filter.window '{config.filter.window}'")
    if config.resampler.taps < 1:
        raise ValueError(f"resampler.taps must be positive, got {config.resampler.taps}")
    if config.resampler.max_factor < 1:
        raise ValueError(
            f"resampler.max_factor must be positive, got {config.resampler.max_factor}"
        )
    demod = config.demod
    if demod.audio_rate <= 0:
        raise ValueError(f"demod.audio_rate must be positive, got {demod.audio_rate}")
    for name in ("fm_deviation", "nfm_deviation", "am_bandwidth", "ssb_bandwidth"):
        if getattr(demod, name) <= 0:
            raise ValueError(f"demod.{name} must be positive")
    if config.fft.accelerator not in _ACCELERATORS:
        raise ValueError(
            f"fft.accelerator must be one of {', '.join(_ACCELERATORS)}, "
            f"got '{config.fft.accelerator}'"
        )
    if parse_log_level(config.log_level, -1) < 0:
        raise ValueError(f"Unknown log_level '{config.log_level}'")


def config_from_mapping(raw: dict[str, Any]) -> DSPConfig:
    """Build a validated DSPConfig from an already-parsed mapping."""
    known = {"filter", "resampler", "demod", "fft", "log_level"}
    unknown = set(raw) - known
    if unknown:
        raise ValueError(f"Unknown config sections: {', '.join(sorted(unknown))}")

    config = DSPConfig(
        filter=_section(FilterConfig, raw.get("filter"), "filter"),
        resampler=_section(ResamplerConfig, raw.get("resampler"), "resampler"),
        demod=_section(DemodConfig, raw.get("demod"), "demod"),
        fft=_section(FFTConfig, raw.get("fft"), "fft"),
        log_level=str(raw.get("log_level", "INFO")),
    )
    validate_config(config)
    return config


def load_config(path_str: str | Path) -> DSPConfig:
    """Load engine configuration from a YAML file.

    A missing file yields the defaults.
    """
    return config_from_mapping(_read_yaml(Path(path_str)))


def parse_log_level(value: str | None, default: int) -> int:
    """Parse a log level string into a numeric level."""
    if not value:
        return default
    raw = value.strip()
    if not raw:
        return default
    if raw.isdigit():
        return int(raw)
    key = raw.upper().replace("-", "_")
    return _LEVEL_ALIASES.get(key, default)


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """Set the level of the package logger and attach a stream handler once."""
    if isinstance(level, int):
        numeric = level
    else:
        numeric = parse_log_level(level, logging.INFO)

    pkg_logger = logging.getLogger("iqdsp")
    pkg_logger.setLevel(numeric)
    if not pkg_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        pkg_logger.addHandler(handler)
    return pkg_logger
