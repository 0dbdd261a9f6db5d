from __future__ import annotations

import numpy as np

from iqdsp.typing import NDArrayFloat

AUDIO_PEAK_LEVEL = 0.9
# Peaks below this are treated as silence and left alone
SILENCE_FLOOR = 1e-10


def normalize_audio(audio: NDArrayFloat, peak: float = AUDIO_PEAK_LEVEL) -> NDArrayFloat:
    """Scale audio so its largest absolute sample equals `peak`.

    Empty or silent input is returned unchanged.
    """
    x = np.asarray(audio, dtype=np.float64)
    if x.size == 0:
        return x
    max_abs = float(np.max(np.abs(x)))
    if max_abs < SILENCE_FLOOR:
        return x
    return x * (peak / max_abs)
