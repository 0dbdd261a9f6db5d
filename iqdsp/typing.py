from __future__ import annotations

from typing import Any, TypeAlias

import numpy as np
import numpy.typing as npt

NDArrayFloat: TypeAlias = npt.NDArray[np.floating[Any]]
NDArrayComplex: TypeAlias = npt.NDArray[np.complexfloating[Any, Any]]
NDArrayInt: TypeAlias = npt.NDArray[np.integer[Any]]
# Real or complex sample sequences accepted by most DSP entry points
NDArraySamples: TypeAlias = npt.NDArray[np.inexact[Any]]
