"""Shared typing aliases for DerivCheck."""

from __future__ import annotations

from typing import Sequence, TypeAlias

import numpy as np
from numpy.typing import NDArray

FloatArray: TypeAlias = NDArray[np.float64]

ArrayLike1D: TypeAlias = Sequence[float] | NDArray[np.floating]
ParameterBlocks: TypeAlias = Sequence[ArrayLike1D]
"""One 1D array-like per parameter block, in the evaluator's block order."""
