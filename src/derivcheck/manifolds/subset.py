"""Manifold that holds a subset of a block's entries constant."""

from __future__ import annotations

from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from .base import Manifold

__all__ = ["SubsetManifold"]


class SubsetManifold(Manifold):
    """Euclidean update restricted to the entries that are not held constant.

    The tangent space has one coordinate per free entry, in increasing index
    order. ``plus_jacobian`` is the identity with the constant columns removed.
    """

    def __init__(self, size: int, constant_parameters: Sequence[int]) -> None:
        size = int(size)
        if size <= 0:
            raise ValueError(f"size must be positive; got {size}.")
        requested = [int(i) for i in constant_parameters]
        constant = sorted(set(requested))
        if len(constant) != len(requested):
            raise ValueError("constant_parameters contains duplicate indices.")
        if constant and (constant[0] < 0 or constant[-1] >= size):
            raise ValueError(
                f"constant_parameters must lie in [0, {size}); got {constant}."
            )
        self._size = size
        self.constant_parameters = tuple(constant)
        self._free = np.array([i for i in range(size) if i not in constant], dtype=int)

    @property
    def ambient_size(self) -> int:
        return self._size

    @property
    def tangent_size(self) -> int:
        return int(self._free.size)

    def plus(self, x, delta) -> NDArray[np.float64]:
        out = np.array(x, dtype=float)
        out[self._free] += np.asarray(delta, dtype=float)
        return out

    def plus_jacobian(self, x) -> NDArray[np.float64]:
        return np.eye(self._size)[:, self._free]
