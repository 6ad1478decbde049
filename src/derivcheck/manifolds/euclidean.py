"""Flat manifolds: the identity parameterization and a fixed linear map."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .base import Manifold

__all__ = ["EuclideanManifold", "LinearManifold"]


class EuclideanManifold(Manifold):
    """Identity parameterization: ``plus(x, delta) = x + delta``."""

    def __init__(self, size: int) -> None:
        if int(size) <= 0:
            raise ValueError(f"size must be positive; got {size}.")
        self._size = int(size)

    @property
    def ambient_size(self) -> int:
        return self._size

    @property
    def tangent_size(self) -> int:
        return self._size

    def plus(self, x, delta):
        return np.asarray(x, dtype=float) + np.asarray(delta, dtype=float)

    def plus_jacobian(self, x):
        return np.eye(self._size)


class LinearManifold(Manifold):
    """Moves along the column space of a fixed matrix.

    ``plus(x, delta) = x + A @ delta`` with ``A`` of shape
    ``(ambient_size, tangent_size)``, so ``plus_jacobian`` is ``A`` at every
    point. Zero rows in ``A`` freeze the corresponding ambient entries.
    """

    def __init__(self, matrix: ArrayLike) -> None:
        a = np.array(matrix, dtype=float)
        if a.ndim != 2:
            raise ValueError(f"matrix must be 2D; got ndim={a.ndim}.")
        if a.shape[1] > a.shape[0]:
            raise ValueError(
                f"matrix must have at most as many columns as rows; got shape {a.shape}."
            )
        self.matrix = a

    @property
    def ambient_size(self) -> int:
        return self.matrix.shape[0]

    @property
    def tangent_size(self) -> int:
        return self.matrix.shape[1]

    def plus(self, x, delta) -> NDArray[np.float64]:
        return np.asarray(x, dtype=float) + self.matrix @ np.asarray(delta, dtype=float)

    def plus_jacobian(self, x) -> NDArray[np.float64]:
        return self.matrix.copy()
