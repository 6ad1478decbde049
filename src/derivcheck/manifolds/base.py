"""Manifold interface used to perturb and project parameter blocks."""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np
from numpy.typing import NDArray

__all__ = ["Manifold"]


class Manifold(ABC):
    """Local parameterization of a parameter block.

    A manifold maps a tangent-space step ``delta`` (``tangent_size`` entries)
    onto a new ambient point (``ambient_size`` entries) via :meth:`plus`, and
    exposes the derivative of that map at ``delta = 0`` via
    :meth:`plus_jacobian`. Both methods may return ``None`` to report that
    they cannot be evaluated at the given point.
    """

    @property
    @abstractmethod
    def ambient_size(self) -> int:
        """Dimension of the space the parameter block is stored in."""

    @property
    @abstractmethod
    def tangent_size(self) -> int:
        """Dimension of the tangent space; at most ``ambient_size``."""

    @abstractmethod
    def plus(
        self,
        x: NDArray[np.float64],
        delta: NDArray[np.float64],
    ) -> NDArray[np.float64] | None:
        """Returns ``x ⊞ delta``, a new ambient point. Must not modify ``x``."""

    @abstractmethod
    def plus_jacobian(self, x: NDArray[np.float64]) -> NDArray[np.float64] | None:
        """Returns the ``(ambient_size, tangent_size)`` derivative of ``plus(x, ·)`` at zero."""

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(ambient_size={self.ambient_size}, "
            f"tangent_size={self.tangent_size})"
        )
