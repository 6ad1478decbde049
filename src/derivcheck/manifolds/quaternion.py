"""Unit-quaternion manifold for rotations.

Quaternions are stored as ``[w, x, y, z]``. A tangent step ``delta`` is a
rotation vector; it is turned into a unit quaternion by the exponential map
and applied on the left, so the update stays on the unit sphere.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from .base import Manifold

__all__ = ["QuaternionManifold", "quaternion_product"]


def quaternion_product(z: NDArray[np.float64], w: NDArray[np.float64]) -> NDArray[np.float64]:
    """Returns the Hamilton product ``z * w`` of two ``[w, x, y, z]`` quaternions."""
    return np.array(
        [
            z[0] * w[0] - z[1] * w[1] - z[2] * w[2] - z[3] * w[3],
            z[0] * w[1] + z[1] * w[0] + z[2] * w[3] - z[3] * w[2],
            z[0] * w[2] - z[1] * w[3] + z[2] * w[0] + z[3] * w[1],
            z[0] * w[3] + z[1] * w[2] - z[2] * w[1] + z[3] * w[0],
        ],
        dtype=float,
    )


class QuaternionManifold(Manifold):
    """``plus(x, delta) = exp(delta) * x`` on 4-vectors, with a 3D tangent space."""

    @property
    def ambient_size(self) -> int:
        return 4

    @property
    def tangent_size(self) -> int:
        return 3

    def plus(self, x, delta) -> NDArray[np.float64]:
        x = np.asarray(x, dtype=float)
        delta = np.asarray(delta, dtype=float)
        norm_delta = float(np.linalg.norm(delta))
        if norm_delta == 0.0:
            return x.copy()
        q_delta = np.empty(4)
        q_delta[0] = np.cos(norm_delta)
        q_delta[1:] = np.sin(norm_delta) / norm_delta * delta
        return quaternion_product(q_delta, x)

    def plus_jacobian(self, x) -> NDArray[np.float64]:
        w, a, b, c = np.asarray(x, dtype=float)
        return np.array(
            [
                [-a, -b, -c],
                [w, c, -b],
                [-c, w, a],
                [b, -a, w],
            ],
            dtype=float,
        )
