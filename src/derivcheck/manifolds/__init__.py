"""Manifolds describing how parameter blocks are perturbed."""

from .base import Manifold
from .euclidean import EuclideanManifold, LinearManifold
from .quaternion import QuaternionManifold, quaternion_product
from .subset import SubsetManifold

__all__ = [
    "Manifold",
    "EuclideanManifold",
    "LinearManifold",
    "QuaternionManifold",
    "SubsetManifold",
    "quaternion_product",
]
