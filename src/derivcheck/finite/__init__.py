"""Finite-difference estimation of parameter-block Jacobians."""

from .numeric_diff import estimate_block_jacobian
from .options import DifferenceScheme, NumericDiffOptions

__all__ = [
    "DifferenceScheme",
    "NumericDiffOptions",
    "estimate_block_jacobian",
]
