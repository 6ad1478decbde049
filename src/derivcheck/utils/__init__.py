"""Utility functions for DerivCheck package."""

from .concurrency import normalize_workers, parallel_execute
from .validate import (
    as_parameter_blocks,
    validate_block_sizes,
    validate_jacobian_shape,
    validate_manifolds,
    validate_residuals,
)

__all__ = [
    "normalize_workers",
    "parallel_execute",
    "as_parameter_blocks",
    "validate_block_sizes",
    "validate_jacobian_shape",
    "validate_manifolds",
    "validate_residuals",
]
