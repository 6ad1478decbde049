"""Validation utilities for DerivCheck.

Everything here raises :class:`~derivcheck.errors.DimensionMismatchError`:
a size disagreement between an evaluator, its manifolds and the arrays passed
around is a programming error, not a recoverable condition.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from derivcheck.errors import DimensionMismatchError
from derivcheck.utils.types import FloatArray, ParameterBlocks

__all__ = [
    "as_parameter_blocks",
    "validate_block_sizes",
    "validate_jacobian_shape",
    "validate_manifolds",
    "validate_residuals",
]


def as_parameter_blocks(
    parameters: ParameterBlocks,
    block_sizes: Sequence[int],
) -> list[FloatArray]:
    """Returns private 1D float copies of the caller's parameter blocks.

    Args:
        parameters: One array-like per parameter block.
        block_sizes: Expected ambient size of each block.

    Returns:
        A list of freshly allocated 1D float arrays.

    Raises:
        DimensionMismatchError: If the number of blocks or any block size
            differs from ``block_sizes``.
    """
    if len(parameters) != len(block_sizes):
        raise DimensionMismatchError(
            f"Expected {len(block_sizes)} parameter blocks, got {len(parameters)}."
        )
    blocks = []
    for k, (block, size) in enumerate(zip(parameters, block_sizes)):
        arr = np.array(block, dtype=float).ravel()
        if arr.size != size:
            raise DimensionMismatchError(
                f"Parameter block {k} has size {arr.size}; evaluator declares {size}."
            )
        blocks.append(arr)
    return blocks


def validate_block_sizes(block_sizes: Sequence[int]) -> tuple[int, ...]:
    """Checks that block sizes are positive integers and returns them as a tuple."""
    sizes = tuple(int(s) for s in block_sizes)
    if not sizes:
        raise DimensionMismatchError("Evaluator declares no parameter blocks.")
    for k, s in enumerate(sizes):
        if s <= 0:
            raise DimensionMismatchError(f"Parameter block {k} has non-positive size {s}.")
    return sizes


def validate_manifolds(
    manifolds: Sequence | None,
    block_sizes: Sequence[int],
) -> list:
    """Checks per-block manifolds against the evaluator's block sizes.

    Args:
        manifolds: ``None`` or one entry per block; entries may be ``None``.
        block_sizes: Ambient size of each parameter block.

    Returns:
        A list with one entry (manifold or ``None``) per block.

    Raises:
        DimensionMismatchError: If the list length differs from the block
            count, a manifold's ambient size differs from its block size, or
            its tangent size is not in ``[0, ambient_size]``.
    """
    if manifolds is None:
        return [None] * len(block_sizes)
    manifolds = list(manifolds)
    if len(manifolds) != len(block_sizes):
        raise DimensionMismatchError(
            f"Got {len(manifolds)} manifolds for {len(block_sizes)} parameter blocks."
        )
    for k, (manifold, size) in enumerate(zip(manifolds, block_sizes)):
        if manifold is None:
            continue
        if manifold.ambient_size != size:
            raise DimensionMismatchError(
                f"Manifold for block {k} has ambient size {manifold.ambient_size}; "
                f"parameter block has size {size}."
            )
        if not 0 <= manifold.tangent_size <= manifold.ambient_size:
            raise DimensionMismatchError(
                f"Manifold for block {k} has tangent size {manifold.tangent_size}, "
                f"outside [0, {manifold.ambient_size}]."
            )
    return manifolds


def validate_residuals(residuals, num_residuals: int) -> NDArray[np.float64]:
    """Returns residuals as a 1D float array of length ``num_residuals``."""
    arr = np.asarray(residuals, dtype=float).ravel()
    if arr.size != num_residuals:
        raise DimensionMismatchError(
            f"Evaluator returned {arr.size} residuals; it declares {num_residuals}."
        )
    return arr


def validate_jacobian_shape(
    jacobian,
    rows: int,
    cols: int,
    *,
    name: str = "jacobian",
) -> NDArray[np.float64]:
    """Returns ``jacobian`` as a float array with shape ``(rows, cols)``.

    A flat buffer of ``rows * cols`` entries is read in row-major order.

    Raises:
        DimensionMismatchError: If the size or shape does not match.
    """
    arr = np.asarray(jacobian, dtype=float)
    if arr.ndim == 1 and arr.size == rows * cols:
        arr = arr.reshape(rows, cols)
    if arr.shape != (rows, cols):
        raise DimensionMismatchError(
            f"{name} has shape {arr.shape}; expected {(rows, cols)}."
        )
    return arr
