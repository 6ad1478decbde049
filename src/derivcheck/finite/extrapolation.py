"""Extrapolation methods for sequences of finite-difference estimates."""

from __future__ import annotations

from typing import Sequence

import numpy as np
from numpy.typing import NDArray

__all__ = [
    "extend_richardson_row",
    "richardson_extrapolate",
]


def extend_richardson_row(
        previous_row: Sequence[NDArray[np.float64]] | None,
        value: NDArray[np.float64] | float,
        p: int,
        r: float = 2.0,
) -> list[NDArray[np.float64]]:
    """Adds one step size to a Richardson tableau.

    Row ``k`` of the tableau holds the estimate at step ``h / r**k`` followed
    by its successive extrapolations; its last entry is the diagonal entry
    that uses all ``k + 1`` step sizes. Building the tableau one row at a time
    lets a caller stop as soon as the diagonal has converged.

    Args:
        previous_row:
            Row ``k - 1`` of the tableau, or ``None`` for the first row.
        value:
            Approximation at the next (smaller) step size.
        p:
            The order of the leading error term in the approximations.
            Successive error terms are assumed to grow by ``p`` as well
            (``p = 2`` for central differences).
        r:
            The step-size reduction factor between successive rows
            (default is 2.0).

    Returns:
        Row ``k``, one entry longer than ``previous_row``.
    """
    row = [np.asarray(value, dtype=float)]
    for j, prev in enumerate(previous_row or (), start=1):
        factor = r ** (p * j)
        row.append((factor * row[j - 1] - prev) / (factor - 1.0))
    return row


def richardson_extrapolate(
        base_values: Sequence[NDArray[np.float64] | float],
        p: int,
        r: float = 2.0,
) -> NDArray[np.float64] | float:
    """Computes Richardson extrapolation on a sequence of approximations.

    Richardson extrapolation improves the accuracy of a sequence of
    numerical approximations that converge with a known leading-order error
    term. Given a sequence of approximations computed with decreasing step sizes,
    this method combines them to eliminate the leading error terms, yielding
    a more accurate estimate of the true value.

    Args:
        base_values:
            Sequence of approximations at different step sizes.
            The step sizes are assumed to decrease by a factor of `r`
            between successive entries.
        p:
            The order of the leading error term in the approximations.
        r:
            The step-size reduction factor between successive entries
            (default is 2.0).

    Returns:
        The extrapolated value with improved accuracy.

    Raises:
        ValueError: If `base_values` has fewer than two entries.
    """
    if len(base_values) < 2:
        raise ValueError("richardson_extrapolate requires at least two base values.")

    row = None
    for value in base_values:
        row = extend_richardson_row(row, value, p=p, r=r)

    result = row[-1]
    return float(result) if result.ndim == 0 else result
