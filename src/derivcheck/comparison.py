"""Comparison of analytic and numeric Jacobians.

Each block pair is reduced to a :class:`BlockComparison`; :func:`aggregate`
folds those into the worst error over all blocks and a diagnostic log that is
empty exactly when every block passed.

The element-wise error is

.. math::

    e_{ij} = \\frac{|a_{ij} - n_{ij}|}{\\max(|a_{ij}|, |n_{ij}|, 1/2)}

where ``a`` is the analytic and ``n`` the numeric Jacobian. Entries of
magnitude one half or more are compared relatively. Below that the error is
twice the absolute difference, so it stays finite when both entries are zero.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from derivcheck.errors import DimensionMismatchError

__all__ = [
    "BlockComparison",
    "relative_errors",
    "compare_block",
    "aggregate",
]

DENOMINATOR_FLOOR = 0.5
DEFAULT_MAX_REPORTED_ENTRIES = 10


@dataclass
class BlockComparison:
    """Outcome of comparing one block's local Jacobians.

    ``offending`` lists ``(row, col, analytic, numeric, error)`` for every
    entry whose error exceeds the tolerance, worst first.
    """

    block_index: int
    max_relative_error: float
    tolerance: float
    offending: list[tuple[int, int, float, float, float]] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.max_relative_error <= self.tolerance

    def render(self, max_reported_entries: int = DEFAULT_MAX_REPORTED_ENTRIES) -> str:
        """Returns this block's log fragment; empty if the block passed."""
        if self.passed:
            return ""
        lines = [
            f"Parameter block {self.block_index}: worst relative error "
            f"{self.max_relative_error:.6g} exceeds tolerance {self.tolerance:.6g}.",
            f"  {'row':>4} {'col':>4} {'analytic':>17} {'numeric':>17} {'rel. error':>17}",
        ]
        shown = self.offending[:max_reported_entries]
        for row, col, a, n, e in shown:
            lines.append(f"  {row:4d} {col:4d} {a:17.10g} {n:17.10g} {e:17.10g}")
        omitted = len(self.offending) - len(shown)
        if omitted > 0:
            lines.append(f"  ... {omitted} more offending entries not shown.")
        return "\n".join(lines) + "\n"


def relative_errors(analytic: ArrayLike, numeric: ArrayLike) -> NDArray[np.float64]:
    """Returns the element-wise relative error matrix.

    Raises:
        DimensionMismatchError: If the shapes differ.
    """
    a = np.asarray(analytic, dtype=float)
    n = np.asarray(numeric, dtype=float)
    if a.shape != n.shape:
        raise DimensionMismatchError(
            f"Analytic Jacobian shape {a.shape} differs from numeric shape {n.shape}."
        )
    return np.abs(a - n) / np.maximum(np.maximum(np.abs(a), np.abs(n)), DENOMINATOR_FLOOR)


def compare_block(
    block_index: int,
    local_analytic: ArrayLike,
    local_numeric: ArrayLike,
    tolerance: float,
) -> BlockComparison:
    """Compares one block's local Jacobians against ``tolerance``.

    A block with no tangent directions has error ``0``. A NaN anywhere makes
    the block's error NaN, which never passes.
    """
    a = np.asarray(local_analytic, dtype=float)
    n = np.asarray(local_numeric, dtype=float)
    errors = relative_errors(a, n)
    if errors.size == 0:
        return BlockComparison(block_index, 0.0, tolerance)

    worst = float(np.nan) if np.isnan(errors).any() else float(np.max(errors))
    bad = np.argwhere(~(errors <= tolerance))
    offending = [
        (int(i), int(j), float(a[i, j]), float(n[i, j]), float(errors[i, j]))
        for i, j in bad
    ]
    offending.sort(key=lambda entry: np.inf if np.isnan(entry[4]) else entry[4], reverse=True)
    return BlockComparison(block_index, worst, tolerance, offending)


def aggregate(
    comparisons: Sequence[BlockComparison],
    max_reported_entries: int = DEFAULT_MAX_REPORTED_ENTRIES,
) -> tuple[float, str]:
    """Combines per-block comparisons.

    Returns:
        ``(maximum_relative_error, log)``. The log is empty iff every block
        passed; otherwise it starts with a summary line followed by one
        fragment per failing block, in block order.
    """
    errors = [c.max_relative_error for c in comparisons]
    max_error = float(np.nan) if np.isnan(errors).any() else float(max(errors, default=0.0))

    fragments = []
    num_bad = 0
    for comparison in comparisons:
        fragment = comparison.render(max_reported_entries)
        if fragment:
            fragments.append(fragment)
            num_bad += len(comparison.offending)

    if not fragments:
        return max_error, ""
    header = (
        f"Detected {num_bad} bad Jacobian component(s) in {len(fragments)} "
        f"parameter block(s). Worst relative error was {max_error:.6g}.\n"
    )
    return max_error, header + "".join(fragments)
