"""Finite-difference Jacobians of one parameter block.

The block is perturbed along its tangent coordinates through the block's
manifold (plain addition when there is none), so the columns of the result are
derivatives with respect to tangent coordinates. For a block without a
manifold this is the ordinary ambient Jacobian.

Examples:
--------
>>> import numpy as np
>>> from derivcheck.evaluator import FunctionEvaluator
>>> from derivcheck.finite.numeric_diff import estimate_block_jacobian
>>> from derivcheck.finite.options import NumericDiffOptions
>>> ev = FunctionEvaluator(lambda x, y: np.array([x[0] * y[0]]), [1, 1], 1)
>>> jac = estimate_block_jacobian(
...     ev, [np.array([2.0]), np.array([3.0])], 0,
...     options=NumericDiffOptions(scheme="central"),
... )
>>> np.allclose(jac, [[3.0]])
True
"""

from __future__ import annotations

from functools import partial
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from derivcheck.errors import DimensionMismatchError, EvaluationError
from derivcheck.evaluator import Evaluator
from derivcheck.finite.extrapolation import extend_richardson_row
from derivcheck.finite.options import DifferenceScheme, NumericDiffOptions
from derivcheck.manifolds.base import Manifold
from derivcheck.utils.concurrency import parallel_execute
from derivcheck.utils.types import ParameterBlocks
from derivcheck.utils.validate import as_parameter_blocks, validate_residuals

__all__ = [
    "estimate_block_jacobian",
    "evaluate_residuals",
]


def evaluate_residuals(
    evaluator: Evaluator,
    parameters: Sequence[NDArray[np.float64]],
) -> NDArray[np.float64]:
    """Evaluates residuals only.

    Raises:
        EvaluationError: If the evaluator reports a failure.
    """
    ok, residuals, _ = evaluator.evaluate(parameters, None)
    if not ok:
        raise EvaluationError("Residual evaluation failed.")
    return validate_residuals(residuals, evaluator.num_residuals)


def estimate_block_jacobian(
    evaluator: Evaluator,
    parameters: ParameterBlocks,
    block_index: int,
    manifold: Manifold | None = None,
    options: NumericDiffOptions | None = None,
    base_residuals: NDArray[np.float64] | None = None,
) -> NDArray[np.float64]:
    """Returns the numeric Jacobian of the residuals w.r.t. one block's tangent space.

    Args:
        evaluator: The residual function.
        parameters: Current value of every parameter block. Not modified.
        block_index: Index of the block to differentiate.
        manifold: Manifold of that block, or ``None`` for plain addition.
        options: Scheme and step sizes. Defaults to ``NumericDiffOptions()``.
        base_residuals: Residuals at ``parameters``; used by the forward
            scheme, which evaluates them itself when not given.

    Returns:
        Array of shape ``(num_residuals, tangent_size)``; column ``i`` is the
        derivative along tangent coordinate ``i``.

    Raises:
        EvaluationError: If the evaluator or ``manifold.plus`` fails at any
            point. No partial Jacobian is returned.
        DimensionMismatchError: If block or manifold sizes disagree.
    """
    options = options or NumericDiffOptions()
    blocks = as_parameter_blocks(parameters, evaluator.parameter_block_sizes)
    if not 0 <= block_index < len(blocks):
        raise IndexError(f"block_index {block_index} out of range for {len(blocks)} blocks.")

    x = blocks[block_index]
    if manifold is None:
        tangent_size = x.size
        scales = np.abs(x)
    else:
        if manifold.ambient_size != x.size:
            raise DimensionMismatchError(
                f"Manifold ambient size {manifold.ambient_size} does not match "
                f"block {block_index} of size {x.size}."
            )
        tangent_size = manifold.tangent_size
        # Tangent coordinates have no ambient counterpart; scale by the block.
        scales = np.full(tangent_size, np.max(np.abs(x), initial=0.0))

    num_residuals = evaluator.num_residuals
    if tangent_size == 0:
        return np.zeros((num_residuals, 0))

    if options.scheme is DifferenceScheme.FORWARD:
        if base_residuals is None:
            base_residuals = evaluate_residuals(evaluator, blocks)
        else:
            base_residuals = validate_residuals(base_residuals, num_residuals)

    worker = partial(
        _column_derivative,
        evaluator=evaluator,
        blocks=blocks,
        block_index=block_index,
        manifold=manifold,
        tangent_size=tangent_size,
        options=options,
        base_residuals=base_residuals,
    )
    cols = parallel_execute(
        worker,
        [(i, float(scales[i])) for i in range(tangent_size)],
        n_workers=options.n_workers,
    )
    return np.column_stack([np.asarray(c, dtype=float).reshape(num_residuals) for c in cols])


def _perturbed_residuals(
    step: float,
    i: int,
    *,
    evaluator: Evaluator,
    blocks: list[NDArray[np.float64]],
    block_index: int,
    manifold: Manifold | None,
    tangent_size: int,
) -> NDArray[np.float64]:
    """Residuals with tangent coordinate ``i`` of the block moved by ``step``.

    Builds a private copy of the block and of the block list, so concurrent
    columns never share buffers.
    """
    x = blocks[block_index]
    delta = np.zeros(tangent_size)
    delta[i] = step
    if manifold is None:
        x_plus = x + delta
    else:
        x_plus = manifold.plus(x, delta)
        if x_plus is None:
            raise EvaluationError(
                f"Manifold plus failed for block {block_index}, tangent coordinate {i}."
            )
        x_plus = np.asarray(x_plus, dtype=float).ravel()
        if x_plus.size != x.size:
            raise DimensionMismatchError(
                f"Manifold plus returned {x_plus.size} entries for block {block_index}; "
                f"expected {x.size}."
            )

    perturbed = list(blocks)
    perturbed[block_index] = x_plus
    ok, residuals, _ = evaluator.evaluate(perturbed, None)
    if not ok:
        raise EvaluationError(
            f"Evaluation failed with block {block_index}, tangent coordinate {i} "
            f"perturbed by {step:g}."
        )
    return validate_residuals(residuals, evaluator.num_residuals)


def _column_derivative(
    i: int,
    scale: float,
    *,
    options: NumericDiffOptions,
    base_residuals: NDArray[np.float64] | None,
    **perturb_kwargs,
) -> NDArray[np.float64]:
    """Derivative of the residuals along tangent coordinate ``i``."""
    f = partial(_perturbed_residuals, i=i, **perturb_kwargs)
    h = options.step_size(scale)

    if options.scheme is DifferenceScheme.FORWARD:
        return (f(h) - base_residuals) / h

    def central(step: float) -> NDArray[np.float64]:
        return (f(step) - f(-step)) / (2.0 * step)

    if options.scheme is DifferenceScheme.CENTRAL:
        return central(h)

    return _ridders_column(central, h, options)


def _ridders_column(central, h0: float, options: NumericDiffOptions) -> NDArray[np.float64]:
    """Ridders extrapolation of central differences starting at step ``h0``.

    Adds one shrunken step per level until the newest diagonal entry agrees
    with the previous one to within ``ridders_epsilon``, or until it moves
    more than twice as far as the best agreement seen so far (round-off has
    taken over). The diagonal entry that changed least is returned.
    """
    r = options.ridders_shrink_factor
    row = None
    h = h0
    prev_diag = None
    best = None
    best_change = np.inf

    for _ in range(options.ridders_max_extrapolations):
        row = extend_richardson_row(row, central(h), p=2, r=r)
        h /= r
        diag = row[-1]
        if prev_diag is None:
            prev_diag = diag
            continue

        change = float(np.max(np.abs(diag - prev_diag), initial=0.0))
        prev_diag = diag
        if change < best_change:
            best, best_change = diag, change
            if best_change < options.ridders_epsilon:
                break
        elif change >= 2.0 * best_change:
            break

    return np.asarray(prev_diag if best is None else best, dtype=float)
