"""Provides the GradientChecker class.

The checker compares the analytic Jacobians an evaluator reports against
finite-difference estimates. Each parameter block may carry a manifold; both
Jacobians are then compared in the block's tangent space.

Examples:
--------
A correct Jacobian passes:

>>> import numpy as np
>>> from derivcheck.evaluator import FunctionEvaluator
>>> from derivcheck.gradient_checker import GradientChecker
>>> from derivcheck.probe_results import ProbeResults
>>> a = np.array([0.1, -0.2])
>>> ev = FunctionEvaluator(
...     function=lambda x: np.array([np.exp(-a @ x)]),
...     parameter_block_sizes=[2],
...     num_residuals=1,
...     jacobian=lambda x: [(-np.exp(-a @ x) * a).reshape(1, 2)],
... )
>>> checker = GradientChecker(ev)
>>> results = ProbeResults()
>>> checker.probe([np.array([0.3, 0.4])], 1e-9, results)
True
>>> results.diagnostic_log
''

A driver that only needs the verdict can skip the results record:

>>> from derivcheck.gradient_checker import probe
>>> probe(ev, None, [np.array([0.3, 0.4])], 1e-9)
True
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from derivcheck.comparison import (
    DEFAULT_MAX_REPORTED_ENTRIES,
    aggregate,
    compare_block,
)
from derivcheck.errors import DimensionMismatchError, EvaluationError
from derivcheck.evaluator import Evaluator
from derivcheck.finite.numeric_diff import estimate_block_jacobian
from derivcheck.finite.options import NumericDiffOptions
from derivcheck.logger import derivcheck_logger
from derivcheck.manifolds.base import Manifold
from derivcheck.probe_results import ProbeResults
from derivcheck.projection import project_jacobian
from derivcheck.utils.types import ParameterBlocks
from derivcheck.utils.validate import (
    as_parameter_blocks,
    validate_block_sizes,
    validate_jacobian_shape,
    validate_manifolds,
    validate_residuals,
)

__all__ = [
    "GradientChecker",
    "probe",
]


class GradientChecker:
    """Checks analytic Jacobians against numeric ones, block by block.

    The evaluator and manifolds are borrowed: the checker keeps references to
    them but never copies or modifies them, and they must stay alive while
    the checker is used.

    Attributes:
        evaluator: The residual function under test.
        manifolds: One manifold or ``None`` per parameter block.
        options: Numeric differentiation settings.
        max_reported_entries: Cap on offending entries listed per block in
            the diagnostic log.
    """

    def __init__(
        self,
        evaluator: Evaluator,
        manifolds: Sequence[Manifold | None] | None = None,
        options: NumericDiffOptions | None = None,
        max_reported_entries: int = DEFAULT_MAX_REPORTED_ENTRIES,
    ) -> None:
        """Initialises the checker and validates manifold sizes.

        Args:
            evaluator: The residual function under test.
            manifolds: ``None`` (no manifolds) or one entry per parameter
                block; ``None`` entries mean the block has no manifold.
            options: Numeric differentiation settings. Defaults to
                ``NumericDiffOptions()`` (Ridders extrapolation).
            max_reported_entries: Cap on offending entries listed per block.

        Raises:
            DimensionMismatchError: If the manifold list or any manifold does
                not match the evaluator's parameter blocks.
        """
        self.evaluator = evaluator
        self.block_sizes = validate_block_sizes(evaluator.parameter_block_sizes)
        self.manifolds = validate_manifolds(manifolds, self.block_sizes)
        self.tangent_sizes = tuple(
            size if manifold is None else manifold.tangent_size
            for size, manifold in zip(self.block_sizes, self.manifolds)
        )
        self.options = options or NumericDiffOptions()
        self.max_reported_entries = int(max_reported_entries)

    def probe(
        self,
        parameters: ParameterBlocks,
        relative_precision: float,
        results: ProbeResults | None = None,
    ) -> bool:
        """Checks the evaluator's Jacobians at ``parameters``.

        Args:
            parameters: Current value of each parameter block. Never modified;
                the checker works on private copies.
            relative_precision: Largest element-wise relative error accepted.
            results: Optional record that receives residuals, all Jacobians,
                the worst error and the diagnostic log. It is reset first.

        Returns:
            True iff the evaluator succeeded, every block could be
            differentiated numerically, and every block's local analytic
            Jacobian matches its local numeric Jacobian within
            ``relative_precision``. A numeric differentiation failure leaves
            ``results.success`` True and records the residuals and analytic
            Jacobians; the numeric matrices stay zero.

        Raises:
            ValueError: If ``relative_precision`` is negative.
            DimensionMismatchError: If parameter blocks or returned arrays do
                not match the declared sizes.
        """
        if not relative_precision >= 0:
            raise ValueError(f"relative_precision must be non-negative; got {relative_precision}.")

        blocks = as_parameter_blocks(parameters, self.block_sizes)
        num_residuals = self.evaluator.num_residuals
        num_blocks = len(blocks)
        if results is not None:
            results.reset(num_residuals, self.block_sizes, self.tangent_sizes)

        ok, residuals, jacobians = self.evaluator.evaluate(blocks, [True] * num_blocks)
        if not ok:
            return self._fail(results, "Function evaluation with Jacobians failed.")
        residuals = validate_residuals(residuals, num_residuals)
        if jacobians is None or len(jacobians) != num_blocks:
            raise DimensionMismatchError(
                f"Evaluator must return {num_blocks} Jacobians when all are requested."
            )
        ambient = [
            validate_jacobian_shape(
                jacobians[k], num_residuals, self.block_sizes[k], name=f"Jacobian of block {k}"
            )
            for k in range(num_blocks)
        ]

        if results is not None:
            results.success = True
            results.residuals = residuals.copy()
            results.ambient_jacobians = [j.copy() for j in ambient]

        local: list[NDArray[np.float64]] = []
        numeric_local: list[NDArray[np.float64]] = []
        numeric_ambient: list[NDArray[np.float64]] = []
        k = 0
        try:
            for k, manifold in enumerate(self.manifolds):
                local.append(project_jacobian(ambient[k], manifold, blocks[k]))
                if results is not None:
                    results.local_jacobians[k] = local[k]
                numeric = self._numeric_jacobian(blocks, k, manifold, residuals)
                numeric_local.append(numeric)
                if results is None:
                    continue
                if manifold is None:
                    numeric_ambient.append(numeric.copy())
                else:
                    numeric_ambient.append(self._numeric_jacobian(blocks, k, None, residuals))
        except EvaluationError as exc:
            # The evaluator succeeded at the point itself; only the check failed.
            message = f"Numeric differentiation failed for parameter block {k}. {exc}"
            derivcheck_logger.warning(message)
            if results is not None:
                results.diagnostic_log = message + "\n"
            return False

        comparisons = [
            compare_block(k, local[k], numeric_local[k], relative_precision)
            for k in range(num_blocks)
        ]
        max_error, log = aggregate(comparisons, self.max_reported_entries)

        if results is not None:
            results.numeric_ambient_jacobians = numeric_ambient
            results.numeric_local_jacobians = numeric_local
            results.maximum_relative_error = max_error
            results.diagnostic_log = log

        passed = bool(max_error <= relative_precision)
        derivcheck_logger.debug(
            "Probed %d parameter block(s): worst relative error %.3g (tolerance %.3g).",
            num_blocks,
            max_error,
            relative_precision,
        )
        if not passed:
            derivcheck_logger.warning(
                "Gradient check failed: worst relative error %.3g exceeds %.3g.",
                max_error,
                relative_precision,
            )
        return passed

    def _numeric_jacobian(
        self,
        blocks: list[NDArray[np.float64]],
        k: int,
        manifold: Manifold | None,
        residuals: NDArray[np.float64],
    ) -> NDArray[np.float64]:
        """Numeric Jacobian of block ``k`` along the tangent space of ``manifold``."""
        return estimate_block_jacobian(
            self.evaluator,
            blocks,
            k,
            manifold=manifold,
            options=self.options,
            base_residuals=residuals,
        )

    @staticmethod
    def _fail(results: ProbeResults | None, message: str) -> bool:
        """Records an evaluation failure and returns False."""
        derivcheck_logger.warning(message)
        if results is not None:
            results.success = False
            results.diagnostic_log = message + "\n"
        return False


def probe(
    evaluator: Evaluator,
    manifolds: Sequence[Manifold | None] | None,
    parameters: ParameterBlocks,
    relative_precision: float,
    results: ProbeResults | None = None,
    options: NumericDiffOptions | None = None,
) -> bool:
    """Checks ``evaluator``'s Jacobians once; see :meth:`GradientChecker.probe`.

    This is the entry point for optimization drivers: call it at a suspect
    iterate and, when it returns False, stop and show
    ``results.diagnostic_log`` to the user.
    """
    checker = GradientChecker(evaluator, manifolds, options)
    return checker.probe(parameters, relative_precision, results)
