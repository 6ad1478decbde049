"""Evaluator wrapper that checks Jacobians every time they are requested.

An optimization driver that wants to validate user derivatives while it runs
wraps each evaluator in a :class:`GradientCheckingEvaluator` and passes a
shared callback. Whenever the driver asks for Jacobians, the wrapper probes
the wrapped evaluator at the same point and reports mismatches to the
callback. The driver keeps receiving the user's own residuals and Jacobians,
and decides at a safe point whether to stop:

>>> import numpy as np
>>> from derivcheck.evaluator import FunctionEvaluator
>>> from derivcheck.gradient_checking_evaluator import (
...     GradientCheckingEvaluator,
...     GradientErrorRecorder,
... )
>>> wrong = FunctionEvaluator(
...     function=lambda x: np.array([x[0] ** 2]),
...     parameter_block_sizes=[1],
...     num_residuals=1,
...     jacobian=lambda x: [np.array([[3.0 * x[0]]])],
... )
>>> recorder = GradientErrorRecorder()
>>> checked = GradientCheckingEvaluator(wrong, None, 1e-6, recorder, extra_info="x^2 term")
>>> ok, _, _ = checked.evaluate([np.array([1.0])], [True])
>>> ok, recorder.gradient_error_detected
(True, True)
"""

from __future__ import annotations

from typing import Protocol, Sequence

import numpy as np
from numpy.typing import NDArray

from derivcheck.comparison import DEFAULT_MAX_REPORTED_ENTRIES
from derivcheck.errors import GradientCheckError
from derivcheck.evaluator import EvaluationResult, Evaluator
from derivcheck.finite.options import NumericDiffOptions
from derivcheck.gradient_checker import GradientChecker
from derivcheck.logger import derivcheck_logger
from derivcheck.manifolds.base import Manifold
from derivcheck.probe_results import ProbeResults

__all__ = [
    "GradientErrorCallback",
    "GradientErrorRecorder",
    "GradientCheckingEvaluator",
]


class GradientErrorCallback(Protocol):
    """Receives gradient-check failure messages."""

    def set_gradient_error(self, message: str) -> None:
        ...


class GradientErrorRecorder:
    """Collects gradient-check failures for an optimization driver.

    Attributes:
        gradient_error_detected: True once any check has failed.
        error_log: All failure messages received, in order.
    """

    def __init__(self) -> None:
        self.gradient_error_detected = False
        self.error_log = ""

    def set_gradient_error(self, message: str) -> None:
        self.gradient_error_detected = True
        self.error_log += message

    def raise_if_detected(self) -> None:
        """Raises :class:`GradientCheckError` if any check has failed."""
        if self.gradient_error_detected:
            raise GradientCheckError(self.error_log)


class GradientCheckingEvaluator(Evaluator):
    """Probes the wrapped evaluator whenever Jacobians are requested.

    Residual-only evaluations are forwarded unchanged. The wrapper never
    fails an evaluation because of a Jacobian mismatch; it only reports it.
    """

    def __init__(
        self,
        evaluator: Evaluator,
        manifolds: Sequence[Manifold | None] | None,
        relative_precision: float,
        callback: GradientErrorCallback,
        extra_info: str = "",
        options: NumericDiffOptions | None = None,
        max_reported_entries: int = DEFAULT_MAX_REPORTED_ENTRIES,
    ) -> None:
        """Initialises the wrapper.

        Args:
            evaluator: The evaluator to check. Borrowed, not copied.
            manifolds: Per-block manifolds, as for :class:`GradientChecker`.
            relative_precision: Tolerance passed to every probe.
            callback: Object whose ``set_gradient_error`` receives failures.
            extra_info: Text prepended to every failure message, typically
                naming the residual term.
            options: Numeric differentiation settings.
            max_reported_entries: Cap on offending entries listed per block.
        """
        if not relative_precision >= 0:
            raise ValueError(f"relative_precision must be non-negative; got {relative_precision}.")
        self.evaluator = evaluator
        self.relative_precision = float(relative_precision)
        self.callback = callback
        self.extra_info = extra_info
        self.checker = GradientChecker(evaluator, manifolds, options, max_reported_entries)

    @property
    def parameter_block_sizes(self) -> tuple[int, ...]:
        return self.checker.block_sizes

    @property
    def num_residuals(self) -> int:
        return self.evaluator.num_residuals

    def evaluate(
        self,
        parameters: Sequence[NDArray[np.float64]],
        jacobian_blocks: Sequence[bool] | None = None,
    ) -> EvaluationResult:
        """Evaluates like the wrapped evaluator, probing when Jacobians are requested."""
        if jacobian_blocks is None or not any(jacobian_blocks):
            return self.evaluator.evaluate(parameters, jacobian_blocks)

        results = ProbeResults()
        passed = self.checker.probe(parameters, self.relative_precision, results)
        if not results.success:
            return False, None, None

        if not passed:
            message = (
                f"Gradient check failed for {self.extra_info or 'evaluator'}.\n"
                f"{results.diagnostic_log}"
            )
            derivcheck_logger.warning(message)
            self.callback.set_gradient_error(message)

        jacobians = [
            jac if wanted else None
            for jac, wanted in zip(results.ambient_jacobians, jacobian_blocks)
        ]
        return True, results.residuals, jacobians
