"""Provides the evaluator interface consumed by the gradient checker.

An evaluator computes a residual vector from an ordered list of parameter
blocks and, on request, the analytic Jacobian of the residuals with respect to
each block (in ambient coordinates). The gradient checker only ever borrows
an evaluator; it never copies it or keeps a reference after a probe returns.

Typical usage example:

>>> import numpy as np
>>> from derivcheck.evaluator import FunctionEvaluator
>>> a = np.array([1.0, 2.0])
>>> evaluator = FunctionEvaluator(
...     function=lambda x: np.array([np.exp(-a @ x)]),
...     parameter_block_sizes=[2],
...     num_residuals=1,
...     jacobian=lambda x: [(-np.exp(-a @ x) * a).reshape(1, 2)],
... )
>>> ok, residuals, jacobians = evaluator.evaluate([np.zeros(2)], [True])
>>> ok, residuals.tolist(), jacobians[0].tolist()
(True, [1.0], [[-1.0, -2.0]])
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from derivcheck.errors import DimensionMismatchError
from derivcheck.logger import derivcheck_logger
from derivcheck.utils.validate import (
    validate_block_sizes,
    validate_jacobian_shape,
    validate_residuals,
)

__all__ = [
    "EvaluationResult",
    "Evaluator",
    "FunctionEvaluator",
]

EvaluationResult = tuple[
    bool,
    NDArray[np.float64] | None,
    list[NDArray[np.float64] | None] | None,
]
"""``(success, residuals, jacobians)`` as returned by :meth:`Evaluator.evaluate`."""


class Evaluator(ABC):
    """Residual function with optional analytic Jacobians.

    Subclasses declare the ambient size of each parameter block and the
    number of residuals; both are fixed for the lifetime of the object.
    """

    @property
    @abstractmethod
    def parameter_block_sizes(self) -> tuple[int, ...]:
        """Ambient size of each parameter block, in block order."""

    @property
    @abstractmethod
    def num_residuals(self) -> int:
        """Length of the residual vector."""

    @abstractmethod
    def evaluate(
        self,
        parameters: Sequence[NDArray[np.float64]],
        jacobian_blocks: Sequence[bool] | None = None,
    ) -> EvaluationResult:
        """Evaluates residuals and, optionally, per-block Jacobians.

        Args:
            parameters: One 1D array per parameter block. Implementations must
                not modify these arrays.
            jacobian_blocks: ``None`` to skip all Jacobians, or one boolean
                per block selecting the Jacobians to compute.

        Returns:
            ``(success, residuals, jacobians)``. ``success`` is False if the
            function could not be evaluated at ``parameters``; the other two
            entries are then ignored. ``jacobians`` is ``None`` when none
            were requested, otherwise a list with a
            ``(num_residuals, block_size)`` array for each requested block
            and ``None`` for the rest.
        """


class FunctionEvaluator(Evaluator):
    """Builds an :class:`Evaluator` from plain Python callables.

    Attributes:
        function: Called as ``function(*blocks)``; returns the residual vector,
            or ``None`` if it cannot be evaluated at the given point.
        jacobian: Optional; called as ``jacobian(*blocks)`` and returns one
            ``(num_residuals, block_size)`` matrix per block, or ``None`` on
            failure. Without it only residuals can be evaluated.
    """

    def __init__(
        self,
        function: Callable[..., NDArray[np.floating] | None],
        parameter_block_sizes: Sequence[int],
        num_residuals: int,
        jacobian: Callable[..., Sequence | None] | None = None,
    ) -> None:
        self.function = function
        self.jacobian = jacobian
        self._block_sizes = validate_block_sizes(parameter_block_sizes)
        self._num_residuals = int(num_residuals)

    @property
    def parameter_block_sizes(self) -> tuple[int, ...]:
        return self._block_sizes

    @property
    def num_residuals(self) -> int:
        return self._num_residuals

    def evaluate(
        self,
        parameters: Sequence[NDArray[np.float64]],
        jacobian_blocks: Sequence[bool] | None = None,
    ) -> EvaluationResult:
        """Calls the wrapped callables; see :meth:`Evaluator.evaluate`.

        Non-finite residuals count as a failed evaluation.

        Raises:
            TypeError: If Jacobians are requested but no ``jacobian`` callable
                was given.
            DimensionMismatchError: If a callable returns arrays of the wrong
                size.
        """
        values = self.function(*parameters)
        if values is None:
            return False, None, None
        residuals = validate_residuals(values, self._num_residuals)
        if not np.isfinite(residuals).all():
            derivcheck_logger.warning("Non-finite residuals; treating evaluation as failed.")
            return False, None, None

        if jacobian_blocks is None or not any(jacobian_blocks):
            return True, residuals, None
        if self.jacobian is None:
            raise TypeError("Jacobians were requested but no jacobian callable was given.")

        full = self.jacobian(*parameters)
        if full is None:
            return False, None, None
        if len(full) != len(self._block_sizes):
            raise DimensionMismatchError(
                f"jacobian returned {len(full)} blocks; expected {len(self._block_sizes)}."
            )
        jacobians: list[NDArray[np.float64] | None] = []
        for k, (wanted, size) in enumerate(zip(jacobian_blocks, self._block_sizes)):
            if not wanted:
                jacobians.append(None)
                continue
            jacobians.append(
                validate_jacobian_shape(
                    full[k], self._num_residuals, size, name=f"jacobian[{k}]"
                ).copy()
            )
        return True, residuals, jacobians
