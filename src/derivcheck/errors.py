"""Exception types raised by DerivCheck."""

from __future__ import annotations

__all__ = [
    "DerivCheckError",
    "EvaluationError",
    "DimensionMismatchError",
    "GradientCheckError",
]


class DerivCheckError(Exception):
    """Base class for all DerivCheck errors."""


class EvaluationError(DerivCheckError, RuntimeError):
    """An evaluator or manifold reported that it could not compute a value.

    Raised while building numeric Jacobians or projecting analytic ones.
    :func:`derivcheck.gradient_checker.probe` turns it into a failed probe, so
    it only reaches callers that use the lower-level helpers directly.
    """


class DimensionMismatchError(DerivCheckError, ValueError):
    """Declared block, manifold or Jacobian sizes do not agree.

    This is a programming error on the caller's side and is never caught by
    the probe.
    """


class GradientCheckError(DerivCheckError, RuntimeError):
    """A gradient check run on behalf of an optimization driver failed.

    Attributes:
        message: The accumulated diagnostic log of the failed checks.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
