"""Projection of ambient Jacobians onto a manifold's tangent space.

By the chain rule, the Jacobian of ``f(plus(x, delta))`` with respect to
``delta`` at ``delta = 0`` is ``J @ plus_jacobian(x)``, where ``J`` is the
Jacobian of ``f`` in ambient coordinates.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from derivcheck.errors import DimensionMismatchError, EvaluationError
from derivcheck.manifolds.base import Manifold
from derivcheck.utils.validate import validate_jacobian_shape

__all__ = [
    "plus_jacobian",
    "project_jacobian",
]


def plus_jacobian(manifold: Manifold, point: ArrayLike) -> NDArray[np.float64]:
    """Evaluates ``manifold.plus_jacobian`` at ``point`` and checks its shape.

    Raises:
        EvaluationError: If the manifold returns ``None``.
        DimensionMismatchError: If the result is not
            ``(ambient_size, tangent_size)``.
    """
    jac = manifold.plus_jacobian(np.asarray(point, dtype=float))
    if jac is None:
        raise EvaluationError(f"plus_jacobian failed for {manifold!r}.")
    return validate_jacobian_shape(
        jac, manifold.ambient_size, manifold.tangent_size, name="plus_jacobian"
    )


def project_jacobian(
    ambient_jacobian: ArrayLike,
    manifold: Manifold | None,
    point: ArrayLike,
) -> NDArray[np.float64]:
    """Returns the local Jacobian ``ambient_jacobian @ plus_jacobian(point)``.

    Args:
        ambient_jacobian: ``(num_residuals, ambient_size)`` Jacobian.
        manifold: The block's manifold, or ``None`` for the identity.
        point: Current value of the parameter block.

    Returns:
        ``(num_residuals, tangent_size)`` Jacobian. Without a manifold this is
        a float copy of ``ambient_jacobian``.

    Raises:
        DimensionMismatchError: If ``ambient_jacobian`` is not 2D or its
            column count differs from the manifold's ambient size.
        EvaluationError: If ``plus_jacobian`` fails.
    """
    jac = np.array(ambient_jacobian, dtype=float)
    if jac.ndim != 2:
        raise DimensionMismatchError(
            f"ambient_jacobian must be 2D; got shape {jac.shape}."
        )
    if manifold is None:
        return jac
    if jac.shape[1] != manifold.ambient_size:
        raise DimensionMismatchError(
            f"ambient_jacobian has {jac.shape[1]} columns; manifold ambient size "
            f"is {manifold.ambient_size}."
        )
    return jac @ plus_jacobian(manifold, point)
