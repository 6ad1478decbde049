"""Tests for derivcheck.evaluator."""

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from derivcheck.errors import DimensionMismatchError
from derivcheck.evaluator import Evaluator, FunctionEvaluator


def product(x, y):
    """Returns [x0 * y0, x0 + y1]."""
    return np.array([x[0] * y[0], x[0] + y[1]])


def product_jacobian(x, y):
    """Analytic Jacobians of product."""
    return [np.array([[y[0]], [1.0]]), np.array([[x[0], 0.0], [0.0, 1.0]])]


PARAMS = [np.array([2.0]), np.array([3.0, 4.0])]


def test_evaluator_is_abstract():
    """Tests that the interface cannot be instantiated."""
    with pytest.raises(TypeError):
        Evaluator()


def test_residuals_only():
    """Tests that residual-only evaluation returns no Jacobians."""
    ev = FunctionEvaluator(product, [1, 2], 2, jacobian=product_jacobian)
    ok, residuals, jacobians = ev.evaluate(PARAMS)
    assert ok
    assert_array_equal(residuals, [6.0, 6.0])
    assert jacobians is None
    assert ev.parameter_block_sizes == (1, 2)
    assert ev.num_residuals == 2


def test_requested_jacobians_only():
    """Tests that unrequested blocks get None."""
    ev = FunctionEvaluator(product, [1, 2], 2, jacobian=product_jacobian)
    ok, _, jacobians = ev.evaluate(PARAMS, [False, True])
    assert ok
    assert jacobians[0] is None
    assert_array_equal(jacobians[1], [[2.0, 0.0], [0.0, 1.0]])


def test_flat_jacobian_is_read_row_major():
    """Tests that a flat Jacobian buffer is reshaped row by row."""
    ev = FunctionEvaluator(
        lambda x: np.array([x[0], x[1]]),
        [2],
        2,
        jacobian=lambda x: [np.array([1.0, 2.0, 3.0, 4.0])],
    )
    _, _, jacobians = ev.evaluate([np.zeros(2)], [True])
    assert_array_equal(jacobians[0], [[1.0, 2.0], [3.0, 4.0]])


def test_none_means_failure():
    """Tests that a function returning None reports failure."""
    ev = FunctionEvaluator(lambda x: None, [1], 1)
    ok, residuals, jacobians = ev.evaluate([np.zeros(1)], [True])
    assert ok is False
    assert residuals is None and jacobians is None


def test_non_finite_residuals_mean_failure():
    """Tests that infinite residuals report failure."""
    ev = FunctionEvaluator(lambda x: np.array([np.inf]), [1], 1)
    ok, _, _ = ev.evaluate([np.zeros(1)])
    assert ok is False


def test_missing_jacobian_callable_raises():
    """Tests that requesting Jacobians without a jacobian callable raises TypeError."""
    ev = FunctionEvaluator(product, [1, 2], 2)
    with pytest.raises(TypeError):
        ev.evaluate(PARAMS, [True, True])


def test_wrong_residual_count_raises():
    """Tests that a function returning the wrong number of residuals is rejected."""
    ev = FunctionEvaluator(product, [1, 2], 3)
    with pytest.raises(DimensionMismatchError):
        ev.evaluate(PARAMS)


def test_wrong_jacobian_count_raises():
    """Tests that a jacobian callable returning too few blocks is rejected."""
    ev = FunctionEvaluator(product, [1, 2], 2, jacobian=lambda x, y: [np.ones((2, 1))])
    with pytest.raises(DimensionMismatchError):
        ev.evaluate(PARAMS, [True, True])


def test_wrong_jacobian_shape_raises():
    """Tests that a Jacobian of the wrong shape is rejected."""
    ev = FunctionEvaluator(
        product, [1, 2], 2, jacobian=lambda x, y: [np.ones((2, 1)), np.ones((2, 3))]
    )
    with pytest.raises(DimensionMismatchError):
        ev.evaluate(PARAMS, [True, True])
