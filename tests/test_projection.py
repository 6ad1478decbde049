"""Tests for derivcheck.projection."""

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from derivcheck.errors import DimensionMismatchError, EvaluationError
from derivcheck.manifolds import LinearManifold, QuaternionManifold, SubsetManifold
from derivcheck.projection import plus_jacobian, project_jacobian


class NoJacobianManifold(SubsetManifold):
    """Subset manifold whose plus_jacobian cannot be evaluated."""

    def plus_jacobian(self, x):
        return None


class WrongShapeManifold(SubsetManifold):
    """Subset manifold whose plus_jacobian has the wrong shape."""

    def plus_jacobian(self, x):
        return np.eye(self.ambient_size)


J = np.arange(1.0, 10.0).reshape(3, 3)


def test_no_manifold_returns_copy():
    """Tests that without a manifold the ambient Jacobian is copied unchanged."""
    local = project_jacobian(J, None, np.zeros(3))
    assert_array_equal(local, J)
    assert local is not J
    local[0, 0] = -1.0
    assert J[0, 0] == 1.0


def test_linear_manifold_projection_is_matrix_product():
    """Tests that the local Jacobian equals J @ A for a linear manifold."""
    a = np.array([[1.5, 2.5], [3.5, 4.5], [5.5, 6.5]])
    local = project_jacobian(J, LinearManifold(a), np.ones(3))
    assert local.shape == (3, 2)
    assert_array_equal(local, J @ a)


def test_subset_projection_selects_free_columns():
    """Tests that a subset manifold keeps only the free columns."""
    local = project_jacobian(J, SubsetManifold(3, [1]), np.zeros(3))
    assert_array_equal(local, J[:, [0, 2]])


def test_quaternion_projection_shape():
    """Tests that a 4-column Jacobian projects to 3 tangent columns."""
    q = np.array([1.0, 0.0, 0.0, 0.0])
    jac = np.arange(8.0).reshape(2, 4)
    local = project_jacobian(jac, QuaternionManifold(), q)
    assert local.shape == (2, 3)
    assert_allclose(local, jac @ QuaternionManifold().plus_jacobian(q))


def test_column_mismatch_raises():
    """Tests that a Jacobian with the wrong number of columns is rejected."""
    with pytest.raises(DimensionMismatchError):
        project_jacobian(J, QuaternionManifold(), np.array([1.0, 0.0, 0.0, 0.0]))


def test_non_matrix_raises():
    """Tests that a 1D Jacobian is rejected."""
    with pytest.raises(DimensionMismatchError):
        project_jacobian(np.ones(3), None, np.zeros(3))


def test_failed_plus_jacobian_raises():
    """Tests that a manifold reporting failure raises EvaluationError."""
    with pytest.raises(EvaluationError):
        plus_jacobian(NoJacobianManifold(3, [0]), np.zeros(3))


def test_wrong_plus_jacobian_shape_raises():
    """Tests that a plus_jacobian of the wrong shape is rejected."""
    with pytest.raises(DimensionMismatchError):
        project_jacobian(J, WrongShapeManifold(3, [0]), np.zeros(3))
