"""Unit tests for Richardson extrapolation."""

import numpy as np
import pytest

from derivcheck.finite.extrapolation import (
    extend_richardson_row,
    richardson_extrapolate,
)


def central_estimates(f, x, h0, levels, r=2.0):
    """Central differences of f at x with steps h0, h0/r, ..."""
    return [(f(x + h0 / r**k) - f(x - h0 / r**k)) / (2 * h0 / r**k) for k in range(levels)]


def test_richardson_removes_leading_error_term():
    """Tests that one Richardson step cancels the h^2 term exactly."""
    # A(h) = 1 + h^2 sampled at h = 1 and h = 1/2.
    assert richardson_extrapolate([2.0, 1.25], p=2, r=2.0) == pytest.approx(1.0)


def test_richardson_vector_values():
    """Tests that Richardson extrapolation works element-wise on arrays."""
    base = [np.array([2.0, 3.0]), np.array([1.25, 1.5])]
    out = richardson_extrapolate(base, p=2, r=2.0)
    np.testing.assert_allclose(out, [1.0, 1.0])


def test_richardson_improves_central_differences():
    """Tests that extrapolating central differences beats the finest raw estimate."""
    base = central_estimates(np.sin, 0.5, 0.1, 4)
    exact = np.cos(0.5)
    extrapolated = richardson_extrapolate(base, p=2)
    assert abs(extrapolated - exact) < abs(base[-1] - exact)
    assert abs(extrapolated - exact) < 1e-10


def test_richardson_requires_two_values():
    """Tests that a single value raises ValueError."""
    with pytest.raises(ValueError):
        richardson_extrapolate([1.0], p=2)


def test_extend_row_grows_by_one():
    """Tests that each new step size adds one extrapolation level."""
    row = extend_richardson_row(None, 2.0, p=2)
    assert len(row) == 1
    row = extend_richardson_row(row, 1.25, p=2)
    assert len(row) == 2
    assert row[-1] == pytest.approx(1.0)


def test_extend_row_matches_batch_extrapolation():
    """Tests that building the tableau row by row reproduces richardson_extrapolate."""
    base = central_estimates(np.exp, 0.3, 0.1, 5)
    row = None
    for value in base:
        row = extend_richardson_row(row, value, p=2)
    assert float(row[-1]) == pytest.approx(richardson_extrapolate(base, p=2), rel=1e-14)
    assert abs(float(row[-1]) - np.exp(0.3)) < 1e-11


def test_extend_row_vector_values():
    """Tests that tableau rows handle vector-valued estimates."""
    f = lambda x: np.array([np.sin(x), x**3])  # noqa: E731
    row = None
    for value in central_estimates(f, 1.0, 0.1, 4):
        row = extend_richardson_row(row, value, p=2)
    np.testing.assert_allclose(row[-1], [np.cos(1.0), 3.0], atol=1e-10)
