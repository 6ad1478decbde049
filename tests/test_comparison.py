"""Tests for derivcheck.comparison."""

import numpy as np
import pytest

from derivcheck.comparison import (
    BlockComparison,
    aggregate,
    compare_block,
    relative_errors,
)
from derivcheck.errors import DimensionMismatchError


def test_relative_error_is_symmetric_and_floored():
    """Tests that entries are compared relative to the larger magnitude, floored at one half."""
    errors = relative_errors([[0.5, 11.0, 0.0, 1e-12]], [[0.0, 10.0, 0.0, 0.0]])
    np.testing.assert_allclose(errors, [[1.0, 1.0 / 11.0, 0.0, 2e-12]], rtol=1e-12)


def test_relative_error_is_bounded_when_either_entry_is_zero():
    """Tests that a zero on either side gives a finite error no larger than twice the difference."""
    errors = relative_errors([[3.0, 0.0, 0.2]], [[0.0, 3.0, 0.0]])
    np.testing.assert_allclose(errors, [[1.0, 1.0, 0.4]])
    assert np.all(np.isfinite(errors))


def test_small_offsets_are_amplified_below_the_floor():
    """Tests that a tiny absolute error on a small entry exceeds the same tolerance."""
    errors = relative_errors([[0.25 + 1e-12]], [[0.25]])
    assert errors[0, 0] > 1e-12


def test_relative_error_shape_mismatch_raises():
    """Tests that Jacobians of different shapes cannot be compared."""
    with pytest.raises(DimensionMismatchError):
        relative_errors(np.zeros((2, 2)), np.zeros((2, 3)))


def test_identical_blocks_pass():
    """Tests that identical matrices pass even at zero tolerance."""
    m = np.arange(6.0).reshape(2, 3)
    comparison = compare_block(0, m, m.copy(), 0.0)
    assert comparison.passed
    assert comparison.max_relative_error == 0.0
    assert comparison.offending == []
    assert comparison.render() == ""


def test_offending_entries_sorted_worst_first():
    """Tests that offending entries are listed from the worst error down."""
    analytic = np.array([[1.1, 2.0], [3.0, 4.8]])
    numeric = np.array([[1.0, 2.0], [3.0, 4.0]])
    comparison = compare_block(2, analytic, numeric, 1e-3)
    assert not comparison.passed
    assert comparison.max_relative_error == pytest.approx(0.8 / 4.8)
    assert [(row, col) for row, col, *_ in comparison.offending] == [(1, 1), (0, 0)]
    text = comparison.render()
    assert text.startswith("Parameter block 2:")
    assert text.endswith("\n")


def test_render_truncates_long_lists():
    """Tests that only the requested number of entries is listed."""
    comparison = compare_block(0, np.ones((4, 5)), np.zeros((4, 5)), 0.5)
    assert len(comparison.offending) == 20
    text = comparison.render(max_reported_entries=3)
    assert "17 more offending entries not shown." in text
    assert len(text.strip().splitlines()) == 2 + 3 + 1


def test_empty_block_has_zero_error():
    """Tests that a block with no tangent directions passes with zero error."""
    comparison = compare_block(0, np.zeros((3, 0)), np.zeros((3, 0)), 0.0)
    assert comparison.passed
    assert comparison.max_relative_error == 0.0


def test_nan_never_passes():
    """Tests that a NaN entry fails the block at any tolerance."""
    comparison = compare_block(0, [[np.nan, 1.0]], [[1.0, 1.0]], 1e6)
    assert not comparison.passed
    assert np.isnan(comparison.max_relative_error)
    assert comparison.offending[0][:2] == (0, 0)


def test_aggregate_empty_log_when_all_pass():
    """Tests that the log is empty iff every block passed."""
    comparisons = [
        BlockComparison(0, 1e-3, 1e-2),
        BlockComparison(1, 5e-3, 1e-2),
    ]
    max_error, log = aggregate(comparisons)
    assert max_error == pytest.approx(5e-3)
    assert log == ""


def test_aggregate_reports_failing_blocks_only():
    """Tests that the log names failing blocks in order after a summary line."""
    good = compare_block(0, np.eye(2), np.eye(2), 1e-6)
    bad1 = compare_block(1, [[2.0]], [[1.0]], 1e-6)
    bad2 = compare_block(2, [[1.0, 5.0]], [[1.0, 1.0]], 1e-6)
    max_error, log = aggregate([good, bad1, bad2])
    assert max_error == pytest.approx(0.8)
    first, *rest = log.splitlines()
    assert first.startswith("Detected 2 bad Jacobian component(s) in 2 parameter block(s).")
    assert "Parameter block 0" not in log
    assert log.index("Parameter block 1") < log.index("Parameter block 2")


def test_aggregate_of_nothing():
    """Tests that aggregating no blocks gives zero error and an empty log."""
    assert aggregate([]) == (0.0, "")
