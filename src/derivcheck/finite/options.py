"""Configuration for numeric differentiation.

:class:`NumericDiffOptions` controls how
:func:`derivcheck.finite.numeric_diff.estimate_block_jacobian` chooses step
sizes, which difference scheme it uses, and how many threads evaluate
Jacobian columns.
"""

from __future__ import annotations

from enum import Enum


class DifferenceScheme(Enum):
    """Finite-difference schemes available for numeric Jacobians."""

    FORWARD = "forward"
    CENTRAL = "central"
    RIDDERS = "ridders"


class NumericDiffOptions:
    """Step-size and scheme parameters for numeric Jacobians."""

    def __init__(
        self,
        scheme: DifferenceScheme | str = DifferenceScheme.RIDDERS,
        relative_step: float = 1e-6,
        min_absolute_step: float = 1e-6,
        ridders_relative_initial_step: float = 1e-2,
        ridders_min_initial_step: float = 1e-2,
        ridders_max_extrapolations: int = 10,
        ridders_epsilon: float = 1e-12,
        ridders_shrink_factor: float = 2.0,
        n_workers: int = 1,
    ):
        """Initialize configuration.

        Args:
            scheme:
                Difference scheme, as a :class:`DifferenceScheme` or its
                name (``"forward"``, ``"central"``, ``"ridders"``).

            relative_step:
                Forward and central differences step coordinate ``i`` by
                ``h = max(relative_step * |x_i|, min_absolute_step)``.

            min_absolute_step:
                Lower bound on the forward/central step. Keeps the step
                finite when ``x_i`` is zero.

            ridders_relative_initial_step:
                Ridders starts from
                ``h0 = max(ridders_relative_initial_step * |x_i|,
                ridders_min_initial_step)`` and shrinks from there, so the
                initial step is much larger than a forward/central step.

            ridders_min_initial_step:
                Lower bound on the Ridders initial step.

            ridders_max_extrapolations:
                Maximum number of step sizes (tableau rows) Ridders
                evaluates per column. At least 2.

            ridders_epsilon:
                Ridders stops as soon as its error estimate drops below
                this value.

            ridders_shrink_factor:
                Ratio between successive Ridders step sizes. Must be
                greater than 1.

            n_workers:
                Number of threads used to evaluate Jacobian columns. ``1``
                evaluates serially.

        Raises:
            ValueError: If a step size is not positive, the scheme is
                unknown, ``ridders_max_extrapolations < 2`` or
                ``ridders_shrink_factor <= 1``.
        """
        self.scheme = DifferenceScheme(scheme)

        for name, value in (
            ("relative_step", relative_step),
            ("min_absolute_step", min_absolute_step),
            ("ridders_relative_initial_step", ridders_relative_initial_step),
            ("ridders_min_initial_step", ridders_min_initial_step),
            ("ridders_epsilon", ridders_epsilon),
        ):
            if not value > 0:
                raise ValueError(f"{name} must be positive; got {value}.")
        if int(ridders_max_extrapolations) < 2:
            raise ValueError("ridders_max_extrapolations must be at least 2.")
        if not ridders_shrink_factor > 1.0:
            raise ValueError("ridders_shrink_factor must be greater than 1.")

        self.relative_step = float(relative_step)
        self.min_absolute_step = float(min_absolute_step)
        self.ridders_relative_initial_step = float(ridders_relative_initial_step)
        self.ridders_min_initial_step = float(ridders_min_initial_step)
        self.ridders_max_extrapolations = int(ridders_max_extrapolations)
        self.ridders_epsilon = float(ridders_epsilon)
        self.ridders_shrink_factor = float(ridders_shrink_factor)
        self.n_workers = n_workers

    def step_size(self, magnitude: float) -> float:
        """Returns the (initial) step for a coordinate of size ``magnitude``."""
        if self.scheme is DifferenceScheme.RIDDERS:
            return max(
                self.ridders_relative_initial_step * abs(magnitude),
                self.ridders_min_initial_step,
            )
        return max(self.relative_step * abs(magnitude), self.min_absolute_step)

    def __repr__(self) -> str:
        return (
            f"NumericDiffOptions(scheme={self.scheme.value!r}, "
            f"relative_step={self.relative_step}, "
            f"min_absolute_step={self.min_absolute_step}, "
            f"n_workers={self.n_workers})"
        )
