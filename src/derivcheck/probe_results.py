"""Results record filled in by a gradient-check probe."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

__all__ = ["ProbeResults"]


@dataclass
class ProbeResults:
    """Everything a probe computed, for diagnostics.

    The record is owned by the caller and fully overwritten by each probe; it
    keeps no reference to the evaluator or the manifolds. The four per-block
    sequences always hold one matrix per parameter block, shaped
    ``(num_residuals, ambient_size)`` for the ambient ones and
    ``(num_residuals, tangent_size)`` for the local ones, zero-filled when the
    evaluation failed.

    Attributes:
        success: Whether the evaluator succeeded. This does not say whether
            the Jacobians agree; see ``diagnostic_log`` for that.
        residuals: Residuals at the probed point.
        ambient_jacobians: Analytic Jacobians as returned by the evaluator.
        numeric_ambient_jacobians: Numeric Jacobians w.r.t. ambient
            coordinates.
        local_jacobians: Analytic Jacobians projected onto tangent space.
        numeric_local_jacobians: Numeric Jacobians w.r.t. tangent
            coordinates.
        maximum_relative_error: Worst element-wise relative error over all
            blocks.
        diagnostic_log: Empty iff every block passed.
    """

    success: bool = False
    residuals: NDArray[np.float64] = field(default_factory=lambda: np.zeros(0))
    ambient_jacobians: list[NDArray[np.float64]] = field(default_factory=list)
    numeric_ambient_jacobians: list[NDArray[np.float64]] = field(default_factory=list)
    local_jacobians: list[NDArray[np.float64]] = field(default_factory=list)
    numeric_local_jacobians: list[NDArray[np.float64]] = field(default_factory=list)
    maximum_relative_error: float = 0.0
    diagnostic_log: str = ""

    def reset(
        self,
        num_residuals: int,
        block_sizes: Sequence[int],
        tangent_sizes: Sequence[int],
    ) -> None:
        """Clears the record and allocates zero matrices of the right shapes."""
        self.success = False
        self.residuals = np.zeros(num_residuals)
        self.ambient_jacobians = [np.zeros((num_residuals, s)) for s in block_sizes]
        self.numeric_ambient_jacobians = [np.zeros((num_residuals, s)) for s in block_sizes]
        self.local_jacobians = [np.zeros((num_residuals, t)) for t in tangent_sizes]
        self.numeric_local_jacobians = [np.zeros((num_residuals, t)) for t in tangent_sizes]
        self.maximum_relative_error = 0.0
        self.diagnostic_log = ""
