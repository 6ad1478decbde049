"""Provides all derivcheck methods."""

from importlib.metadata import PackageNotFoundError, version

from derivcheck.errors import (
    DerivCheckError,
    DimensionMismatchError,
    EvaluationError,
    GradientCheckError,
)
from derivcheck.evaluator import Evaluator, FunctionEvaluator
from derivcheck.finite.options import DifferenceScheme, NumericDiffOptions
from derivcheck.gradient_checker import GradientChecker, probe
from derivcheck.gradient_checking_evaluator import (
    GradientCheckingEvaluator,
    GradientErrorRecorder,
)
from derivcheck.manifolds import (
    EuclideanManifold,
    LinearManifold,
    Manifold,
    QuaternionManifold,
    SubsetManifold,
)
from derivcheck.probe_results import ProbeResults

try:
    __version__ = version("derivcheck")
except PackageNotFoundError:
    pass

__all__ = [
    "DerivCheckError",
    "DifferenceScheme",
    "DimensionMismatchError",
    "EuclideanManifold",
    "EvaluationError",
    "Evaluator",
    "FunctionEvaluator",
    "GradientCheckError",
    "GradientChecker",
    "GradientCheckingEvaluator",
    "GradientErrorRecorder",
    "LinearManifold",
    "Manifold",
    "NumericDiffOptions",
    "ProbeResults",
    "QuaternionManifold",
    "SubsetManifold",
    "probe",
]
