"""Mixed-integer modeling helpers: disjunctions over cvxpy and error types."""

from .disjunctive import Condition, DisjunctiveModel, mip_solver_available
from .errors import DimensionMismatchError, InfeasibleStepError, SolverError, WarmStartError

__all__ = [
    "Condition",
    "DimensionMismatchError",
    "DisjunctiveModel",
    "InfeasibleStepError",
    "SolverError",
    "WarmStartError",
    "mip_solver_available",
]
