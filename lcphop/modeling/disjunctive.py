"""Big-M disjunctions on top of cvxpy.

A :class:`Condition` is a conjunction of affine relations ``expr == 0`` and
``expr <= 0``. :meth:`DisjunctiveModel.disjunction` records that exactly one of
several conditions holds. Disjunctions are kept symbolic until the model is
solved and are then compiled either into boolean indicators with big-M
constraints, or, for a warm start, into the branch satisfied by the values
seeded into the variables.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

import cvxpy as cp
import numpy as np

from .errors import InfeasibleStepError, SolverError, WarmStartError

logger = logging.getLogger(__name__)


Array = np.ndarray
ExprLike = Union[cp.Expression, Array, float]
Bounds = Tuple[Array, Array]

_UNBOUNDED: Bounds = (np.array(-np.inf), np.array(np.inf))

_SOLVED = ("optimal", "optimal_inaccurate")
_FAILED = (
    "infeasible",
    "infeasible_inaccurate",
    "unbounded",
    "unbounded_inaccurate",
    "infeasible_or_unbounded",
)


def _as_expr(expr: ExprLike) -> cp.Expression:
    if isinstance(expr, cp.Expression):
        return expr
    return cp.Constant(np.asarray(expr, dtype=float))


def affine_range(expr: cp.Expression, bounds: Mapping[int, Bounds]) -> Tuple[Array, Array]:
    """Elementwise interval of an affine expression over boxed variables.

    ``bounds`` maps ``Variable.id`` to elementwise ``(lower, upper)`` arrays;
    variables missing from it are unbounded. Coefficients are read off by
    evaluating the expression at unit vectors, so current variable values are
    saved and restored around the evaluations.
    """
    expr = _as_expr(expr)
    variables = expr.variables()
    saved = [var.value for var in variables]
    try:
        for var in variables:
            var.value = np.zeros(var.shape)
        offset = np.atleast_1d(np.asarray(expr.value, dtype=float)).ravel()
        lower, upper = offset.copy(), offset.copy()
        for var in variables:
            var_lower, var_upper = bounds.get(var.id, _UNBOUNDED)
            var_lower = np.broadcast_to(var_lower, var.shape)
            var_upper = np.broadcast_to(var_upper, var.shape)
            for idx in np.ndindex(*var.shape):
                unit = np.zeros(var.shape)
                unit[idx] = 1.0
                var.value = unit
                coeff = np.atleast_1d(np.asarray(expr.value, dtype=float)).ravel() - offset
                pos, neg = coeff > 0, coeff < 0
                lower[pos] += coeff[pos] * var_lower[idx]
                upper[pos] += coeff[pos] * var_upper[idx]
                lower[neg] += coeff[neg] * var_upper[idx]
                upper[neg] += coeff[neg] * var_lower[idx]
            var.value = np.zeros(var.shape)
    finally:
        for var, value in zip(variables, saved):
            var.value = value
    return lower.reshape(expr.shape), upper.reshape(expr.shape)


def _big_m(bound: Array, cap: Optional[float]) -> Array:
    m = np.maximum(bound, 0.0)
    if cap is not None:
        m = np.minimum(m, cap)
    if not np.all(np.isfinite(m)):
        raise ValueError("cannot relax a disjunction over unbounded variables; bound them or set big_m")
    return m


@dataclass(frozen=True)
class Condition:
    """Conjunction of ``e == 0`` for every equality and ``e <= 0`` for every inequality."""

    equalities: Tuple[cp.Expression, ...] = ()
    inequalities: Tuple[cp.Expression, ...] = ()

    @classmethod
    def eq(cls, expr: ExprLike) -> "Condition":
        return cls(equalities=(_as_expr(expr),))

    @classmethod
    def le(cls, expr: ExprLike) -> "Condition":
        return cls(inequalities=(_as_expr(expr),))

    def __and__(self, other: "Condition") -> "Condition":
        return Condition(
            equalities=self.equalities + other.equalities,
            inequalities=self.inequalities + other.inequalities,
        )

    def constraints(self) -> List[cp.Constraint]:
        return [e == 0 for e in self.equalities] + [e <= 0 for e in self.inequalities]

    def relaxed(
        self,
        indicator: cp.Expression,
        bounds: Mapping[int, Bounds],
        cap: Optional[float] = None,
    ) -> List[cp.Constraint]:
        """Constraints that hold exactly when ``indicator == 1`` and are slack otherwise.

        Each row gets its own big-M: the largest value the row can take over
        the variable boxes in ``bounds``, optionally capped at ``cap``.
        """
        slack = 1 - indicator
        out: List[cp.Constraint] = []
        for e in self.equalities:
            lower, upper = affine_range(e, bounds)
            out.append(e <= cp.multiply(_big_m(upper, cap), slack))
            out.append(-e <= cp.multiply(_big_m(-lower, cap), slack))
        for e in self.inequalities:
            _, upper = affine_range(e, bounds)
            out.append(e <= cp.multiply(_big_m(upper, cap), slack))
        return out

    def violation(self) -> float:
        """Largest violation at the current variable values (inf while unset)."""
        worst = 0.0
        for e in self.equalities:
            val = e.value
            if val is None:
                return math.inf
            worst = max(worst, float(np.max(np.abs(val))))
        for e in self.inequalities:
            val = e.value
            if val is None:
                return math.inf
            worst = max(worst, float(np.max(val)))
        return worst


class DisjunctiveModel:
    """A feasibility problem with box-bounded variables and disjunctive constraints.

    Disjunctions are relaxed with a big-M derived per row from the declared
    variable bounds; ``big_m``, when given, caps those values.
    """

    def __init__(
        self,
        big_m: Optional[float] = None,
        solver: str = "HIGHS",
        solver_fallbacks: Sequence[str] = ("SCIP", "GLPK_MI", "CBC"),
        verbose: bool = False,
        warm_start_tol: float = 1e-3,
    ) -> None:
        self.big_m = None if big_m is None else float(big_m)
        self.solver = solver
        self.solver_fallbacks = tuple(solver_fallbacks)
        self.verbose = verbose
        self.warm_start_tol = float(warm_start_tol)
        self.variables: List[cp.Variable] = []
        self.bounds: Dict[int, Bounds] = {}
        self.constraints: List[cp.Constraint] = []
        self.disjunctions: List[Tuple[Condition, ...]] = []
        self.problem: Optional[cp.Problem] = None

    def variable(
        self,
        shape: Union[int, Tuple[int, ...]] = (),
        lower: Optional[float] = None,
        upper: Optional[float] = None,
        name: Optional[str] = None,
        boolean: bool = False,
    ) -> cp.Variable:
        var = cp.Variable(shape, name=name, boolean=boolean)
        if boolean:
            lower = 0.0 if lower is None else max(lower, 0.0)
            upper = 1.0 if upper is None else min(upper, 1.0)
        if lower is not None:
            self.constraints.append(var >= lower)
        if upper is not None:
            self.constraints.append(var <= upper)
        self.bounds[var.id] = (
            np.array(-np.inf if lower is None else lower, dtype=float),
            np.array(np.inf if upper is None else upper, dtype=float),
        )
        self.variables.append(var)
        return var

    def add(self, *constraints: cp.Constraint) -> None:
        self.constraints.extend(constraints)

    def disjunction(self, *conditions: Condition) -> None:
        if not conditions:
            raise ValueError("a disjunction needs at least one condition")
        if len(conditions) == 1:
            self.constraints.extend(conditions[0].constraints())
            return
        self.disjunctions.append(tuple(conditions))

    def _indicator_constraints(self) -> List[cp.Constraint]:
        out: List[cp.Constraint] = []
        for branches in self.disjunctions:
            z = cp.Variable(len(branches), boolean=True)
            out.append(cp.sum(z) == 1)
            for i, branch in enumerate(branches):
                out.extend(branch.relaxed(z[i], self.bounds, self.big_m))
        return out

    def _resolved_constraints(self) -> List[cp.Constraint]:
        out: List[cp.Constraint] = []
        for idx, branches in enumerate(self.disjunctions):
            violations = [branch.violation() for branch in branches]
            best = int(np.argmin(violations))
            if violations[best] > self.warm_start_tol:
                raise WarmStartError(
                    f"seed satisfies no branch of disjunction {idx} "
                    f"(smallest violation {violations[best]:.3g})"
                )
            out.extend(branches[best].constraints())
        return out

    def solve(self, warm_start: bool = False) -> str:
        """Blocking solve. Returns the name of the solver that succeeded.

        With ``warm_start`` every disjunction is fixed to the branch the seeded
        values satisfy, so the residual problem must be free of integer
        variables.
        """
        if warm_start:
            compiled = self._resolved_constraints()
        else:
            compiled = self._indicator_constraints()
        problem = cp.Problem(cp.Minimize(0), self.constraints + compiled)
        if warm_start and problem.is_mixed_integer():
            raise WarmStartError("warm start requires a problem without integer variables")
        self.problem = problem
        logger.debug(
            "solving %d variables, %d constraints, %d disjunctions (warm_start=%s)",
            len(self.variables),
            len(problem.constraints),
            len(self.disjunctions),
            warm_start,
        )
        return self._solve_problem(problem, warm_start)

    def _solve_problem(self, problem: cp.Problem, warm_start: bool) -> str:
        solvers = [self.solver] + [s for s in self.solver_fallbacks if s != self.solver]
        installed = set(cp.installed_solvers())
        last_error: Exception | None = None
        last_status: str | None = None
        for candidate in solvers:
            if candidate not in installed:
                continue
            try:
                problem.solve(solver=candidate, verbose=self.verbose, warm_start=warm_start)
            except cp.SolverError as exc:
                logger.debug("solver %s failed: %s", candidate, exc)
                last_error = exc
                continue
            if problem.status in _SOLVED:
                return candidate
            if problem.status in _FAILED:
                raise InfeasibleStepError(problem.status)
            last_status = problem.status
        if last_error is not None:
            raise SolverError(f"complementarity problem failed. Last solver error: {last_error}") from last_error
        if last_status is not None:
            raise SolverError(f"complementarity problem ended with status {last_status}")
        raise SolverError(f"none of the solvers {solvers} is installed")

    @staticmethod
    def value(expr: ExprLike) -> Union[Array, float]:
        """Numeric value of an expression after a solve."""
        if not isinstance(expr, cp.Expression):
            val = np.asarray(expr, dtype=float)
            return val if val.ndim else float(val)
        val = expr.value
        if val is None:
            raise SolverError("expression has no value; the model has not been solved")
        val = np.asarray(val, dtype=float)
        return val if val.ndim else float(val)

    @staticmethod
    def set_value(var: cp.Variable, value: Union[Array, float]) -> None:
        var.value = np.asarray(value, dtype=float).reshape(var.shape)


def mip_solver_available(solvers: Sequence[str] = ("HIGHS", "SCIP", "GLPK_MI", "CBC")) -> bool:
    """True when cvxpy can reach at least one mixed-integer solver."""
    return bool(set(solvers) & set(cp.installed_solvers()))


__all__ = ["Condition", "DisjunctiveModel", "mip_solver_available"]
