"""Multi-step drivers: sequential simulation and single-problem trajectory optimization."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, List, Optional, Sequence

import numpy as np

from lcphop.geometry import Environment
from lcphop.modeling.disjunctive import DisjunctiveModel
from lcphop.modeling.errors import InfeasibleStepError, WarmStartError
from .configs import LCPParameters
from .diagnostics import worst_residual
from .results import LCPUpdate, get_value, positions, set_value
from .update import update

logger = logging.getLogger(__name__)


Controller = Callable[[np.ndarray, np.ndarray], float]


class DriverState(Enum):
    READY = "ready"
    STEPPING = "stepping"
    DONE = "done"


def make_model(params: LCPParameters) -> DisjunctiveModel:
    return DisjunctiveModel(
        big_m=params.big_m,
        solver=params.solver,
        solver_fallbacks=params.solver_fallbacks,
        verbose=params.solver_verbose,
        warm_start_tol=params.warm_start_tol,
    )


class SequentialDriver:
    """Solves one small problem per timestep, feeding each solved state into the next."""

    def __init__(self, environment: Environment, params: Optional[LCPParameters] = None) -> None:
        self.environment = environment
        self.params = params or LCPParameters()
        self.state = DriverState.READY
        self.results: List[LCPUpdate] = []

    def run(self, q0: np.ndarray, v0: np.ndarray, controller: Controller, steps: int) -> List[LCPUpdate]:
        if self.state is not DriverState.READY:
            raise RuntimeError(f"driver is {self.state.value}; create a new one to simulate again")
        self.state = DriverState.STEPPING
        q = np.asarray(q0, dtype=float)
        v = np.asarray(v0, dtype=float)
        for i in range(steps):
            model = make_model(self.params)
            u = float(controller(q, v))
            up = update(q, v, u, self.environment, model, self.params)
            try:
                solver = model.solve()
            except InfeasibleStepError as exc:
                raise InfeasibleStepError(exc.status, step=i) from exc
            solved = get_value(up)
            self.results.append(solved)
            logger.debug("step=%d solver=%s u=%.4f q=%s v=%s", i, solver, u, solved.q, solved.v)
            q, v = solved.q, solved.v
        self.state = DriverState.DONE
        logger.debug(
            "simulated %d steps, worst complementarity residual %.3g",
            steps,
            worst_residual(self.results, self.environment, self.params),
        )
        return list(self.results)


def simulate(
    q0: np.ndarray,
    v0: np.ndarray,
    controller: Controller,
    environment: Environment,
    steps: int,
    params: Optional[LCPParameters] = None,
) -> List[LCPUpdate]:
    """Numeric trajectory of ``steps`` timesteps, one blocking solve per step."""
    return SequentialDriver(environment, params).run(q0, v0, controller, steps)


def _batch_controls(
    steps: int, controls: Optional[Sequence[float]], seed: Optional[Sequence[LCPUpdate]]
) -> List[float]:
    if controls is not None:
        return [float(u) for u in np.broadcast_to(np.asarray(controls, dtype=float), (steps,))]
    if seed is not None:
        return [float(up.u) for up in seed]
    logger.warning("no controls given for batch optimization; using zero actuation")
    return [0.0] * steps


def optimize(
    q0: np.ndarray,
    v0: np.ndarray,
    environment: Environment,
    steps: int,
    params: Optional[LCPParameters] = None,
    controls: Optional[Sequence[float]] = None,
    seed: Optional[Sequence[LCPUpdate]] = None,
) -> List[LCPUpdate]:
    """Builds all ``steps`` timesteps into one problem and solves it once.

    With ``seed`` (a solved trajectory of the same length) every variable is
    initialized from the seed, each disjunction is fixed to the branch the seed
    takes and the remaining continuous problem is solved with a warm start.
    """
    params = params or LCPParameters()
    if seed is not None and len(seed) != steps:
        raise WarmStartError(f"seed has {len(seed)} steps, expected {steps}")
    us = _batch_controls(steps, controls, seed)

    model = make_model(params)
    q = np.asarray(q0, dtype=float)
    v = np.asarray(v0, dtype=float)
    results: List[LCPUpdate] = []
    for i in range(steps):
        up = update(q, v, us[i], environment, model, params)
        if seed is not None:
            set_value(up, seed[i], atol=params.warm_start_tol)
        results.append(up)
        q, v = up.q, up.v

    solver = model.solve(warm_start=seed is not None)
    logger.info(
        "optimized %d steps with %s (%d disjunctions, warm_start=%s)",
        steps,
        solver,
        len(model.disjunctions),
        seed is not None,
    )
    return [get_value(up) for up in results]


def trajectories_match(a: Sequence[LCPUpdate], b: Sequence[LCPUpdate], atol: float = 1e-4) -> bool:
    """True when both trajectories have the same length and positions within ``atol``."""
    if len(a) != len(b):
        return False
    if not a:
        return True
    return bool(np.allclose(positions(a), positions(b), atol=atol))


__all__ = [
    "DriverState",
    "SequentialDriver",
    "make_model",
    "optimize",
    "simulate",
    "trajectories_match",
]
