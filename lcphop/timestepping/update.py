"""One implicit complementarity timestep of the point-mass hopper."""

from __future__ import annotations

import logging
from typing import Union

import cvxpy as cp
import numpy as np

from lcphop.geometry import Environment
from lcphop.modeling.disjunctive import DisjunctiveModel
from lcphop.modeling.errors import DimensionMismatchError
from .configs import LCPParameters
from .contact import LEG_DIRECTION, contact_force, leg_position_in_world
from .joint_limits import joint_limits, leg_length_limits
from .results import LCPUpdate

logger = logging.getLogger(__name__)

STATE_DIM = 3

StateLike = Union[np.ndarray, cp.Expression]


def _state(x: StateLike, name: str) -> StateLike:
    if not isinstance(x, cp.Expression):
        x = np.asarray(x, dtype=float)
    if x.shape != (STATE_DIM,):
        raise DimensionMismatchError(f"{name} must have shape ({STATE_DIM},), got {x.shape}")
    return x


def update(
    q: StateLike,
    v: StateLike,
    u: Union[float, cp.Expression],
    environment: Environment,
    model: DisjunctiveModel,
    params: LCPParameters,
) -> LCPUpdate:
    """Adds one timestep to ``model`` and returns its (unsolved) decision variables.

    ``q`` and ``v`` may be numbers or the variables of a previous timestep in
    the same model. ``u`` may be a number or a scalar expression of the
    model's variables; a symbolic ``u`` is kept as is and read back by
    ``get_value``.
    """
    if isinstance(u, cp.Expression):
        if u.shape != ():
            raise DimensionMismatchError(f"u must be a scalar, got shape {u.shape}")
    else:
        u = float(u)
    q = _state(q, "q")
    v = _state(v, "v")
    if environment.dim != 2:
        raise DimensionMismatchError(f"the hopper moves in 2D, environment is {environment.dim}D")

    q_next = model.variable(STATE_DIM, lower=-params.position_bound, upper=params.position_bound, name="q_next")
    v_next = model.variable(STATE_DIM, lower=-params.velocity_bound, upper=params.velocity_bound, name="v_next")

    contacts = [contact_force(model, q_next, v_next, obs, params) for obs in environment.obstacles]
    if contacts:
        external_force = sum(c.contact_force for c in contacts)
    else:
        external_force = np.zeros(2)

    limit_results = joint_limits(model, q_next, leg_length_limits(params), params)
    internal_force = u + sum(r.generalized_force[2] for r in limit_results)

    m, h = params.mass, params.dt
    model.add(
        m * (v_next[:2] - v[:2]) == -internal_force * LEG_DIRECTION + h * m * params.g,
        m * (v_next[2] - v[2]) == LEG_DIRECTION @ external_force + internal_force,
        q_next - q == h * v_next,
    )

    tip = leg_position_in_world(q_next)
    model.disjunction(*[region.membership(tip) for region in environment.free_regions])

    logger.debug(
        "timestep with %d contacts, %d joint limits, %d free regions",
        len(contacts),
        len(limit_results),
        len(environment.free_regions),
    )
    return LCPUpdate(q=q_next, v=v_next, contacts=contacts, joint_limits=limit_results, u=u)


__all__ = ["STATE_DIM", "update"]
