"""Stewart-Trinkle contact model for the leg tip against a single obstacle face.

Notation follows Stewart & Trinkle, "An Implicit Time-Stepping Scheme for Rigid
Body Dynamics with Coulomb Friction". The generalized coordinates are
``q = (x, y, l)``: body position and leg length, with the leg pointing straight
down from the body.
"""

from __future__ import annotations

import math
from typing import Union

import cvxpy as cp
import numpy as np

from lcphop.geometry import HalfSpace, Obstacle
from lcphop.modeling.disjunctive import Condition, DisjunctiveModel
from lcphop.modeling.errors import DimensionMismatchError
from .configs import LCPParameters
from .results import ContactResult

LEG_DIRECTION = np.array([0.0, -1.0])


def rot2(theta: float) -> np.ndarray:
    c, s = math.cos(theta), math.sin(theta)
    return np.array([[c, s], [-s, c]])


def contact_basis(face: Union[HalfSpace, Obstacle], mu: float) -> np.ndarray:
    """Columns are the two friction-cone edges, at +-atan(mu) around the face normal."""
    if isinstance(face, Obstacle):
        face = face.contact_face
    if face.dim != 2:
        raise DimensionMismatchError(f"contact basis is only defined in 2D, got a {face.dim}D face")
    R = rot2(math.atan(mu))
    return np.column_stack([R @ face.a, R.T @ face.a])


def leg_position_in_world(q):
    return q[:2] + q[2] * LEG_DIRECTION


def leg_velocity_in_world(v):
    return v[:2] + v[2] * LEG_DIRECTION


def contact_force(
    model: DisjunctiveModel,
    q_next: cp.Expression,
    v_next: cp.Expression,
    obstacle: Obstacle,
    params: LCPParameters,
) -> ContactResult:
    n = obstacle.contact_face.a
    D = contact_basis(obstacle, params.mu)
    k = D.shape[1]

    beta = model.variable(k, lower=0, upper=params.force_bound, name="beta")
    lam = model.variable(lower=0, upper=params.force_bound, name="lam")
    c_n = model.variable(lower=0, upper=params.force_bound, name="c_n")

    separation = n @ leg_position_in_world(q_next) - obstacle.contact_face.b
    Dtv = D.T @ leg_velocity_in_world(v_next)
    friction_slack = params.mu * c_n - cp.sum(beta)

    model.add(
        lam + Dtv >= 0,
        friction_slack >= 0,
    )
    model.disjunction(Condition.eq(separation), Condition.eq(c_n))
    for j in range(k):
        model.disjunction(Condition.eq(lam + Dtv[j]), Condition.eq(beta[j]))
    model.disjunction(Condition.eq(friction_slack), Condition.eq(lam))

    return ContactResult(beta=beta, lam=lam, c_n=c_n, contact_force=c_n * n + D @ beta)


def tip_separation(q: np.ndarray, obstacle: Obstacle) -> float:
    """Signed distance of the leg tip from the obstacle's contact face for a numeric state."""
    face = obstacle.contact_face
    return float(face.a @ leg_position_in_world(np.asarray(q, dtype=float)) - face.b)


__all__ = [
    "contact_basis",
    "contact_force",
    "leg_position_in_world",
    "leg_velocity_in_world",
    "tip_separation",
]
