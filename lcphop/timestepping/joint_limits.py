"""Complementarity encoding of scalar joint limits ``a . q <= b``."""

from __future__ import annotations

from typing import List

import cvxpy as cp
import numpy as np

from lcphop.geometry import HRepresentation
from lcphop.modeling.disjunctive import Condition, DisjunctiveModel
from lcphop.modeling.errors import DimensionMismatchError
from .configs import LCPParameters
from .results import JointLimitResult


def leg_length_limits(params: LCPParameters) -> HRepresentation:
    """``min_leg_length <= q[2] <= max_leg_length`` as two rows."""
    return HRepresentation(
        np.array([[0.0, 0.0, 1.0], [0.0, 0.0, -1.0]]),
        np.array([params.max_leg_length, -params.min_leg_length]),
    )


def joint_limit(
    model: DisjunctiveModel,
    q_next: cp.Expression,
    a: np.ndarray,
    b: float,
    params: LCPParameters,
) -> JointLimitResult:
    a = np.asarray(a, dtype=float)
    if a.shape != q_next.shape:
        raise DimensionMismatchError(f"joint limit row {a.shape} does not match state {q_next.shape}")
    lam = model.variable(lower=0, upper=params.force_bound, name="lam_limit")
    slack = a @ q_next - b
    model.add(slack <= 0)
    model.disjunction(Condition.eq(slack), Condition.eq(lam))
    return JointLimitResult(lam=lam, generalized_force=-lam * a)


def joint_limits(
    model: DisjunctiveModel,
    q_next: cp.Expression,
    limits: HRepresentation,
    params: LCPParameters,
) -> List[JointLimitResult]:
    return [joint_limit(model, q_next, row.a, row.b, params) for row in limits]


__all__ = ["joint_limit", "joint_limits", "leg_length_limits"]
