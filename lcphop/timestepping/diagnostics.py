"""Complementarity residuals of a solved trajectory."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence

import numpy as np

from lcphop.geometry import Environment
from .configs import LCPParameters
from .contact import contact_basis, leg_velocity_in_world, tip_separation
from .joint_limits import leg_length_limits
from .results import LCPUpdate


@dataclass
class StepResiduals:
    """Worst violations at one timestep; all zero for an exact solution.

    ``friction_cone`` is the smallest ``mu * c_n - sum(beta)`` and must be
    nonnegative; the other entries are ``min`` of each complementary pair.
    """

    normal: float = 0.0
    sliding: float = 0.0
    joint_limit: float = 0.0
    friction_cone: float = np.inf

    def worst(self) -> float:
        return max(self.normal, self.sliding, self.joint_limit, max(-self.friction_cone, 0.0))

    def as_dict(self) -> Dict[str, float]:
        return {
            "normal": self.normal,
            "sliding": self.sliding,
            "joint_limit": self.joint_limit,
            "friction_cone": self.friction_cone,
        }


def step_residuals(up: LCPUpdate, environment: Environment, params: LCPParameters) -> StepResiduals:
    res = StepResiduals()
    tip_velocity = leg_velocity_in_world(np.asarray(up.v, dtype=float))
    for obstacle, contact in zip(environment.obstacles, up.contacts):
        beta = np.asarray(contact.beta, dtype=float)
        sep = tip_separation(up.q, obstacle)
        res.normal = max(res.normal, min(abs(sep), contact.c_n))

        Dtv = contact_basis(obstacle, params.mu).T @ tip_velocity
        cone = params.mu * contact.c_n - float(np.sum(beta))
        res.friction_cone = min(res.friction_cone, cone)
        for j in range(beta.shape[0]):
            res.sliding = max(res.sliding, min(abs(contact.lam + Dtv[j]), beta[j]))
        res.sliding = max(res.sliding, min(abs(cone), contact.lam))

    q = np.asarray(up.q, dtype=float)
    for row, limit in zip(leg_length_limits(params), up.joint_limits):
        slack = float(row.a @ q - row.b)
        res.joint_limit = max(res.joint_limit, min(abs(slack), limit.lam))
    return res


def complementarity_residuals(
    trajectory: Sequence[LCPUpdate], environment: Environment, params: LCPParameters
) -> List[StepResiduals]:
    return [step_residuals(up, environment, params) for up in trajectory]


def worst_residual(trajectory: Sequence[LCPUpdate], environment: Environment, params: LCPParameters) -> float:
    residuals = complementarity_residuals(trajectory, environment, params)
    return max((r.worst() for r in residuals), default=0.0)


__all__ = ["StepResiduals", "complementarity_residuals", "step_residuals", "worst_residual"]
