import numpy as np
import pytest

from lcphop.geometry import Environment
from lcphop.timestepping import (
    ContactResult,
    JointLimitResult,
    LCPParameters,
    LCPUpdate,
    complementarity_residuals,
    worst_residual,
)


def _update(q, c_n=0.0, beta=(0.0, 0.0), lam=0.0, limit_lams=(0.0, 0.0)) -> LCPUpdate:
    contact = ContactResult(beta=np.asarray(beta), lam=lam, c_n=c_n, contact_force=np.zeros(2))
    limits = [JointLimitResult(lam=l, generalized_force=np.zeros(3)) for l in limit_lams]
    return LCPUpdate(q=np.asarray(q, dtype=float), v=np.zeros(3), contacts=[contact], joint_limits=limits)


def test_resting_state_has_no_residual(ground_env: Environment, params: LCPParameters) -> None:
    resting = _update([0.0, 0.5, 0.5], c_n=0.49, limit_lams=(0.0, 0.49))

    (res,) = complementarity_residuals([resting], ground_env, params)

    assert res.worst() == pytest.approx(0.0)
    assert res.friction_cone == pytest.approx(params.mu * 0.49)


def test_force_at_distance_is_reported(ground_env: Environment, params: LCPParameters) -> None:
    # tip 0.5 above the ground with a normal force, upper limit force while the leg is short
    floating = _update([0.0, 1.0, 0.5], c_n=0.3, limit_lams=(0.2, 0.0))

    (res,) = complementarity_residuals([floating], ground_env, params)

    assert res.normal == pytest.approx(0.3)
    assert res.joint_limit == pytest.approx(0.2)
    assert res.as_dict()["normal"] == pytest.approx(0.3)
    assert worst_residual([floating], ground_env, params) == pytest.approx(0.3)


def test_friction_outside_cone(ground_env: Environment, params: LCPParameters) -> None:
    sliding = _update([0.0, 0.5, 0.5], c_n=0.4, beta=(0.2, 0.2))

    (res,) = complementarity_residuals([sliding], ground_env, params)

    assert res.friction_cone == pytest.approx(-0.2)
    assert res.worst() == pytest.approx(0.2)


def test_worst_residual_of_empty_trajectory(open_env: Environment, params: LCPParameters) -> None:
    assert worst_residual([], open_env, params) == 0.0
