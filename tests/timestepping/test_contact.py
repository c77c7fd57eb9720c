import math

import cvxpy as cp
import numpy as np
import pytest

from lcphop.geometry import HalfSpace, Obstacle
from lcphop.modeling import DimensionMismatchError, DisjunctiveModel
from lcphop.timestepping import (
    LCPParameters,
    contact_basis,
    contact_force,
    joint_limits,
    leg_length_limits,
    leg_position_in_world,
    leg_velocity_in_world,
)


def test_contact_basis_spans_friction_cone(ground: Obstacle) -> None:
    D = contact_basis(ground, mu=0.5)

    assert D.shape == (2, 2)
    np.testing.assert_allclose(np.linalg.norm(D, axis=0), [1.0, 1.0])
    theta = math.atan(0.5)
    # both edges make the friction angle with the normal, on opposite sides
    np.testing.assert_allclose(D.T @ ground.contact_face.a, [math.cos(theta)] * 2)
    np.testing.assert_allclose(D[0], [math.sin(theta), -math.sin(theta)])


def test_contact_basis_follows_face_orientation() -> None:
    wall = HalfSpace([-1.0, 0.0], -0.2)
    D = contact_basis(wall, mu=0.0)

    np.testing.assert_allclose(D, [[-1.0, -1.0], [0.0, 0.0]], atol=1e-12)


def test_contact_basis_rejects_3d_faces() -> None:
    with pytest.raises(DimensionMismatchError):
        contact_basis(HalfSpace([0.0, 0.0, 1.0], 0.0), mu=0.5)


def test_leg_tip_kinematics() -> None:
    q = np.array([0.3, 1.5, 1.0])
    v = np.array([1.0, -2.0, 0.5])

    np.testing.assert_allclose(leg_position_in_world(q), [0.3, 0.5])
    np.testing.assert_allclose(leg_velocity_in_world(v), [1.0, -2.5])


def test_contact_force_declares_complementarity_pairs(ground: Obstacle, params: LCPParameters) -> None:
    model = DisjunctiveModel()
    q_next = cp.Variable(3)
    v_next = cp.Variable(3)

    result = contact_force(model, q_next, v_next, ground, params)

    assert result.beta.shape == (2,)
    assert len(model.variables) == 3
    # normal, one per friction edge, friction saturation
    assert len(model.disjunctions) == 4

    model.set_value(result.beta, [1.0, 2.0])
    model.set_value(result.c_n, 3.0)
    D = contact_basis(ground, params.mu)
    np.testing.assert_allclose(result.contact_force.value, 3.0 * np.array([0.0, 1.0]) + D @ [1.0, 2.0])


def test_joint_limits_encode_each_row(params: LCPParameters) -> None:
    model = DisjunctiveModel()
    q_next = cp.Variable(3)

    results = joint_limits(model, q_next, leg_length_limits(params), params)

    assert len(results) == 2
    assert len(model.disjunctions) == 2
    model.set_value(results[0].lam, 2.0)
    model.set_value(results[1].lam, 0.5)
    np.testing.assert_allclose(results[0].generalized_force.value, [0.0, 0.0, -2.0])
    np.testing.assert_allclose(results[1].generalized_force.value, [0.0, 0.0, 0.5])


def test_leg_length_limits_match_parameters() -> None:
    limits = leg_length_limits(LCPParameters(min_leg_length=0.4, max_leg_length=1.2))

    assert limits.contains([0.0, 0.0, 0.4])
    assert limits.contains([5.0, -3.0, 1.2])
    assert not limits.contains([0.0, 0.0, 1.3])
    assert not limits.contains([0.0, 0.0, 0.3])
