import json

import cvxpy as cp
import numpy as np
import pytest

from lcphop.modeling import WarmStartError
from lcphop.timestepping import (
    ContactResult,
    JointLimitResult,
    LCPUpdate,
    get_value,
    positions,
    set_value,
    trajectory_from_dict,
    trajectory_to_dict,
    tree_map,
)


def _numeric_update(scale: float = 1.0) -> LCPUpdate:
    return LCPUpdate(
        q=scale * np.array([0.0, 1.0, 1.0]),
        v=scale * np.array([0.0, -1.0, 0.0]),
        contacts=[
            ContactResult(
                beta=np.array([0.1, 0.2]),
                lam=0.0,
                c_n=0.5,
                contact_force=np.array([0.0, 0.8]),
            )
        ],
        joint_limits=[JointLimitResult(lam=0.3, generalized_force=np.array([0.0, 0.0, -0.3]))],
        u=1.5,
    )


def _symbolic_update() -> LCPUpdate:
    beta, lam, c_n = cp.Variable(2), cp.Variable(), cp.Variable()
    limit = cp.Variable()
    D = np.array([[0.5, -0.5], [1.0, 1.0]])
    return LCPUpdate(
        q=cp.Variable(3),
        v=cp.Variable(3),
        contacts=[ContactResult(beta=beta, lam=lam, c_n=c_n, contact_force=c_n * np.array([0.0, 1.0]) + D @ beta)],
        joint_limits=[JointLimitResult(lam=limit, generalized_force=-limit * np.array([0.0, 0.0, 1.0]))],
        u=1.5,
    )


def test_tree_map_passes_roles_and_keeps_structure() -> None:
    seen = []

    def record(role, leaf):
        seen.append(role)
        return leaf

    out = tree_map(record, _numeric_update())

    assert isinstance(out, LCPUpdate)
    assert isinstance(out.contacts[0], ContactResult)
    assert seen.count("derived") == 2
    assert seen.count("input") == 1
    assert seen.count("variable") == 6


def test_tree_map_walks_structures_in_lockstep() -> None:
    total = tree_map(lambda role, a, b: np.asarray(a) + np.asarray(b), _numeric_update(), _numeric_update(2.0))

    np.testing.assert_allclose(total.q, [0.0, 3.0, 3.0])
    with pytest.raises(ValueError):
        tree_map(lambda role, a, b: a, [1, 2], [1])


def test_set_value_seeds_variables_and_checks_derived_fields() -> None:
    symbolic = _symbolic_update()
    seed = LCPUpdate(
        q=np.array([0.0, 1.0, 1.0]),
        v=np.zeros(3),
        contacts=[
            ContactResult(
                beta=np.array([0.2, 0.4]),
                lam=0.0,
                c_n=1.0,
                contact_force=np.array([-0.1, 1.6]),
            )
        ],
        joint_limits=[JointLimitResult(lam=0.25, generalized_force=np.array([0.0, 0.0, -0.25]))],
        u=0.0,
    )

    set_value(symbolic, seed)
    values = get_value(symbolic)

    np.testing.assert_allclose(values.q, seed.q)
    np.testing.assert_allclose(values.contacts[0].contact_force, [-0.1, 1.6])
    assert values.joint_limits[0].lam == pytest.approx(0.25)
    # inputs are never overwritten by the seed
    assert values.u == 1.5


def test_set_value_rejects_inconsistent_seed() -> None:
    seed = _numeric_update()
    seed.contacts[0].contact_force = np.array([5.0, 5.0])

    with pytest.raises(WarmStartError):
        set_value(_symbolic_update(), seed)


def test_trajectory_serialization(tmp_path) -> None:
    trajectory = [_numeric_update(), _numeric_update(2.0)]

    path = tmp_path / "traj.json"
    path.write_text(json.dumps(trajectory_to_dict(trajectory)))
    restored = trajectory_from_dict(json.loads(path.read_text()))

    assert len(restored) == 2
    assert restored[1].u == 1.5
    np.testing.assert_allclose(positions(restored), positions(trajectory))
    np.testing.assert_allclose(restored[0].contacts[0].beta, [0.1, 0.2])
