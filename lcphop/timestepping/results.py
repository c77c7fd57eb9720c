"""Per-timestep result containers and the traversal that reads or seeds their values.

The same dataclasses hold cvxpy expressions while a model is being built and
plain numbers once it is solved. Each field is tagged with a role in its
metadata: ``variable`` fields are decision variables (read after a solve,
written when seeding), ``derived`` fields are expressions of those variables
(read after a solve, checked when seeding) and ``input`` fields are data
supplied by the caller. Numeric inputs pass through unchanged; symbolic ones
are read after a solve and seeded only when they are variables.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, is_dataclass
from typing import Any, Callable, Dict, List, Sequence

import cvxpy as cp
import numpy as np

from lcphop.modeling.disjunctive import DisjunctiveModel
from lcphop.modeling.errors import WarmStartError

VARIABLE = "variable"
DERIVED = "derived"
INPUT = "input"


@dataclass
class ContactResult:
    beta: Any
    lam: Any
    c_n: Any
    contact_force: Any = field(metadata={"role": DERIVED})


@dataclass
class JointLimitResult:
    lam: Any
    generalized_force: Any = field(metadata={"role": DERIVED})


@dataclass
class LCPUpdate:
    """State after one timestep together with every contact and joint-limit force."""

    q: Any
    v: Any
    contacts: List[ContactResult]
    joint_limits: List[JointLimitResult]
    u: Any = field(default=0.0, metadata={"role": INPUT})


def tree_map(fn: Callable[..., Any], node: Any, *others: Any, role: str = VARIABLE) -> Any:
    """Rebuild ``node`` with every leaf replaced by ``fn(role, leaf, *other_leaves)``.

    ``others`` are structures of the same shape walked in lockstep.
    """
    if is_dataclass(node) and not isinstance(node, type):
        kwargs = {}
        for f in fields(node):
            kwargs[f.name] = tree_map(
                fn,
                getattr(node, f.name),
                *(getattr(o, f.name) for o in others),
                role=f.metadata.get("role", role),
            )
        return type(node)(**kwargs)
    if isinstance(node, (list, tuple)):
        for o in others:
            if len(o) != len(node):
                raise ValueError(f"structure mismatch: {len(node)} items versus {len(o)}")
        return type(node)(tree_map(fn, *items, role=role) for items in zip(node, *others))
    return fn(role, node, *others)


def get_value(node: Any) -> Any:
    """Numeric copy of a solved result tree."""

    def read(role: str, leaf: Any) -> Any:
        if role == INPUT and not isinstance(leaf, cp.Expression):
            return leaf
        return DisjunctiveModel.value(leaf)

    return tree_map(read, node)


def set_value(node: Any, seed: Any, atol: float = 1e-6) -> None:
    """Write the numbers of ``seed`` into the decision variables of ``node``.

    Derived fields are not written; they must reproduce the seed once the
    variables they depend on hold their seeded values.
    """

    def write(role: str, leaf: Any, value: Any) -> Any:
        if role == INPUT and not isinstance(leaf, cp.Variable):
            return leaf
        if role == DERIVED:
            if not np.allclose(DisjunctiveModel.value(leaf), value, atol=atol):
                raise WarmStartError(
                    f"seed is inconsistent: derived value {DisjunctiveModel.value(leaf)} != {value}"
                )
            return leaf
        if not isinstance(leaf, cp.Variable):
            raise TypeError(f"cannot seed a {type(leaf).__name__}; expected a cvxpy Variable")
        DisjunctiveModel.set_value(leaf, value)
        return leaf

    tree_map(write, node, seed)


def _to_builtin(role: str, leaf: Any) -> Any:
    return np.asarray(leaf, dtype=float).tolist()


def trajectory_to_dict(trajectory: Sequence[LCPUpdate]) -> List[Dict[str, Any]]:
    """JSON-ready form of a solved trajectory."""
    return [asdict(tree_map(_to_builtin, up)) for up in trajectory]


def trajectory_from_dict(payload: Sequence[Dict[str, Any]]) -> List[LCPUpdate]:
    trajectory: List[LCPUpdate] = []
    for step in payload:
        trajectory.append(
            LCPUpdate(
                q=np.asarray(step["q"], dtype=float),
                v=np.asarray(step["v"], dtype=float),
                contacts=[
                    ContactResult(
                        beta=np.asarray(c["beta"], dtype=float),
                        lam=float(c["lam"]),
                        c_n=float(c["c_n"]),
                        contact_force=np.asarray(c["contact_force"], dtype=float),
                    )
                    for c in step.get("contacts", [])
                ],
                joint_limits=[
                    JointLimitResult(
                        lam=float(j["lam"]),
                        generalized_force=np.asarray(j["generalized_force"], dtype=float),
                    )
                    for j in step.get("joint_limits", [])
                ],
                u=float(step.get("u", 0.0)),
            )
        )
    return trajectory


def positions(trajectory: Sequence[LCPUpdate]) -> np.ndarray:
    return np.stack([np.asarray(up.q, dtype=float) for up in trajectory], axis=0)


__all__ = [
    "ContactResult",
    "JointLimitResult",
    "LCPUpdate",
    "get_value",
    "positions",
    "set_value",
    "trajectory_from_dict",
    "trajectory_to_dict",
    "tree_map",
]
