"""Half-space (H-representation) polyhedra exposing their rows as linear inequalities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Union

import cvxpy as cp
import numpy as np

from lcphop.modeling.disjunctive import Condition
from lcphop.modeling.errors import DimensionMismatchError


Array = np.ndarray


@dataclass(frozen=True, eq=False)
class HalfSpace:
    """The set ``{x : a . x <= b}``; ``a`` points out of the set."""

    a: Array
    b: float

    def __post_init__(self) -> None:
        a = np.array(self.a, dtype=np.float64)
        if a.ndim != 1 or a.size == 0:
            raise DimensionMismatchError(f"half-space normal must be a non-empty vector, got shape {a.shape}")
        object.__setattr__(self, "a", a)
        object.__setattr__(self, "b", float(self.b))

    @property
    def dim(self) -> int:
        return int(self.a.shape[0])

    def contains(self, x: Array, tol: float = 1e-9) -> bool:
        return bool(float(self.a @ _point(x, self.dim)) <= self.b + tol)


@dataclass(frozen=True, eq=False)
class HRepresentation:
    """Intersection of the half-spaces ``A x <= b``."""

    A: Array
    b: Array

    def __post_init__(self) -> None:
        A = np.array(self.A, dtype=np.float64)
        b = np.array(self.b, dtype=np.float64).reshape(-1)
        if A.ndim == 1:
            A = A.reshape(1, -1)
        if A.ndim != 2 or A.shape[0] != b.shape[0] or A.shape[1] == 0:
            raise DimensionMismatchError(f"incompatible H-representation: A {A.shape}, b {b.shape}")
        object.__setattr__(self, "A", A)
        object.__setattr__(self, "b", b)

    @property
    def dim(self) -> int:
        return int(self.A.shape[1])

    def __len__(self) -> int:
        return int(self.A.shape[0])

    def __iter__(self) -> Iterator[HalfSpace]:
        for i in range(len(self)):
            yield HalfSpace(self.A[i], self.b[i])

    def contains(self, x: Array, tol: float = 1e-9) -> bool:
        return bool(np.all(self.A @ _point(x, self.dim) <= self.b + tol))

    def membership(self, x: Union[cp.Expression, Array]) -> Condition:
        """Condition stating that the (possibly symbolic) point ``x`` lies in the polyhedron."""
        if x.shape != (self.dim,):
            raise DimensionMismatchError(f"expected a point of shape ({self.dim},), got {x.shape}")
        return Condition.le(self.A @ x - self.b)


def _point(x: Array, dim: int) -> Array:
    x = np.asarray(x, dtype=np.float64)
    if x.shape != (dim,):
        raise DimensionMismatchError(f"expected a point of shape ({dim},), got {x.shape}")
    return x


__all__ = ["HalfSpace", "HRepresentation"]
