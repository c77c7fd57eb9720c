"""Exceptions raised while building and solving complementarity models."""

from __future__ import annotations

from typing import Optional


class DimensionMismatchError(ValueError):
    """Geometry or state arrays do not have the expected shape."""


class SolverError(RuntimeError):
    """No installed solver produced a usable solution."""


class InfeasibleStepError(SolverError):
    """The solver reported the problem infeasible or unbounded."""

    def __init__(self, status: str, step: Optional[int] = None) -> None:
        self.status = status
        self.step = step
        where = f" at step {step}" if step is not None else ""
        super().__init__(f"complementarity problem{where} is {status}")


class WarmStartError(AssertionError):
    """A warm start was requested on a problem that is not purely continuous."""


__all__ = [
    "DimensionMismatchError",
    "InfeasibleStepError",
    "SolverError",
    "WarmStartError",
]
