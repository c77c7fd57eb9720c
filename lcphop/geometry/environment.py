"""Obstacles and the free space the leg tip must stay in."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from lcphop.modeling.errors import DimensionMismatchError
from .polyhedra import HalfSpace, HRepresentation


@dataclass(frozen=True)
class Obstacle:
    """Solid region with the single face the leg tip may touch."""

    interior: HRepresentation
    contact_face: HalfSpace

    def __post_init__(self) -> None:
        if self.interior.dim != self.contact_face.dim:
            raise DimensionMismatchError(
                f"obstacle interior is {self.interior.dim}D but its contact face is {self.contact_face.dim}D"
            )

    @property
    def dim(self) -> int:
        return self.interior.dim


@dataclass(frozen=True)
class Environment:
    """Fixed obstacles plus the free regions whose union the leg tip must occupy."""

    obstacles: Tuple[Obstacle, ...]
    free_regions: Tuple[HRepresentation, ...]

    def __init__(self, obstacles: Sequence[Obstacle], free_regions: Sequence[HRepresentation]) -> None:
        object.__setattr__(self, "obstacles", tuple(obstacles))
        object.__setattr__(self, "free_regions", tuple(free_regions))
        if not self.free_regions:
            raise ValueError("environment needs at least one free region")
        dims = {o.dim for o in self.obstacles} | {r.dim for r in self.free_regions}
        if len(dims) != 1:
            raise DimensionMismatchError(f"environment mixes dimensions {sorted(dims)}")

    @property
    def dim(self) -> int:
        return self.free_regions[0].dim


__all__ = ["Environment", "Obstacle"]
