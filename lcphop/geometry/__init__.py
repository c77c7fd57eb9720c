"""Polyhedral geometry adapter used by the contact model."""

from .environment import Environment, Obstacle
from .polyhedra import HalfSpace, HRepresentation

__all__ = ["Environment", "HalfSpace", "HRepresentation", "Obstacle"]
