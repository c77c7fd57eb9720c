"""lcphop: mixed-integer complementarity time-stepping for a planar hopper."""

from .geometry import Environment, HalfSpace, HRepresentation, Obstacle
from .timestepping import LCPParameters, LCPUpdate, optimize, simulate, update

__all__ = [
    "Environment",
    "HalfSpace",
    "HRepresentation",
    "LCPParameters",
    "LCPUpdate",
    "Obstacle",
    "optimize",
    "simulate",
    "update",
]
