"""Complementarity time-stepping for a planar point mass with a prismatic leg.

Each timestep is a mixed linear complementarity problem whose complementary
pairs (normal force and separation, friction and sliding, joint-limit force
and slack) are posed as disjunctions and solved as a mixed-integer program.
"""

from .config_loader import load_environment, load_scenario
from .configs import LCPParameters, SimulationScenario
from .contact import contact_basis, contact_force, leg_position_in_world, leg_velocity_in_world
from .diagnostics import StepResiduals, complementarity_residuals, worst_residual
from .driver import DriverState, SequentialDriver, optimize, simulate, trajectories_match
from .joint_limits import joint_limit, joint_limits, leg_length_limits
from .results import (
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
from .update import update

__all__ = [
    "ContactResult",
    "DriverState",
    "JointLimitResult",
    "LCPParameters",
    "LCPUpdate",
    "SequentialDriver",
    "SimulationScenario",
    "StepResiduals",
    "complementarity_residuals",
    "contact_basis",
    "contact_force",
    "get_value",
    "joint_limit",
    "joint_limits",
    "leg_length_limits",
    "leg_position_in_world",
    "leg_velocity_in_world",
    "load_environment",
    "load_scenario",
    "optimize",
    "positions",
    "set_value",
    "simulate",
    "trajectories_match",
    "trajectory_from_dict",
    "trajectory_to_dict",
    "tree_map",
    "update",
    "worst_residual",
]
