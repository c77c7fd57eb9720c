"""Configuration for the complementarity time-stepping model."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, Optional, Tuple

import numpy as np

from lcphop.geometry import Environment


@dataclass(frozen=True)
class LCPParameters:
    """Physical constants, numerical caps and solver options for one simulation."""

    dt: float = 0.05
    mu: float = 0.5
    mass: float = 1.0
    gravity: Tuple[float, float] = (0.0, -9.81)
    min_leg_length: float = 0.5
    max_leg_length: float = 1.5
    # Box bounds on decision variables; numerical caps, not physical limits.
    position_bound: float = 10.0
    velocity_bound: float = 10.0
    force_bound: float = 100.0
    # Upper cap on the big-M derived for each disjunction from the boxes above.
    big_m: Optional[float] = None
    solver: str = "HIGHS"
    solver_fallbacks: Tuple[str, ...] = ("SCIP", "GLPK_MI", "CBC")
    solver_verbose: bool = False
    warm_start_tol: float = 1e-3

    def __post_init__(self) -> None:
        object.__setattr__(self, "gravity", tuple(float(g) for g in self.gravity))
        object.__setattr__(self, "solver_fallbacks", tuple(self.solver_fallbacks))
        if len(self.gravity) != 2:
            raise ValueError(f"gravity must have 2 components, got {self.gravity}")
        if self.dt <= 0 or self.mass <= 0:
            raise ValueError("dt and mass must be positive")
        if self.mu < 0:
            raise ValueError("friction coefficient must be nonnegative")
        if not self.min_leg_length < self.max_leg_length:
            raise ValueError("min_leg_length must be below max_leg_length")
        if self.big_m is not None and self.big_m <= 0:
            raise ValueError("big_m must be positive when given")

    @property
    def g(self) -> np.ndarray:
        return np.asarray(self.gravity, dtype=float)

    def as_dict(self) -> Dict[str, object]:
        payload = asdict(self)
        payload["gravity"] = list(self.gravity)
        payload["solver_fallbacks"] = list(self.solver_fallbacks)
        return payload


@dataclass
class SimulationScenario:
    """Everything a driver run needs: environment, initial state, horizon and actuation."""

    environment: Environment
    q0: np.ndarray
    v0: np.ndarray
    horizon: int = 10
    control: float = 0.0
    params: LCPParameters = field(default_factory=LCPParameters)

    def controller(self, q: np.ndarray, v: np.ndarray) -> float:
        """Constant leg actuation."""
        return self.control
