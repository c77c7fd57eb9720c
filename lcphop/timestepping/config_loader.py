"""YAML loader for simulation scenarios."""

from __future__ import annotations

from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import numpy as np
import yaml  # type: ignore[import-untyped]

from lcphop.geometry import Environment, HalfSpace, HRepresentation, Obstacle
from .configs import LCPParameters, SimulationScenario


def _load_params(data: Mapping[str, Any] | None) -> LCPParameters:
    data = dict(data or {})
    known = {f.name for f in fields(LCPParameters)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"unknown parameters: {', '.join(unknown)}")
    if "gravity" in data:
        data["gravity"] = tuple(float(g) for g in data["gravity"])
    if "solver_fallbacks" in data:
        data["solver_fallbacks"] = tuple(data["solver_fallbacks"])
    return LCPParameters(**data)


def _load_polyhedron(data: Mapping[str, Any]) -> HRepresentation:
    return HRepresentation(np.asarray(data["A"], dtype=float), np.asarray(data["b"], dtype=float))


def _load_obstacle(data: Mapping[str, Any]) -> Obstacle:
    face = data["contact_face"]
    return Obstacle(
        interior=_load_polyhedron(data["interior"]),
        contact_face=HalfSpace(np.asarray(face["a"], dtype=float), float(face["b"])),
    )


def load_environment(data: Mapping[str, Any]) -> Environment:
    obstacles: List[Obstacle] = [_load_obstacle(o) for o in data.get("obstacles", []) or []]
    free_regions = [_load_polyhedron(r) for r in data["free_regions"]]
    return Environment(obstacles, free_regions)


def load_scenario(path: Path, params: Optional[LCPParameters] = None) -> SimulationScenario:
    """Load a :class:`SimulationScenario` from a YAML file.

    ``params``, when given, replaces the file's ``params`` section.
    """
    with path.open("r", encoding="utf-8") as fp:
        raw: Dict[str, Any] = yaml.safe_load(fp)
    if not isinstance(raw, dict):
        raise ValueError(f"{path} does not contain a scenario mapping")
    state = raw["initial_state"]
    return SimulationScenario(
        environment=load_environment(raw["environment"]),
        q0=np.asarray(state["q"], dtype=float),
        v0=np.asarray(state["v"], dtype=float),
        horizon=int(raw.get("horizon", 10)),
        control=float(raw.get("control", 0.0)),
        params=params or _load_params(raw.get("params")),
    )


__all__ = ["load_environment", "load_scenario"]
