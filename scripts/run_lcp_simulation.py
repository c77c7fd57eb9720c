#!/usr/bin/env python
"""Simulate a hopper scenario with the complementarity time-stepper and save the trajectory."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from lcphop.modeling import InfeasibleStepError, SolverError
from lcphop.timestepping import (
    load_scenario,
    optimize,
    simulate,
    trajectories_match,
    trajectory_to_dict,
    worst_residual,
)

logger = logging.getLogger("run_lcp_simulation")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run the MIP complementarity time-stepper on a YAML scenario."
    )
    parser.add_argument("--config", type=Path, required=True, help="Scenario YAML file")
    parser.add_argument(
        "--output", type=Path, default=None, help="Write the simulated trajectory to this JSON file"
    )
    parser.add_argument(
        "--horizon", type=int, default=None, help="Number of timesteps (overrides the scenario)"
    )
    parser.add_argument(
        "--check-batch",
        action="store_true",
        help="Also solve the whole horizon as one problem and compare positions",
    )
    parser.add_argument(
        "--warm-start",
        action="store_true",
        help="Re-solve the whole horizon warm-started from the simulated trajectory",
    )
    parser.add_argument("--atol", type=float, default=1e-4, help="Tolerance for trajectory comparison")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    scenario = load_scenario(args.config)
    steps = args.horizon if args.horizon is not None else scenario.horizon
    env, params = scenario.environment, scenario.params

    try:
        trajectory = simulate(scenario.q0, scenario.v0, scenario.controller, env, steps, params)
    except (InfeasibleStepError, SolverError) as exc:
        logger.error("simulation failed: %s", exc)
        return 1
    logger.info(
        "simulated %d steps, final q=%s, worst complementarity residual %.3g",
        steps,
        trajectory[-1].q if trajectory else scenario.q0,
        worst_residual(trajectory, env, params),
    )

    ok = True
    controls = [up.u for up in trajectory]
    if args.check_batch:
        batch = optimize(scenario.q0, scenario.v0, env, steps, params, controls=controls)
        match = trajectories_match(trajectory, batch, atol=args.atol)
        logger.info("batch optimization matches simulation: %s", match)
        ok = ok and match
    if args.warm_start:
        seeded = optimize(scenario.q0, scenario.v0, env, steps, params, seed=trajectory)
        match = trajectories_match(trajectory, seeded, atol=args.atol)
        logger.info("warm-started optimization matches simulation: %s", match)
        ok = ok and match

    if args.output is not None:
        payload = {
            "config": str(args.config),
            "params": params.as_dict(),
            "trajectory": trajectory_to_dict(trajectory),
        }
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(json.dumps(payload, indent=2, ensure_ascii=True), encoding="utf-8")
        print(f"Trajectory saved to {args.output}")
    return 0 if ok else 2


if __name__ == "__main__":
    sys.exit(main())
