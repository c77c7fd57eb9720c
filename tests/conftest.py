from pathlib import Path
import sys

import pytest

# Allow running tests without installing the package in editable mode.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from lcphop.geometry import Environment, HalfSpace, HRepresentation, Obstacle  # noqa: E402
from lcphop.timestepping import LCPParameters  # noqa: E402


@pytest.fixture
def params() -> LCPParameters:
    return LCPParameters()


@pytest.fixture
def ground() -> Obstacle:
    return Obstacle(
        interior=HRepresentation([[0.0, 1.0]], [0.0]),
        contact_face=HalfSpace([0.0, 1.0], 0.0),
    )


@pytest.fixture
def ground_env(ground: Obstacle) -> Environment:
    return Environment([ground], [HRepresentation([[0.0, -1.0]], [0.0])])


@pytest.fixture
def open_env() -> Environment:
    box = HRepresentation(
        [[1.0, 0.0], [-1.0, 0.0], [0.0, 1.0], [0.0, -1.0]],
        [5.0, 5.0, 5.0, 5.0],
    )
    return Environment([], [box])
