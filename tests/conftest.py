"""Pytest configuration and fixtures."""
import sys
from pathlib import Path

import pytest

# Ensure project root is on path when running pytest from any directory
root = Path(__file__).resolve().parent.parent
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

from city_navigation.geo.geometry import Coordinate  # noqa: E402
from city_navigation.routing.models import Destination  # noqa: E402


@pytest.fixture
def niteroi_origin() -> Coordinate:
    return Coordinate(latitude=-22.9035, longitude=-43.1180)


@pytest.fixture
def niteroi_destination() -> Coordinate:
    return Coordinate(latitude=-22.9023, longitude=-43.1098)


@pytest.fixture
def museum() -> Destination:
    return Destination(
        id="mac",
        name="Museu de Arte Contemporânea",
        category="culture",
        coordinate=Coordinate(latitude=-22.9076, longitude=-43.1259),
        address="Mirante da Boa Viagem, Niterói",
    )


@pytest.fixture
def theatre() -> Destination:
    return Destination(
        id="theatro",
        name="Theatro Municipal",
        category="culture",
        coordinate=Coordinate(latitude=-22.8960, longitude=-43.1240),
    )
