import os
import random
import sys
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

# Add src to pythonpath
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

from meteonet_sim.models import Station  # noqa: E402

MADRID = ZoneInfo("Europe/Madrid")


@pytest.fixture
def july_afternoon() -> datetime:
    """14:00 local time in July."""
    return datetime(2024, 7, 15, 14, 0, 0, tzinfo=MADRID)


@pytest.fixture
def fixed_clock(july_afternoon):
    return lambda: july_afternoon


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def lleida() -> Station:
    return Station(id=4, name="Lleida", region="Interior Seco")


@pytest.fixture
def stations() -> list[Station]:
    return [
        Station(id=1, name="Barcelona", region="Litoral Urbano"),
        Station(id=4, name="Lleida", region="Interior Seco"),
        Station(id=5, name="Pirineos", region="Alta Montaña"),
    ]
