"""Shared fixtures for unit tests."""

import pandas as pd
import pytest

from chillstage.core.capacity import CapacityModel
from chillstage.core.entities import Combination, Unit
from chillstage.core.performance import PerformanceTable

SAMPLE_LOADS = [0.0, 50.0, 100.0, 150.0, 200.0, 250.0, 300.0, 400.0, 500.0]


def flat_table(cops: dict[str, float | None]) -> PerformanceTable:
    """Performance table where each combination has the same COP at every load.

    Keys are combination keys (``"A+B"``); ``None`` leaves the column empty.
    """
    by_size: dict[int, dict[str, list]] = {}
    for key, cop in cops.items():
        size = len(Combination.parse(key))
        columns = by_size.setdefault(size, {"kW": list(SAMPLE_LOADS)})
        columns[key] = [cop] * len(SAMPLE_LOADS)

    return PerformanceTable.from_frames(
        {size: pd.DataFrame(columns) for size, columns in by_size.items()}
    )


@pytest.fixture
def make_table():
    return flat_table


@pytest.fixture
def three_units():
    """Three identical 100 kW chillers."""
    return [
        Unit(name="A", capacity=100.0, unit_type="VSD"),
        Unit(name="B", capacity=100.0, unit_type="VSD"),
        Unit(name="C", capacity=100.0, unit_type="CSD"),
    ]


@pytest.fixture
def capacity_model(three_units):
    return CapacityModel(three_units)
