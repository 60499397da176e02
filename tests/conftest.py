"""Shared fixtures: a small two-line network and config isolation."""

from pathlib import Path

import pytest

from fare_calculator.config import reset_config
from fare_calculator.domain.models import (
    Directory,
    Fares,
    LineMatrix,
    Station,
    StationEntry,
    Transfer,
    TransferEndpoint,
)

DATA_DIR = Path(__file__).resolve().parents[1] / "data"


@pytest.fixture(autouse=True)
def fresh_config():
    reset_config()
    yield
    reset_config()


def line_a() -> LineMatrix:
    # Stored-value is cheaper via Yakal, single-journey is cheaper direct.
    return LineMatrix(
        transit_line="A",
        stations=(
            StationEntry("X", "Xavier"),
            StationEntry("Y", "Yakal"),
            StationEntry("Z", "Zamora"),
        ),
        fares=Fares(
            stored_value_card=[[0, 10, 25], [10, 0, 11], [25, 11, 0]],
            single_journey_ticket=[[0, 12, 20], [12, 0, 15], [20, 15, 0]],
        ),
    )


def line_b() -> LineMatrix:
    return LineMatrix(
        transit_line="B",
        stations=(StationEntry("P", "Pasay"), StationEntry("Q", "Quiapo")),
        fares=Fares(
            stored_value_card=[[0, 8], [8, 0]],
            single_journey_ticket=[[0, 10], [10, 0]],
        ),
    )


@pytest.fixture
def directory() -> Directory:
    return Directory(
        matrices=(line_a(), line_b()),
        transfers=(Transfer(TransferEndpoint("A", "Z"), TransferEndpoint("B", "P")),),
    )


@pytest.fixture
def stations():
    """Station identities of the sample network, keyed by code."""
    return {
        "X": Station("A", "X", "Xavier"),
        "Y": Station("A", "Y", "Yakal"),
        "Z": Station("A", "Z", "Zamora"),
        "P": Station("B", "P", "Pasay"),
        "Q": Station("B", "Q", "Quiapo"),
    }
