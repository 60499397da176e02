from decimal import Decimal

import pytest

from fare_calculator.domain.errors import FareCalculatorError, StationNotFoundError
from fare_calculator.domain.models import (
    ZERO_FARE,
    FareInfo,
    FarePolicy,
    PathLeg,
    PathResult,
    ShortestPaths,
    Station,
)

A = Station("LRT-1", "BAC", "Baclaran")
B = Station("LRT-1", "EDS", "EDSA")
C = Station("MRT-3", "TAF", "Taft Avenue")
D = Station("MRT-3", "AYA", "Ayala")


def sample_result() -> PathResult:
    return PathResult(
        policy=FarePolicy.STORED_VALUE_CARD,
        total=Decimal(29),
        path=(A, B, C, D),
        legs=(
            PathLeg(A, B, Decimal(16)),
            PathLeg(B, C, Decimal(0)),
            PathLeg(C, D, Decimal(13)),
        ),
    )


def test_station_is_a_hashable_value():
    assert Station("LRT-1", "BAC", "Baclaran") == A
    assert hash(Station("LRT-1", "BAC", "Baclaran")) == hash(A)
    assert {A: 1}[Station("LRT-1", "BAC", "Baclaran")] == 1
    assert str(A) == "(BAC) LRT-1 Baclaran"


def test_station_is_immutable():
    with pytest.raises(AttributeError):
        A.code = "X"  # type: ignore[misc]


def test_fare_info_coerces_to_decimal():
    fare = FareInfo(15, "20.50")

    assert fare.stored_value_card == Decimal(15)
    assert fare.single_journey_ticket == Decimal("20.50")
    assert fare.for_policy(FarePolicy.SINGLE_JOURNEY_TICKET) == Decimal("20.50")
    assert not fare.is_transfer
    assert ZERO_FARE.is_transfer


def test_fare_info_rejects_floats():
    with pytest.raises(TypeError):
        FareInfo(1.5, 2)  # type: ignore[arg-type]


@pytest.mark.parametrize("amount", [Decimal("NaN"), "Infinity", "-inf", "sNaN"])
def test_fare_info_rejects_non_finite_amounts(amount):
    with pytest.raises(ValueError):
        FareInfo(amount, 2)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("svc", FarePolicy.STORED_VALUE_CARD),
        ("SJT", FarePolicy.SINGLE_JOURNEY_TICKET),
        ("STORED_VALUE_CARD", FarePolicy.STORED_VALUE_CARD),
        ("singleJourneyTicket", FarePolicy.SINGLE_JOURNEY_TICKET),
    ],
)
def test_fare_policy_parse(text, expected):
    assert FarePolicy.parse(text) is expected


def test_fare_policy_parse_rejects_unknown():
    with pytest.raises(ValueError):
        FarePolicy.parse("monthly")


def test_path_result_summary():
    result = sample_result()

    assert result.num_stops == 4
    assert result.transfer_count == 1
    assert result.lines == ("LRT-1", "MRT-3")


def test_discount_scales_total_and_legs():
    result = sample_result().discounted("0.5")

    assert result.total == Decimal("14.50")
    assert [leg.fare for leg in result.legs] == [
        Decimal("8.00"),
        Decimal("0.00"),
        Decimal("6.50"),
    ]
    assert result.path == sample_result().path


def test_discount_rounds_half_up():
    result = PathResult(FarePolicy.STORED_VALUE_CARD, Decimal("13.25"), (A, B))

    assert result.discounted("0.5").total == Decimal("6.63")


def test_discount_rate_out_of_range():
    with pytest.raises(ValueError):
        sample_result().discounted(2)


def test_shortest_paths_export_shape():
    svc = sample_result()
    sjt = PathResult(FarePolicy.SINGLE_JOURNEY_TICKET, Decimal(30), (A, D))
    paths = ShortestPaths(stored_value_card=svc, single_journey_ticket=sjt)

    exported = paths.as_dict()

    assert set(exported) == {"storedValueCard", "singleJourneyTicket"}
    assert exported["storedValueCard"] == {"total": Decimal(29), "path": [A, B, C, D]}
    assert paths.for_policy(FarePolicy.SINGLE_JOURNEY_TICKET) is sjt


def test_error_message_includes_cause():
    error = StationNotFoundError("Station missing", cause=KeyError("x"), station="A")

    assert isinstance(error, FareCalculatorError)
    assert str(error).startswith("Station missing: ")
    assert error.station == "A"
