"""Immutable domain models for the fare calculator.

All models are frozen dataclasses with slots. Station identities are
plain values: equality and hashing come from their fields, so they are
safe to use as dictionary keys and path endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Union

Amount = Union[Decimal, int, str]

CENTAVO = Decimal("0.01")


def to_amount(value: Amount) -> Decimal:
    """Coerce a fare amount to Decimal.

    Floats are rejected because they cannot represent most fares exactly.
    NaN and infinities are rejected with ValueError.
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(f"Fare amounts must be int, str or Decimal, got {value!r}")
    amount = value if isinstance(value, Decimal) else Decimal(value)
    if not amount.is_finite():
        raise ValueError(f"Fare amounts must be finite, got {value!r}")
    return amount


class FarePolicy(Enum):
    """Fare policy a route is priced under."""

    STORED_VALUE_CARD = "svc"
    SINGLE_JOURNEY_TICKET = "sjt"

    @property
    def key(self) -> str:
        """camelCase key used when results are exported as plain dicts."""
        return _POLICY_KEYS[self]

    @property
    def label(self) -> str:
        return _POLICY_LABELS[self]

    @classmethod
    def parse(cls, value: Union[str, "FarePolicy"]) -> "FarePolicy":
        """Accept a member, its short code ("svc"/"sjt") or its name."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for policy in cls:
            if text.lower() == policy.value or text.upper() == policy.name:
                return policy
            if text == policy.key:
                return policy
        raise ValueError(f"Unknown fare policy: {value!r}")


_POLICY_KEYS = {
    FarePolicy.STORED_VALUE_CARD: "storedValueCard",
    FarePolicy.SINGLE_JOURNEY_TICKET: "singleJourneyTicket",
}

_POLICY_LABELS = {
    FarePolicy.STORED_VALUE_CARD: "Stored Value Card (beep card)",
    FarePolicy.SINGLE_JOURNEY_TICKET: "Single Journey Ticket",
}


@dataclass(frozen=True, slots=True)
class Station:
    """A station on one transit line.

    Attributes:
        transit_line: Line identifier (e.g. 'LRT-1')
        code: Station code, unique within the line
        name: Human-readable station name
    """

    transit_line: str
    code: str
    name: str

    def __str__(self) -> str:
        return f"({self.code}) {self.transit_line} {self.name}"


@dataclass(frozen=True, slots=True)
class FareInfo:
    """Pair of fares attached to one graph edge.

    Both amounts at zero mark a transfer.
    """

    stored_value_card: Decimal
    single_journey_ticket: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "stored_value_card", to_amount(self.stored_value_card))
        object.__setattr__(
            self, "single_journey_ticket", to_amount(self.single_journey_ticket)
        )

    @property
    def is_transfer(self) -> bool:
        return self.stored_value_card == 0 and self.single_journey_ticket == 0

    def for_policy(self, policy: FarePolicy) -> Decimal:
        if policy is FarePolicy.STORED_VALUE_CARD:
            return self.stored_value_card
        return self.single_journey_ticket


ZERO_FARE = FareInfo(Decimal(0), Decimal(0))


@dataclass(frozen=True, slots=True)
class PathLeg:
    """One hop of a priced route."""

    origin: Station
    destination: Station
    fare: Decimal

    @property
    def is_transfer(self) -> bool:
        return self.fare == 0 and self.origin.transit_line != self.destination.transit_line


@dataclass(frozen=True, slots=True)
class PathResult:
    """Cheapest route under a single fare policy.

    Attributes:
        policy: Fare policy the route was priced under
        total: Sum of the leg fares
        path: Stations from origin to destination, inclusive
        legs: Per-hop fares, one fewer than the number of stations
    """

    policy: FarePolicy
    total: Decimal
    path: tuple[Station, ...]
    legs: tuple[PathLeg, ...] = field(default_factory=tuple)

    @property
    def num_stops(self) -> int:
        return len(self.path)

    @property
    def transfer_count(self) -> int:
        return sum(1 for leg in self.legs if leg.is_transfer)

    @property
    def lines(self) -> tuple[str, ...]:
        """Distinct lines ridden, in travel order."""
        seen: list[str] = []
        for station in self.path:
            if station.transit_line not in seen:
                seen.append(station.transit_line)
        return tuple(seen)

    def discounted(self, rate: Amount) -> PathResult:
        """Return a copy with a flat discount applied.

        Args:
            rate: Fraction taken off every fare, between 0 and 1.

        Amounts are rounded half-up to the centavo.
        """
        rate = to_amount(rate)
        if not 0 <= rate <= 1:
            raise ValueError(f"Discount rate must be between 0 and 1, got {rate}")
        factor = Decimal(1) - rate
        legs = tuple(
            replace(leg, fare=_quantize(leg.fare * factor)) for leg in self.legs
        )
        return replace(self, total=_quantize(self.total * factor), legs=legs)

    def as_dict(self) -> Dict[str, Any]:
        return {"total": self.total, "path": list(self.path)}


@dataclass(frozen=True, slots=True)
class ShortestPaths:
    """Independent cheapest routes for both fare policies."""

    stored_value_card: PathResult
    single_journey_ticket: PathResult

    def for_policy(self, policy: FarePolicy) -> PathResult:
        if policy is FarePolicy.STORED_VALUE_CARD:
            return self.stored_value_card
        return self.single_journey_ticket

    def as_dict(self) -> Dict[str, Dict[str, Any]]:
        return {
            FarePolicy.STORED_VALUE_CARD.key: self.stored_value_card.as_dict(),
            FarePolicy.SINGLE_JOURNEY_TICKET.key: self.single_journey_ticket.as_dict(),
        }


@dataclass(frozen=True, slots=True)
class StationEntry:
    """A station as listed inside a line matrix (line implied)."""

    code: str
    name: str


@dataclass(frozen=True, slots=True)
class Fares:
    """The two square fare tables of a line.

    Tables are left as given; the graph builder checks their shape.
    """

    stored_value_card: Optional[Sequence[Sequence[Amount]]]
    single_journey_ticket: Optional[Sequence[Sequence[Amount]]]


@dataclass(frozen=True, slots=True)
class LineMatrix:
    """One transit line: ordered stations plus both fare tables."""

    transit_line: str
    stations: tuple[StationEntry, ...]
    fares: Optional[Fares]

    def station_ids(self) -> tuple[Station, ...]:
        return tuple(
            Station(self.transit_line, entry.code, entry.name)
            for entry in self.stations
        )

    def find(self, code: str) -> Optional[Station]:
        for entry in self.stations:
            if entry.code == code:
                return Station(self.transit_line, entry.code, entry.name)
        return None


@dataclass(frozen=True, slots=True)
class TransferEndpoint:
    transit_line: str
    code: str


@dataclass(frozen=True, slots=True)
class Transfer:
    """Zero-fare link between two stations, possibly on different lines."""

    origin: TransferEndpoint
    destination: TransferEndpoint


@dataclass(frozen=True, slots=True)
class Directory:
    """Normalized description of the whole network.

    Attributes:
        matrices: One entry per transit line
        transfers: Zero-fare links between stations
    """

    matrices: tuple[LineMatrix, ...]
    transfers: tuple[Transfer, ...] = field(default_factory=tuple)

    def matrix_for(self, transit_line: str) -> Optional[LineMatrix]:
        for matrix in self.matrices:
            if matrix.transit_line == transit_line:
                return matrix
        return None

    @property
    def transit_lines(self) -> tuple[str, ...]:
        return tuple(matrix.transit_line for matrix in self.matrices)


def _quantize(amount: Decimal) -> Decimal:
    return amount.quantize(CENTAVO, rounding=ROUND_HALF_UP)
