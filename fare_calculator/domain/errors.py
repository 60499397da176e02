"""Typed domain errors for the fare calculator.

Every failure the core can produce has its own error type so callers
can tell a bad query apart from bad input data or an internal bug.

All errors inherit from FareCalculatorError and can optionally
wrap a root cause exception for debugging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class FareCalculatorError(Exception):
    """Base error for the fare calculator domain.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class StationNotFoundError(FareCalculatorError):
    """Station identity never registered in the graph.

    Attributes:
        station: Text form of the station that was not found
    """

    station: str = ""


@dataclass
class NoRouteFoundError(FareCalculatorError):
    """No path exists between the requested stations.

    Fatal to the query only; the graph stays usable.

    Attributes:
        origin: Origin station
        destination: Destination station
        policy: Fare policy the search was run for
    """

    origin: str = ""
    destination: str = ""
    policy: str = ""


@dataclass
class PathReconstructionError(FareCalculatorError):
    """Predecessor chain broke before reaching the origin.

    Signals a bug in relaxation, never bad input.

    Attributes:
        origin: Origin station
        destination: Destination station
        broken_at: Station whose predecessor was missing
    """

    origin: str = ""
    destination: str = ""
    broken_at: str = ""


@dataclass
class DirectoryFormatError(FareCalculatorError):
    """Fare directory data has the wrong shape.

    Attributes:
        transit_line: Line the offending data belongs to, if known
        file_path: Source file if the data came from disk
    """

    transit_line: Optional[str] = None
    file_path: Optional[str] = None


@dataclass
class MatrixShapeError(DirectoryFormatError):
    """Fare table dimensions do not match the line's station count.

    Attributes:
        table: Which table failed ("SVC" or "SJT")
        expected: Expected row/column count
        actual: Actual row/column count found
        row: Offending row index, or None when the row count is wrong
    """

    table: str = ""
    expected: int = 0
    actual: int = 0
    row: Optional[int] = None


@dataclass
class TransferEndpointNotFoundError(DirectoryFormatError):
    """A transfer names a line/code absent from every matrix.

    Attributes:
        side: "from" or "to"
        code: Station code that could not be resolved
    """

    side: str = ""
    code: str = ""


@dataclass
class GraphFrozenError(FareCalculatorError):
    """Attempt to mutate a graph after construction finished."""


@dataclass
class ConfigurationError(FareCalculatorError):
    """Invalid or missing configuration.

    Attributes:
        setting_name: Name of the problematic setting
        expected_type: Expected type or format
    """

    setting_name: str = ""
    expected_type: Optional[str] = None
