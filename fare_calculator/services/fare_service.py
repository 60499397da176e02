"""Fare calculator service - Main orchestrator.

Loads the fare directory, builds the transit graph once, and answers
repeated fare queries against it.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Tuple, Union

from ..config import FareConfig, get_config
from ..domain.errors import FareCalculatorError, NoRouteFoundError, StationNotFoundError
from ..domain.models import FarePolicy, PathResult, ShortestPaths, Station
from ..graph.builder import GraphBuilder
from ..graph.transit_graph import TransitGraph
from ..ports.directory import DirectoryRepositoryPort


@dataclass
class FareCalculatorService:
    """Main service for fare queries.

    The graph is built on first use and then shared by every query.
    reload() builds a fresh graph and swaps it in; queries already
    running keep the graph they started with.

    Attributes:
        repository: Loads the fare directory
        builder: Turns the directory into a graph
        fare_config: Default policy, discount rate and currency
    """

    repository: DirectoryRepositoryPort
    builder: GraphBuilder = field(default_factory=GraphBuilder)
    fare_config: FareConfig = field(default_factory=lambda: get_config().fare)

    _graph: Optional[TransitGraph] = field(default=None, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def graph(self) -> TransitGraph:
        graph = self._graph
        if graph is None:
            with self._lock:
                if self._graph is None:
                    self._graph = self._build()
                graph = self._graph
        return graph

    def reload(self) -> TransitGraph:
        """Rebuild the graph from the repository and swap it in."""
        clear = getattr(self.repository, "clear_cache", None)
        if clear is not None:
            clear()
        graph = self._build()
        with self._lock:
            self._graph = graph
        return graph

    def _build(self) -> TransitGraph:
        directory = self.repository.load()
        return self.builder.build(directory)

    def lines(self) -> Tuple[str, ...]:
        """Transit lines in the order the directory lists them."""
        return self.repository.load().transit_lines

    def stations(self, transit_line: str) -> Tuple[Station, ...]:
        """Stations on one line, in line order."""
        matrix = self.repository.load().matrix_for(transit_line)
        if matrix is None:
            raise StationNotFoundError(
                f"Unknown transit line: {transit_line}", station=transit_line
            )
        return matrix.station_ids()

    def find_station(self, transit_line: str, code_or_name: str) -> Station:
        """Look a station up by exact code first, then by code or name
        ignoring case and surrounding whitespace.

        Raises:
            StationNotFoundError: If nothing on the line matches.
        """
        candidates = self.stations(transit_line)
        code = code_or_name.strip()
        for station in candidates:
            if station.code == code:
                return station
        wanted = code.casefold()
        for station in candidates:
            if wanted in (station.code.casefold(), station.name.casefold()):
                return station
        raise StationNotFoundError(
            f"Station {code_or_name} not found on line {transit_line}",
            station=f"{transit_line} {code_or_name}",
        )

    def quote(
        self,
        origin: Station,
        destination: Station,
        policy: Union[FarePolicy, str, None] = None,
        discounted: bool = False,
    ) -> PathResult:
        """Cheapest route under one policy.

        Args:
            origin: Departure station.
            destination: Arrival station.
            policy: Fare policy; the configured default when omitted.
            discounted: Apply the configured flat discount.

        Raises:
            StationNotFoundError: If either station is unknown.
            NoRouteFoundError: If no path exists.
        """
        chosen = FarePolicy.parse(policy or self.fare_config.default_policy)
        result = self.graph.shortest_path(origin, destination, chosen)
        if discounted:
            result = result.discounted(self.fare_config.discount_rate)

        self._logger.info(
            "Fare quoted",
            extra={
                "origin": str(origin),
                "destination": str(destination),
                "policy": chosen.value,
                "total": str(result.total),
                "discounted": discounted,
            },
        )
        return result

    def quote_both(self, origin: Station, destination: Station) -> ShortestPaths:
        """Cheapest route under each policy."""
        return self.graph.shortest_paths(origin, destination)

    def quote_safe(
        self,
        origin: Station,
        destination: Station,
        policy: Union[FarePolicy, str, None] = None,
        discounted: bool = False,
    ) -> Tuple[Optional[PathResult], Optional[str]]:
        """Like quote(), but returns an error message instead of raising."""
        try:
            return self.quote(origin, destination, policy, discounted), None
        except NoRouteFoundError as e:
            return None, f"No path found between {e.origin} and {e.destination}"
        except FareCalculatorError as e:
            return None, f"Error: {e}"

    def format_amount(self, amount: Decimal) -> str:
        return f"{self.fare_config.currency_symbol}{amount:.2f}"

    def format_quote(self, result: PathResult) -> str:
        """Render a quote as two lines of text."""
        path_str = " -> ".join(str(station) for station in result.path)
        return f"Total fare: {self.format_amount(result.total)}\nPath: {path_str}"
