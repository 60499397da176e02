"""Fare-weighted transit graph and cheapest-route search.

Nodes are station identities, stored once in an append-only arena and
addressed by integer index afterwards. Every undirected edge carries a
FareInfo pair, and routes are found with Dijkstra's algorithm run once
per fare policy.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from ..domain.errors import (
    GraphFrozenError,
    NoRouteFoundError,
    PathReconstructionError,
    StationNotFoundError,
)
from ..domain.models import (
    ZERO_FARE,
    FareInfo,
    FarePolicy,
    PathLeg,
    PathResult,
    ShortestPaths,
    Station,
)


@dataclass
class TransitGraph:
    """Undirected graph of stations weighted by both fare policies.

    The graph is filled by the builder, frozen, and then only read.
    Queries keep their working state local, so a frozen graph can be
    shared between threads without locking.

    Attributes:
        strict_transfers: If True, add_transfer rejects stations that
            were never registered. If False, it registers them.
    """

    strict_transfers: bool = True

    _stations: List[Station] = field(default_factory=list, repr=False)
    _index: Dict[Station, int] = field(default_factory=dict, repr=False)
    _adjacency: List[Dict[int, FareInfo]] = field(default_factory=list, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _frozen: bool = field(default=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def ensure_node(self, station: Station) -> int:
        """Register a station if new and return its index.

        Check and insert happen under one lock, so concurrent builders
        never assign two indices to the same station.
        """
        with self._lock:
            self._check_mutable()
            return self._ensure_node_locked(station)

    def add_edge(self, a: Station, b: Station, fare: FareInfo) -> None:
        """Store ``fare`` between ``a`` and ``b`` in both directions.

        Replaces any fare already stored for the pair.
        """
        with self._lock:
            self._check_mutable()
            i = self._ensure_node_locked(a)
            j = self._ensure_node_locked(b)
            self._adjacency[i][j] = fare
            self._adjacency[j][i] = fare

    def add_transfer(self, a: Station, b: Station) -> None:
        """Link two stations at zero fare.

        Raises:
            StationNotFoundError: In strict mode, if either station was
                never registered.
        """
        with self._lock:
            self._check_mutable()
            if self.strict_transfers:
                for station in (a, b):
                    if station not in self._index:
                        raise StationNotFoundError(
                            f"Station {station.name} on line {station.transit_line} "
                            "does not exist in the graph",
                            station=str(station),
                        )
            i = self._ensure_node_locked(a)
            j = self._ensure_node_locked(b)
            self._adjacency[i][j] = ZERO_FARE
            self._adjacency[j][i] = ZERO_FARE

        self._logger.debug(
            "Transfer added", extra={"station_a": str(a), "station_b": str(b)}
        )

    def freeze(self) -> None:
        """Finish construction; later mutations raise GraphFrozenError."""
        with self._lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _ensure_node_locked(self, station: Station) -> int:
        index = self._index.get(station)
        if index is None:
            index = len(self._stations)
            self._stations.append(station)
            self._index[station] = index
            self._adjacency.append({})
        return index

    def _check_mutable(self) -> None:
        if self._frozen:
            raise GraphFrozenError("Graph is read-only once built")

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def __contains__(self, station: object) -> bool:
        return station in self._index

    def __len__(self) -> int:
        return len(self._stations)

    def stations(self) -> Tuple[Station, ...]:
        """All stations in registration order."""
        return tuple(self._stations)

    @property
    def edge_count(self) -> int:
        return sum(len(neighbors) for neighbors in self._adjacency) // 2

    def neighbors(self, station: Station) -> Dict[Station, FareInfo]:
        index = self._require(station)
        return {self._stations[j]: fare for j, fare in self._adjacency[index].items()}

    def fare_between(self, a: Station, b: Station) -> Optional[FareInfo]:
        """Fare stored on the direct edge, or None if there is none."""
        i = self._require(a)
        j = self._require(b)
        return self._adjacency[i].get(j)

    def _require(self, station: Station) -> int:
        index = self._index.get(station)
        if index is None:
            raise StationNotFoundError(
                f"Station {station.name} on line {station.transit_line} "
                "does not exist in the graph",
                station=str(station),
            )
        return index

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def shortest_paths(self, origin: Station, destination: Station) -> ShortestPaths:
        """Cheapest route for each fare policy, computed independently.

        The two routes may differ in the stations they pass through.

        Raises:
            StationNotFoundError: If either station is unknown.
            NoRouteFoundError: If the destination cannot be reached.
        """
        return ShortestPaths(
            stored_value_card=self.shortest_path(
                origin, destination, FarePolicy.STORED_VALUE_CARD
            ),
            single_journey_ticket=self.shortest_path(
                origin, destination, FarePolicy.SINGLE_JOURNEY_TICKET
            ),
        )

    def shortest_path(
        self, origin: Station, destination: Station, policy: FarePolicy
    ) -> PathResult:
        """Dijkstra's algorithm for a single fare policy.

        Runtime is O((V + E) log V) with a binary heap.
        """
        source = self._require(origin)
        target = self._require(destination)

        if source == target:
            return PathResult(policy=policy, total=Decimal(0), path=(origin,))

        distances: Dict[int, Decimal] = {source: Decimal(0)}
        previous: Dict[int, int] = {}
        visited: set[int] = set()

        # The counter keeps pops in insertion order among equal distances.
        counter = itertools.count()
        heap: List[Tuple[Decimal, int, int]] = [(Decimal(0), next(counter), source)]

        while heap:
            current_distance, _, u = heapq.heappop(heap)

            if u in visited:
                continue
            visited.add(u)

            if u == target:
                path = self._reconstruct(previous, source, target)
                result = PathResult(
                    policy=policy,
                    total=current_distance,
                    path=tuple(self._stations[i] for i in path),
                    legs=self._legs(path, policy),
                )
                self._logger.debug(
                    "Route found",
                    extra={
                        "origin": str(origin),
                        "destination": str(destination),
                        "policy": policy.value,
                        "total": str(result.total),
                        "stops": result.num_stops,
                    },
                )
                return result

            for v, fare in self._adjacency[u].items():
                if v in visited:
                    continue
                weight = fare.for_policy(policy)
                if weight < 0:
                    self._logger.debug(
                        "Skipping negative fare",
                        extra={
                            "station_a": str(self._stations[u]),
                            "station_b": str(self._stations[v]),
                            "policy": policy.value,
                        },
                    )
                    continue
                candidate = current_distance + weight
                best = distances.get(v)
                if best is not None and candidate >= best:
                    continue
                distances[v] = candidate
                previous[v] = u
                heapq.heappush(heap, (candidate, next(counter), v))

        self._logger.warning(
            "No route found",
            extra={
                "origin": str(origin),
                "destination": str(destination),
                "policy": policy.value,
            },
        )
        raise NoRouteFoundError(
            f"No path found from {origin} to {destination}",
            origin=str(origin),
            destination=str(destination),
            policy=policy.value,
        )

    def _reconstruct(self, previous: Dict[int, int], source: int, target: int) -> List[int]:
        """Walk predecessors back from ``target`` and reverse."""
        path = [target]
        current = target
        while current != source:
            # A valid chain never visits more nodes than the graph holds.
            if current not in previous or len(path) > len(self._stations):
                raise PathReconstructionError(
                    "Predecessor chain broke before reaching the origin",
                    origin=str(self._stations[source]),
                    destination=str(self._stations[target]),
                    broken_at=str(self._stations[current]),
                )
            current = previous[current]
            path.append(current)
        path.reverse()
        return path

    def _legs(self, path: List[int], policy: FarePolicy) -> Tuple[PathLeg, ...]:
        return tuple(
            PathLeg(
                origin=self._stations[u],
                destination=self._stations[v],
                fare=self._adjacency[u][v].for_policy(policy),
            )
            for u, v in zip(path, path[1:])
        )
