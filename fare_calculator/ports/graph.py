"""Graph ports - Read-only view of a built transit graph.

Presentation code only needs to look stations up and ask for routes;
this protocol is the whole surface it is allowed to depend on.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Tuple, runtime_checkable

if TYPE_CHECKING:
    from ..domain.models import FarePolicy, PathResult, ShortestPaths, Station


@runtime_checkable
class FareGraphPort(Protocol):
    """Port for cheapest-route queries.

    Implementation: graph/transit_graph.py
    """

    def __contains__(self, station: object) -> bool:
        ...

    def stations(self) -> Tuple[Station, ...]:
        """All stations known to the graph."""
        ...

    def shortest_path(
        self, origin: Station, destination: Station, policy: FarePolicy
    ) -> PathResult:
        """Cheapest route under one fare policy."""
        ...

    def shortest_paths(self, origin: Station, destination: Station) -> ShortestPaths:
        """Cheapest route under each fare policy."""
        ...
