"""Top-level package for the train fare calculator.

Builds a fare-weighted graph of a multi-line transit network and finds
the cheapest route between two stations under each fare policy.
"""

from .domain.models import Directory, FareInfo, FarePolicy, Station
from .graph import GraphBuilder, TransitGraph, build_graph

__all__ = [
    "Directory",
    "FareInfo",
    "FarePolicy",
    "Station",
    "TransitGraph",
    "GraphBuilder",
    "build_graph",
]
