"""Transit graph and its construction from a fare directory."""

from .builder import GraphBuilder, build_graph
from .transit_graph import TransitGraph

__all__ = ["TransitGraph", "GraphBuilder", "build_graph"]
