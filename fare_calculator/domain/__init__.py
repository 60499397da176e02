"""Domain layer - Core value types and errors.

This module contains immutable domain models and typed errors
used throughout the application. No external dependencies.
"""

from .errors import (
    ConfigurationError,
    DirectoryFormatError,
    FareCalculatorError,
    GraphFrozenError,
    MatrixShapeError,
    NoRouteFoundError,
    PathReconstructionError,
    StationNotFoundError,
    TransferEndpointNotFoundError,
)
from .models import (
    ZERO_FARE,
    Directory,
    FareInfo,
    FarePolicy,
    Fares,
    LineMatrix,
    PathLeg,
    PathResult,
    ShortestPaths,
    Station,
    StationEntry,
    Transfer,
    TransferEndpoint,
)

__all__ = [
    # Models
    "Station",
    "StationEntry",
    "FareInfo",
    "ZERO_FARE",
    "FarePolicy",
    "PathLeg",
    "PathResult",
    "ShortestPaths",
    "Fares",
    "LineMatrix",
    "TransferEndpoint",
    "Transfer",
    "Directory",
    # Errors
    "FareCalculatorError",
    "StationNotFoundError",
    "NoRouteFoundError",
    "PathReconstructionError",
    "DirectoryFormatError",
    "MatrixShapeError",
    "TransferEndpointNotFoundError",
    "GraphFrozenError",
    "ConfigurationError",
]
