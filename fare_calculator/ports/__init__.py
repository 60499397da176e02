"""Ports layer - Abstract interfaces (Protocols) for the application.

Ports define the contracts between the application core and external
adapters. They enable dependency injection and make the system testable.
"""

from .directory import DirectoryRepositoryPort
from .graph import FareGraphPort

__all__ = [
    "DirectoryRepositoryPort",
    "FareGraphPort",
]
