"""Application services."""

from .fare_service import FareCalculatorService

__all__ = ["FareCalculatorService"]
