"""Adapters layer - Concrete implementations of ports."""

from .directory import JsonDirectoryRepository, TextDirectoryRepository

__all__ = ["JsonDirectoryRepository", "TextDirectoryRepository"]
