"""Directory adapters - Implementations of DirectoryRepositoryPort.

Available implementations:
- JsonDirectoryRepository: Loads a directory.json and the files it lists
- TextDirectoryRepository: Loads plain-text fare matrices
"""

from .json_repository import JsonDirectoryRepository
from .text_repository import TextDirectoryRepository

__all__ = ["JsonDirectoryRepository", "TextDirectoryRepository"]
