"""Directory ports - Abstractions for loading fare data.

The core never reads files. A repository turns whatever storage the
fare tables live in into a normalized Directory.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..domain.models import Directory


class DirectoryRepositoryPort(Protocol):
    """Port for loading the fare directory.

    Implementations:
    - adapters/directory/json_repository.py
    - adapters/directory/text_repository.py
    """

    def load(self) -> Directory:
        """Load the line matrices and transfers.

        Returns:
            The normalized directory description.

        Raises:
            DirectoryFormatError: If the stored data is malformed.
        """
        ...
