"""JSON directory repository adapter.

Layout on disk:

- ``directory.json``: ``{"matrixPaths": [...], "transfersPath": "..."}``,
  paths relative to the directory file
- one matrix file per line: ``{"transitLine", "stations": [{"code", "name"}],
  "fares": {"svc": N x N, "sjt": N x N}}``
- transfers file: ``[{"from": {"transitLine", "code"}, "to": {...}}]``

Files are validated with Pydantic and converted to domain models. Keys
are matched ignoring case.
Fare table shapes are left to the graph builder.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    model_validator,
)
from pydantic.alias_generators import to_camel

from ...config import DirectoryConfig, get_config
from ...domain.errors import DirectoryFormatError
from ...domain.models import (
    Directory,
    Fares,
    LineMatrix,
    StationEntry,
    Transfer,
    TransferEndpoint,
)


class _Schema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _match_keys_ignoring_case(cls, data: Any) -> Any:
        """Map keys such as ``TransitLine`` or ``SVC`` onto the field aliases."""
        if not isinstance(data, dict):
            return data
        aliases: Dict[str, str] = {}
        for name, info in cls.model_fields.items():
            alias = info.alias or name
            aliases[name.lower()] = alias
            aliases[alias.lower()] = alias
        return {
            aliases.get(key.lower(), key) if isinstance(key, str) else key: value
            for key, value in data.items()
        }


class DirectoryFile(_Schema):
    matrix_paths: List[str] = Field(min_length=1)
    transfers_path: str


class StationSchema(_Schema):
    code: str
    name: str


class FaresSchema(_Schema):
    stored_value_card: List[List[Decimal]] = Field(alias="svc")
    single_journey_ticket: List[List[Decimal]] = Field(alias="sjt")


class MatrixFile(_Schema):
    transit_line: str
    stations: List[StationSchema]
    fares: FaresSchema

    def to_domain(self) -> LineMatrix:
        return LineMatrix(
            transit_line=self.transit_line,
            stations=tuple(StationEntry(s.code, s.name) for s in self.stations),
            fares=Fares(
                stored_value_card=self.fares.stored_value_card,
                single_journey_ticket=self.fares.single_journey_ticket,
            ),
        )


class EndpointSchema(_Schema):
    transit_line: str
    code: str

    def to_domain(self) -> TransferEndpoint:
        return TransferEndpoint(self.transit_line, self.code)


class TransferSchema(_Schema):
    origin: EndpointSchema = Field(alias="from")
    destination: EndpointSchema = Field(alias="to")

    def to_domain(self) -> Transfer:
        return Transfer(self.origin.to_domain(), self.destination.to_domain())


_TRANSFERS = TypeAdapter(List[TransferSchema])

S = TypeVar("S", bound=_Schema)


@dataclass
class JsonDirectoryRepository:
    """Directory repository that loads from JSON files.

    Attributes:
        config: Directory configuration (data dir, file names)
    """

    config: DirectoryConfig = field(default_factory=lambda: get_config().directory)
    _logger: logging.Logger = field(init=False, repr=False)

    # Cached data
    _directory: Optional[Directory] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def load(self) -> Directory:
        """Load the directory and every file it references.

        Raises:
            DirectoryFormatError: If a file is missing or malformed.
        """
        if self._directory is not None:
            return self._directory

        directory_path = self.config.directory_path
        self._logger.debug("Loading directory", extra={"path": str(directory_path)})

        index = self._read(directory_path, DirectoryFile)
        base = directory_path.parent

        matrices = tuple(
            self._read(base / name, MatrixFile).to_domain()
            for name in index.matrix_paths
        )

        transfers_path = base / index.transfers_path
        try:
            raw = transfers_path.read_text(encoding="utf-8")
            transfers = tuple(t.to_domain() for t in _TRANSFERS.validate_json(raw))
        except (OSError, ValidationError) as e:
            raise DirectoryFormatError(
                f"Failed to load transfers file: {transfers_path}",
                file_path=str(transfers_path),
                cause=e,
            )

        self._directory = Directory(matrices=matrices, transfers=transfers)
        self._logger.info(
            "Directory loaded",
            extra={"lines": len(matrices), "transfers": len(transfers)},
        )
        return self._directory

    def _read(self, path: Path, schema: Type[S]) -> S:
        try:
            return schema.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            raise DirectoryFormatError(
                f"Failed to load {schema.__name__} from {path}",
                file_path=str(path),
                cause=e,
            )

    def clear_cache(self) -> None:
        """Forget the cached directory."""
        self._directory = None
        self._logger.debug("Directory cache cleared")
