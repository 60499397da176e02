"""Plain-text fare matrix repository adapter.

Line file format (blank lines and ``#`` comments are skipped)::

    GL
    Baclaran, EDSA, Libertad
    0, 15, 16          <- N rows of stored-value-card fares
    ...
    0, 20, 20          <- N rows of single-journey-ticket fares
    ...

Transfers file: one ``FromStation, FromLine, ToStation, ToLine`` per line.

Text files carry station names only, so each station's code is its
1-based position on the line.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

from ...config import DirectoryConfig, get_config
from ...domain.errors import DirectoryFormatError, TransferEndpointNotFoundError
from ...domain.models import (
    Directory,
    Fares,
    LineMatrix,
    StationEntry,
    Transfer,
    TransferEndpoint,
    to_amount,
)

DELIMITER = ","
COMMENT_PREFIX = "#"

# Short codes used in the text files and the line names they stand for.
LINE_CODES: Dict[str, str] = {
    "GL": "LRT-1",
    "PL": "LRT-2",
    "YL": "MRT-3",
}


def _meaningful_lines(path: Path) -> Iterator[str]:
    with path.open(encoding="utf-8") as f:
        for raw in f:
            line = raw.strip()
            if line and not line.startswith(COMMENT_PREFIX):
                yield line


def _split(line: str) -> List[str]:
    return [part.strip() for part in line.split(DELIMITER)]


def line_name(code: str) -> str:
    """Resolve a short line code ("GL") to its line name ("LRT-1")."""
    return LINE_CODES.get(code.strip(), code.strip())


def parse_matrix(path: Path) -> LineMatrix:
    """Parse one line file.

    Raises:
        DirectoryFormatError: If the file is incomplete or a fare is
            not a number.
    """
    lines = _meaningful_lines(path)

    header = next(lines, None)
    if header is None:
        raise DirectoryFormatError(
            "Transit line not specified in the fare matrix", file_path=str(path)
        )
    transit_line = line_name(header)

    names_line = next(lines, None)
    if names_line is None:
        raise DirectoryFormatError(
            f"Matrix '{transit_line}' has no stations",
            transit_line=transit_line,
            file_path=str(path),
        )
    names = _split(names_line)
    n = len(names)

    rows: List[List[Decimal]] = []
    for line in lines:
        values = _split(line)
        if len(values) != n:
            raise DirectoryFormatError(
                f"Number of fares ({len(values)}) does not match number of "
                f"stations ({n})",
                transit_line=transit_line,
                file_path=str(path),
            )
        try:
            rows.append([to_amount(value) for value in values])
        except (InvalidOperation, ValueError) as e:
            raise DirectoryFormatError(
                f"Invalid fare value in row: {line}",
                transit_line=transit_line,
                file_path=str(path),
                cause=e,
            )

    if len(rows) != 2 * n:
        raise DirectoryFormatError(
            f"Incomplete fare matrix data: expected {2 * n} rows, found {len(rows)}",
            transit_line=transit_line,
            file_path=str(path),
        )

    return LineMatrix(
        transit_line=transit_line,
        stations=tuple(
            StationEntry(code=str(i + 1), name=name) for i, name in enumerate(names)
        ),
        fares=Fares(stored_value_card=rows[:n], single_journey_ticket=rows[n:]),
    )


def parse_transfers(path: Path, matrices: Sequence[LineMatrix]) -> List[Transfer]:
    """Parse the transfers file, mapping station names to codes.

    Raises:
        DirectoryFormatError: On a line without exactly four fields.
        TransferEndpointNotFoundError: If a named station is not on the
            named line.
    """
    codes: Dict[tuple[str, str], str] = {
        (matrix.transit_line, entry.name): entry.code
        for matrix in matrices
        for entry in matrix.stations
    }

    transfers: List[Transfer] = []
    for line in _meaningful_lines(path):
        parts = _split(line)
        if len(parts) != 4:
            raise DirectoryFormatError(
                f"Invalid transfer line format: {line}", file_path=str(path)
            )
        from_station, from_line, to_station, to_line = parts
        endpoints = []
        for side, station, code in (
            ("from", from_station, from_line),
            ("to", to_station, to_line),
        ):
            transit_line = line_name(code)
            station_code = codes.get((transit_line, station))
            if station_code is None:
                raise TransferEndpointNotFoundError(
                    f"Transfer '{side}' station not found: {transit_line} {station}",
                    transit_line=transit_line,
                    file_path=str(path),
                    side=side,
                    code=station,
                )
            endpoints.append(TransferEndpoint(transit_line, station_code))
        transfers.append(Transfer(endpoints[0], endpoints[1]))

    return transfers


@dataclass
class TextDirectoryRepository:
    """Directory repository that loads plain-text fare matrices.

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
        """Load every configured line file, then the transfers file.

        Raises:
            DirectoryFormatError: If a file is missing or malformed.
        """
        if self._directory is not None:
            return self._directory

        matrices = tuple(self._guard(parse_matrix, path) for path in self.config.line_paths)
        transfers = self._guard(
            lambda path: parse_transfers(path, matrices), self.config.transfers_path
        )

        self._directory = Directory(matrices=matrices, transfers=tuple(transfers))
        self._logger.info(
            "Directory loaded",
            extra={"lines": len(matrices), "transfers": len(transfers)},
        )
        return self._directory

    def _guard(self, parse, path: Path):  # type: ignore[no-untyped-def]
        self._logger.debug("Reading fare file", extra={"path": str(path)})
        try:
            return parse(path)
        except (OSError, UnicodeDecodeError) as e:
            raise DirectoryFormatError(
                f"Failed to read fare file: {path}", file_path=str(path), cause=e
            )

    def clear_cache(self) -> None:
        """Forget the cached directory."""
        self._directory = None
        self._logger.debug("Directory cache cleared")
