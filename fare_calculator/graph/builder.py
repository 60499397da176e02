"""Graph construction from a fare directory.

Each line matrix is expanded into a complete set of pairwise edges and
each transfer becomes a zero-fare edge. All matrices are validated
before the first edge is inserted, and the graph is only returned once
every matrix and transfer has been applied.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from decimal import InvalidOperation
from typing import Optional, Sequence

from ..domain.errors import (
    DirectoryFormatError,
    MatrixShapeError,
    TransferEndpointNotFoundError,
)
from ..domain.models import (
    Amount,
    Directory,
    FareInfo,
    LineMatrix,
    Station,
    TransferEndpoint,
)
from .transit_graph import TransitGraph


@dataclass
class GraphBuilder:
    """Builds a frozen TransitGraph from a Directory.

    Attributes:
        max_workers: Number of threads used to expand line matrices.
            1 expands them sequentially.
    """

    max_workers: int = 1
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")
        self._logger = logging.getLogger(__name__)

    def build(self, directory: Directory) -> TransitGraph:
        """Build the graph for ``directory``.

        Raises:
            DirectoryFormatError: If a matrix is blank, empty, has
                duplicate stations or repeats another matrix's line.
            MatrixShapeError: If a fare table is not N x N.
            TransferEndpointNotFoundError: If a transfer names a station
                no matrix contains.
        """
        self._logger.info(
            "Building graph",
            extra={
                "lines": len(directory.matrices),
                "transfers": len(directory.transfers),
            },
        )

        seen = set()
        for matrix in directory.matrices:
            self._validate_matrix(matrix)
            if matrix.transit_line in seen:
                raise DirectoryFormatError(
                    f"Transit line '{matrix.transit_line}' is listed more than once",
                    transit_line=matrix.transit_line,
                )
            seen.add(matrix.transit_line)

        graph = TransitGraph(strict_transfers=True)

        if self.max_workers > 1 and len(directory.matrices) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                futures = [
                    pool.submit(self._add_matrix, graph, matrix)
                    for matrix in directory.matrices
                ]
                for future in futures:
                    future.result()
        else:
            for matrix in directory.matrices:
                self._add_matrix(graph, matrix)

        # Transfers need every station registered first.
        for transfer in directory.transfers:
            origin = self._resolve(directory, transfer.origin, "from")
            destination = self._resolve(directory, transfer.destination, "to")
            graph.add_transfer(origin, destination)

        graph.freeze()
        self._logger.info(
            "Graph built",
            extra={"nodes": len(graph), "edges": graph.edge_count},
        )
        return graph

    def _validate_matrix(self, matrix: LineMatrix) -> None:
        line = matrix.transit_line
        if not line or not line.strip():
            raise DirectoryFormatError(
                "Matrix transit line is required (e.g. \"LRT-1\")",
                transit_line=line,
            )
        if not matrix.stations:
            raise DirectoryFormatError(
                f"Matrix '{line}' has no stations", transit_line=line
            )
        codes = [entry.code for entry in matrix.stations]
        duplicates = sorted({code for code in codes if codes.count(code) > 1})
        if duplicates:
            raise DirectoryFormatError(
                f"Matrix '{line}' lists duplicate stations: {', '.join(duplicates)}",
                transit_line=line,
            )
        if matrix.fares is None:
            raise DirectoryFormatError(
                f"Matrix '{line}' has no fares", transit_line=line
            )

        n = len(matrix.stations)
        _validate_square(matrix.fares.stored_value_card, n, "SVC", line)
        _validate_square(matrix.fares.single_journey_ticket, n, "SJT", line)

    def _add_matrix(self, graph: TransitGraph, matrix: LineMatrix) -> None:
        assert matrix.fares is not None
        svc = matrix.fares.stored_value_card
        sjt = matrix.fares.single_journey_ticket
        assert svc is not None and sjt is not None

        stations = matrix.station_ids()
        for station in stations:
            graph.ensure_node(station)

        # Undirected: the upper triangle is enough.
        n = len(stations)
        for i in range(n):
            for j in range(i + 1, n):
                fare = _fare(svc[i][j], sjt[i][j], matrix.transit_line, i, j)
                graph.add_edge(stations[i], stations[j], fare)

        self._logger.debug(
            "Matrix expanded",
            extra={"transit_line": matrix.transit_line, "stations": n},
        )

    def _resolve(
        self, directory: Directory, endpoint: TransferEndpoint, side: str
    ) -> Station:
        if not endpoint.transit_line.strip() or not endpoint.code.strip():
            raise DirectoryFormatError(
                f"Transfer '{side}' endpoint contains blank values",
                transit_line=endpoint.transit_line,
            )
        matrix = directory.matrix_for(endpoint.transit_line)
        station = matrix.find(endpoint.code) if matrix is not None else None
        if station is None:
            raise TransferEndpointNotFoundError(
                f"Transfer '{side}' station not found: "
                f"{endpoint.transit_line} {endpoint.code}",
                transit_line=endpoint.transit_line,
                side=side,
                code=endpoint.code,
            )
        return station


def build_graph(directory: Directory, max_workers: int = 1) -> TransitGraph:
    """Shortcut for ``GraphBuilder(max_workers).build(directory)``."""
    return GraphBuilder(max_workers=max_workers).build(directory)


def _validate_square(
    table: Optional[Sequence[Sequence[Amount]]], expected: int, label: str, line: str
) -> None:
    if table is None:
        raise DirectoryFormatError(
            f"{label} ({line}) matrix is missing", transit_line=line
        )
    if len(table) != expected:
        raise MatrixShapeError(
            f"{label} ({line}) row count {len(table)} != station count {expected}",
            transit_line=line,
            table=label,
            expected=expected,
            actual=len(table),
        )
    for r, row in enumerate(table):
        if len(row) != expected:
            raise MatrixShapeError(
                f"{label} ({line}) row {r} has {len(row)} columns (expected {expected})",
                transit_line=line,
                table=label,
                expected=expected,
                actual=len(row),
                row=r,
            )


def _fare(svc: Amount, sjt: Amount, line: str, i: int, j: int) -> FareInfo:
    try:
        return FareInfo(svc, sjt)  # type: ignore[arg-type]
    except (InvalidOperation, TypeError, ValueError) as e:
        raise DirectoryFormatError(
            f"Invalid fare value in '{line}' at row {i}, column {j}",
            transit_line=line,
            cause=e,
        )
