"""Ready-made column search functions for the chunked scanner."""
from __future__ import annotations

from typing import List, Optional, Sequence

from common.models import Record
from .scanner import AllMatchPredicate, FirstMatchPredicate


def column_equals(column: int, key: str) -> FirstMatchPredicate:
    """Pick the first record of a chunk whose ``column`` equals ``key``."""

    _require_column(column)

    def search(chunk: Sequence[Record]) -> Optional[Record]:
        for record in chunk:
            if column < len(record) and record[column] == key:
                return record
        return None

    return search


def all_column_equals(column: int, key: str) -> AllMatchPredicate:
    """Pick every record of a chunk whose ``column`` equals ``key``."""

    _require_column(column)

    def search(chunk: Sequence[Record]) -> List[Record]:
        return [record for record in chunk if column < len(record) and record[column] == key]

    return search


def _require_column(column: int) -> None:
    if column < 0:
        raise ValueError(f"column index must be non-negative, got {column}")
