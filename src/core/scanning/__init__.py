"""Chunked scanning: record reader, chunk driver, predicates, formatting."""

from .formatter import format_row
from .predicates import all_column_equals, column_equals
from .reader import RowReader
from .scanner import AllMatchPredicate, ChunkedScanner, FirstMatchPredicate
from .state import ScanState, ScanStateMachine

__all__ = [
    "AllMatchPredicate",
    "ChunkedScanner",
    "FirstMatchPredicate",
    "RowReader",
    "ScanState",
    "ScanStateMachine",
    "all_column_equals",
    "column_equals",
    "format_row",
]
