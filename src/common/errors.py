"""Shared error codes and exceptions for the scanning backend."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    CONFIG_ERROR = "CONFIG_ERROR"
    IO_ERROR = "IO_ERROR"
    STATE_ERROR = "STATE_ERROR"
    COLUMN_MISMATCH = "COLUMN_MISMATCH"
    READ_ERROR = "READ_ERROR"


class BackendError(RuntimeError):
    """Exception carrying a structured error code for CLI/GUI callers."""

    def __init__(self, code: ErrorCode, message: str, *, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.code = code
        self.context = context or {}

    def __str__(self) -> str:  # pragma: no cover - formatting sugar
        base = super().__str__()
        return f"[{self.code.value}] {base}" if base else self.code.value


class ColumnMismatchError(BackendError):
    """A record's field count differs from the shape set by the first record."""

    def __init__(self, row_number: int, expected: int, actual: int) -> None:
        super().__init__(
            ErrorCode.COLUMN_MISMATCH,
            f"Columns at row {row_number} don't match columns at row 0 "
            f"(expected {expected}, got {actual})",
            context={"row": row_number, "expected": expected, "actual": actual},
        )
        self.row_number = row_number
        self.expected = expected
        self.actual = actual


class ReadError(BackendError):
    """Malformed record or I/O failure while reading a given row."""

    def __init__(self, row_number: int, reason: str) -> None:
        super().__init__(
            ErrorCode.READ_ERROR,
            f"Failed to read row {row_number}: {reason}",
            context={"row": row_number, "reason": reason},
        )
        self.row_number = row_number
        self.reason = reason
