"""Data models shared across UI, scanning core, and configuration layers."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .errors import BackendError, ErrorCode

Record = List[str]


@dataclass(slots=True, frozen=True)
class ScanConfig:
    """Immutable description of how a delimited file is laid out on disk.

    ``terminator`` is an extra string every physical row carries after its last
    field (for example ``;`` in ``1,a;``). It is removed from the last field of
    each record before the record reaches application code, and appended back
    by the row formatter.

    ``escape`` is empty by default, so backslashes in plain fields are kept.
    A non-empty escape follows Python ``csv`` semantics: it applies inside and
    outside enclosures and is dropped from the field value.
    """

    separator: str = ","
    enclosure: str = '"'
    escape: str = ""
    terminator: str = ""
    max_line_length: Optional[int] = None
    encoding: str = "utf-8"
    errors: str = "strict"

    def __post_init__(self) -> None:
        _require_single_char(self.separator, "separator")
        _require_single_char(self.enclosure, "enclosure")
        if len(self.escape) > 1:
            raise BackendError(ErrorCode.CONFIG_ERROR, "escape must be empty or a single character")
        if self.separator == self.enclosure:
            raise BackendError(ErrorCode.CONFIG_ERROR, "separator and enclosure must differ")
        if self.separator in {"\r", "\n"} or self.enclosure in {"\r", "\n"}:
            raise BackendError(ErrorCode.CONFIG_ERROR, "separator and enclosure cannot be line breaks")
        if self.max_line_length is not None and self.max_line_length <= 0:
            raise BackendError(ErrorCode.CONFIG_ERROR, "max_line_length must be greater than zero")
        if not self.encoding:
            raise BackendError(ErrorCode.CONFIG_ERROR, "encoding must be non-empty")


def _require_single_char(value: str, field_name: str) -> None:
    if not isinstance(value, str) or len(value) != 1:
        raise BackendError(ErrorCode.CONFIG_ERROR, f"{field_name} must be exactly one character")


@dataclass(slots=True)
class GlobalSettings:
    """Settings shared by every profile in a config document."""

    encoding: str = "utf-8"
    error_policy: str = "fail-fast"


@dataclass(slots=True)
class ProfileSettings:
    """Named file layout plus the default chunk size used to scan it."""

    description: str
    separator: str = ","
    enclosure: str = '"'
    escape: str = ""
    terminator: str = ""
    chunk_size: int = 200
    max_line_length: Optional[int] = None


@dataclass(slots=True)
class RuntimeConfig:
    global_settings: GlobalSettings
    profile: ProfileSettings

    def scan_config(self, errors: str = "strict") -> ScanConfig:
        return ScanConfig(
            separator=self.profile.separator,
            enclosure=self.profile.enclosure,
            escape=self.profile.escape,
            terminator=self.profile.terminator,
            max_line_length=self.profile.max_line_length,
            encoding=self.global_settings.encoding,
            errors=errors,
        )


@dataclass(slots=True)
class ReadAllResult:
    """Every data record of a file plus its header row, if one was declared."""

    records: List[Record] = field(default_factory=list)
    header: Optional[Record] = None

    @property
    def empty(self) -> bool:
        return not self.records


@dataclass(slots=True)
class ScanProgress:
    """Progress tick emitted after each chunk is handed to a search function."""

    file_path: Path
    chunk_index: int
    chunk_rows: int
    rows_scanned: int
    matches: int
    current_phase: str = "search"
    rows_per_second: Optional[float] = None


@dataclass(slots=True)
class ScanSummary:
    """Outcome of the most recent scan run by a ``ChunkedScanner``."""

    file_path: Path
    mode: str
    state: str
    rows_scanned: int = 0
    chunks_scanned: int = 0
    matches: int = 0
    duration_seconds: float = 0.0
    error: Optional[str] = None

    @property
    def rows_per_second(self) -> float:
        return self.rows_scanned / self.duration_seconds if self.duration_seconds else 0.0
