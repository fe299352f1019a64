"""Search workflow shared by the CLI and the DearPyGui front-end."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from common.config import error_mode_from_policy
from common.models import RuntimeConfig, ScanConfig, ScanSummary
from core.scanning import ChunkedScanner, all_column_equals, column_equals, format_row
from core.scanning.scanner import ProgressCallback

NOT_FOUND_MESSAGE = "Row is not found"
NO_MATCHES_MESSAGE = "No matching rows"


@dataclass(slots=True)
class SearchRequest:
    path: Path
    column: int
    key: str
    find_all: bool = False
    has_header: bool = False
    chunk_size: Optional[int] = None
    max_rows: Optional[int] = None


@dataclass(slots=True)
class SearchReport:
    """Formatted outcome of one search, ready for printing."""

    found: bool
    lines: List[str] = field(default_factory=list)
    header: Optional[str] = None
    message: str = ""
    summary: Optional[ScanSummary] = None


def resolve_scan_config(runtime: RuntimeConfig) -> ScanConfig:
    return runtime.scan_config(errors=error_mode_from_policy(runtime.global_settings.error_policy))


def run_search(
    request: SearchRequest,
    runtime: RuntimeConfig,
    *,
    progress_log: Optional[Path] = None,
    progress_callback: ProgressCallback = None,
) -> SearchReport:
    """Search one column for a key and format whatever comes back.

    Scan errors (``BackendError``) propagate to the caller.
    """

    config = resolve_scan_config(runtime)
    chunk_size = request.chunk_size or runtime.profile.chunk_size
    scanner = ChunkedScanner(
        request.path,
        config,
        progress_log=progress_log,
        progress_callback=progress_callback,
    )

    if request.find_all:
        rows = scanner.search_all(
            chunk_size,
            all_column_equals(request.column, request.key),
            max_rows=request.max_rows,
            has_header=request.has_header,
        )
        message = f"{len(rows)} matching row(s)" if rows else NO_MATCHES_MESSAGE
    else:
        row = scanner.search_first(
            chunk_size,
            column_equals(request.column, request.key),
            has_header=request.has_header,
        )
        rows = [row] if row is not None else []
        message = "" if rows else NOT_FOUND_MESSAGE

    header = scanner.header_columns
    return SearchReport(
        found=bool(rows),
        lines=[format_row(row, config) for row in rows],
        header=format_row(header, config) if header is not None else None,
        message=message,
        summary=scanner.last_summary,
    )
