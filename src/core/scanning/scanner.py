"""Chunked scanning of large delimited files with bounded memory usage."""
from __future__ import annotations

import time
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence

from common.errors import BackendError, ErrorCode
from common.models import ReadAllResult, Record, ScanConfig, ScanProgress, ScanSummary
from common.progress import ProgressLogger
from .reader import RowReader
from .state import ScanState, ScanStateMachine

FirstMatchPredicate = Callable[[Sequence[Record]], Optional[Record]]
AllMatchPredicate = Callable[[Sequence[Record]], Sequence[Record]]
ProgressCallback = Optional[Callable[[ScanProgress], None]]
ChunkHandler = Callable[[List[Record], ScanSummary], bool]

READ_ALL_CHUNK_SIZE = 1_000


class ChunkedScanner:
    """Feeds a file to a search function one bounded chunk at a time.

    Only one chunk is held in memory at once. The chunk list handed to a
    search function is cleared and reused as soon as the function returns, so
    functions must copy out anything they want to keep (returning a record is
    enough; the scanner copies returned matches).
    """

    def __init__(
        self,
        path: Path,
        config: Optional[ScanConfig] = None,
        *,
        progress_log: Optional[Path] = None,
        progress_callback: ProgressCallback = None,
    ) -> None:
        self.path = Path(path)
        self.config = config or ScanConfig()
        self.progress_logger = ProgressLogger(progress_log) if progress_log else None
        self.progress_callback = progress_callback
        self.header_columns: Optional[Record] = None
        self.last_summary: Optional[ScanSummary] = None
        self.state_machine: Optional[ScanStateMachine] = None

    # Public operations ------------------------------------------------

    def search_first(
        self,
        chunk_size: int,
        predicate: FirstMatchPredicate,
        has_header: bool = False,
    ) -> Optional[Record]:
        """Return the first record the predicate picks, or ``None``.

        Scanning stops at the first chunk for which ``predicate`` returns a
        record; no further chunks are read from disk.
        """

        found: List[Record] = []

        def handle(chunk: List[Record], summary: ScanSummary) -> bool:
            match = predicate(chunk)
            if match is None:
                return False
            found.append(list(match))
            summary.matches = 1
            return True

        self._run("first", chunk_size, has_header, handle)
        return found[0] if found else None

    def search_all(
        self,
        chunk_size: int,
        predicate: AllMatchPredicate,
        *,
        max_rows: Optional[int] = None,
        has_header: bool = False,
    ) -> List[Record]:
        """Collect every record the predicate returns, in file order.

        ``predicate`` must return a sequence of records (possibly empty) for
        every chunk. An empty result means no matches. When ``max_rows`` is
        given the scan stops once that many matches were collected.
        """

        if max_rows is not None and max_rows <= 0:
            raise BackendError(ErrorCode.CONFIG_ERROR, "max_rows must be greater than zero")
        matches: List[Record] = []

        def handle(chunk: List[Record], summary: ScanSummary) -> bool:
            result = predicate(chunk)
            if result is None or isinstance(result, (str, bytes)):
                raise TypeError(
                    f"all-match predicates must return a sequence of records, got {type(result).__name__}"
                )
            for row in result:
                if isinstance(row, (str, bytes)) or not isinstance(row, Sequence):
                    raise TypeError(
                        f"all-match predicates must return records, got item of type {type(row).__name__}"
                    )
                matches.append(list(row))
                if max_rows is not None and len(matches) >= max_rows:
                    summary.matches = len(matches)
                    return True
            summary.matches = len(matches)
            return False

        self._run("all", chunk_size, has_header, handle)
        return matches

    def read_all(self, has_header: bool = False) -> ReadAllResult:
        """Read every data record; an empty file yields an empty result."""

        records: List[Record] = []

        def handle(chunk: List[Record], summary: ScanSummary) -> bool:
            records.extend(chunk)
            summary.matches = len(records)
            return False

        self._run("read", READ_ALL_CHUNK_SIZE, has_header, handle)
        return ReadAllResult(records=records, header=self.header_columns)

    def iter_chunks(
        self,
        chunk_size: int,
        *,
        has_header: bool = False,
        machine: Optional[ScanStateMachine] = None,
    ) -> Iterator[List[Record]]:
        """Yield the shared chunk buffer after each fill of up to ``chunk_size`` records.

        The same list object is yielded every time and cleared before the next
        fill. Closing the generator early closes the file without reading on.
        """

        if chunk_size < 1:
            raise BackendError(ErrorCode.CONFIG_ERROR, "chunk_size must be greater than zero")
        machine = machine or ScanStateMachine()
        self.header_columns = None
        try:
            with RowReader(self.path, self.config) as reader:
                first = reader.read_first(header=has_header)
                if first is None:
                    machine.transition(ScanState.EMPTY, detail="file has no records")
                    return
                chunk: List[Record] = []
                if has_header:
                    machine.transition(ScanState.HEADER)
                    self.header_columns = first
                else:
                    chunk.append(first)
                machine.transition(ScanState.FILLING)
                while True:
                    while len(chunk) < chunk_size:
                        record = reader.read_next()
                        if record is None:
                            break
                        chunk.append(record)
                    if not chunk:
                        final = ScanState.EMPTY if reader.rows_read == 0 else ScanState.EXHAUSTED
                        machine.transition(final, detail=f"rows={reader.rows_read}")
                        return
                    short = len(chunk) < chunk_size
                    machine.transition(ScanState.INVOKING, detail=f"rows={len(chunk)}")
                    yield chunk
                    chunk.clear()
                    if machine.finished:
                        return
                    if short:
                        machine.transition(ScanState.EXHAUSTED, detail=f"rows={reader.rows_read}")
                        return
                    machine.transition(ScanState.FILLING)
        except BackendError as exc:
            machine.mark_failed(str(exc))
            raise

    # Internal helpers -------------------------------------------------

    def _run(self, mode: str, chunk_size: int, has_header: bool, handle: ChunkHandler) -> ScanSummary:
        machine = ScanStateMachine()
        summary = ScanSummary(file_path=self.path, mode=mode, state=machine.state.value)
        self.state_machine = machine
        self.last_summary = summary
        start = time.perf_counter()
        chunks = self.iter_chunks(chunk_size, has_header=has_header, machine=machine)
        try:
            for chunk in chunks:
                summary.chunks_scanned += 1
                summary.rows_scanned += len(chunk)
                stop = handle(chunk, summary)
                self._emit_progress(summary, len(chunk), start)
                if stop:
                    machine.transition(ScanState.FOUND, detail=f"matches={summary.matches}")
                    break
        except Exception as exc:
            machine.mark_failed(str(exc))
            summary.error = str(exc)
            raise
        finally:
            chunks.close()
            summary.state = machine.state.value
            summary.duration_seconds = time.perf_counter() - start
            if self.progress_logger:
                self.progress_logger.emit_summary(summary)
        return summary

    def _emit_progress(self, summary: ScanSummary, chunk_rows: int, start_time: float) -> None:
        if not self.progress_logger and not self.progress_callback:
            return
        elapsed = time.perf_counter() - start_time
        progress = ScanProgress(
            file_path=self.path,
            chunk_index=summary.chunks_scanned - 1,
            chunk_rows=chunk_rows,
            rows_scanned=summary.rows_scanned,
            matches=summary.matches,
            current_phase=summary.mode,
            rows_per_second=summary.rows_scanned / elapsed if elapsed > 0 else None,
        )
        if self.progress_logger:
            self.progress_logger.emit(progress)
        if self.progress_callback:
            self.progress_callback(progress)
