"""Record-at-a-time reader with terminator stripping and shape validation."""
from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterator, List, Optional, TextIO

from common.errors import BackendError, ColumnMismatchError, ErrorCode, ReadError
from common.models import Record, ScanConfig


class RowReader:
    """Reads validated records from a delimited file, one at a time.

    The reader owns its file handle for the lifetime of one scan and is meant
    to be used as a context manager so the handle is released on both the
    success and the error path::

        with RowReader(path, config) as reader:
            header = reader.read_first(header=True)
            for record in reader:
                ...

    ``read_first``/``read_next`` return ``None`` at end of file. Row numbers in
    errors are 1-based and count data rows only; a header row is row 0.
    Blank physical lines carry no fields and are skipped. Text after a closing
    enclosure is kept in the field, so ``1,"a,b";`` with terminator ``;``
    reads as ``["1", "a,b"]``.
    """

    def __init__(self, path: Path, config: Optional[ScanConfig] = None) -> None:
        self.path = Path(path)
        self.config = config or ScanConfig()
        self.shape: Optional[int] = None
        self.rows_read = 0
        self._handle: Optional[TextIO] = None
        self._rows: Optional[Iterator[List[str]]] = None
        self._pending_row = 0

    # Lifecycle --------------------------------------------------------

    def open(self) -> "RowReader":
        if self._handle is not None:
            return self
        try:
            self._handle = self.path.open(
                "r",
                encoding=self.config.encoding,
                errors=self.config.errors,
                newline="",
            )
        except OSError as exc:
            raise BackendError(
                ErrorCode.IO_ERROR,
                f"Cannot open '{self.path}': {exc.strerror or exc}",
                context={"path": str(self.path)},
            ) from exc
        self._rows = csv.reader(
            self._bounded_lines(self._handle),
            delimiter=self.config.separator,
            quotechar=self.config.enclosure,
            escapechar=self.config.escape or None,
            doublequote=True,
            strict=False,
        )
        return self

    def close(self) -> None:
        if self._handle is None:
            return
        self._handle.close()
        self._handle = None
        self._rows = None

    @property
    def closed(self) -> bool:
        return self._handle is None

    def __enter__(self) -> "RowReader":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # Reading ----------------------------------------------------------

    def read_first(self, *, header: bool = False) -> Optional[Record]:
        """Read the first record and establish the file's shape.

        With ``header=True`` the record is treated as row 0 and not counted in
        ``rows_read``.
        """

        if self.shape is not None:
            raise BackendError(ErrorCode.STATE_ERROR, "read_first() may only be called once per reader")
        row_number = 0 if header else 1
        fields = self._next_fields(row_number)
        if fields is None:
            return None
        self.shape = len(fields)
        record = self._strip_terminator(fields, row_number)
        if not header:
            self.rows_read = 1
        return record

    def read_next(self) -> Optional[Record]:
        if self.shape is None:
            raise BackendError(ErrorCode.STATE_ERROR, "read_first() must be called before read_next()")
        row_number = self.rows_read + 1
        fields = self._next_fields(row_number)
        if fields is None:
            return None
        if len(fields) != self.shape:
            raise ColumnMismatchError(row_number, self.shape, len(fields))
        record = self._strip_terminator(fields, row_number)
        self.rows_read = row_number
        return record

    def __iter__(self) -> Iterator[Record]:
        if self.shape is None:
            first = self.read_first()
            if first is None:
                return
            yield first
        while True:
            record = self.read_next()
            if record is None:
                return
            yield record

    # Internal helpers -------------------------------------------------

    def _next_fields(self, row_number: int) -> Optional[List[str]]:
        if self._rows is None:
            raise BackendError(ErrorCode.STATE_ERROR, f"Reader for '{self.path}' is not open")
        self._pending_row = row_number
        try:
            for fields in self._rows:
                if fields:
                    return fields
        except csv.Error as exc:
            raise ReadError(row_number, f"malformed record ({exc})") from exc
        except UnicodeDecodeError as exc:
            raise ReadError(row_number, f"cannot decode as {self.config.encoding}: {exc.reason}") from exc
        except OSError as exc:
            raise ReadError(row_number, str(exc)) from exc
        return None

    def _bounded_lines(self, handle: TextIO) -> Iterator[str]:
        limit = self.config.max_line_length
        for line in handle:
            if limit is not None and len(line.rstrip("\r\n")) > limit:
                raise ReadError(self._pending_row, f"line longer than max_line_length={limit}")
            yield line

    def _strip_terminator(self, fields: List[str], row_number: int) -> Record:
        terminator = self.config.terminator
        if not terminator:
            return fields
        last = fields[-1]
        # suffix removal by length; a field shorter than the terminator cannot carry it
        if len(last) < len(terminator):
            raise ReadError(
                row_number,
                f"last field {last!r} is shorter than terminator {terminator!r}",
            )
        fields[-1] = last[: len(last) - len(terminator)]
        return fields
