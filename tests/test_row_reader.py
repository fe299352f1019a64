from __future__ import annotations

from pathlib import Path

import pytest

from common.errors import BackendError, ColumnMismatchError, ErrorCode, ReadError
from common.models import ScanConfig
from core.scanning import RowReader


def test_reader_strips_terminator_from_last_field(tmp_path: Path) -> None:
    path = _write(tmp_path, "1,a;\n2,b;\n3,c;\n")
    with RowReader(path, ScanConfig(terminator=";")) as reader:
        first = reader.read_first()
        rest = list(reader)
    assert first == ["1", "a"]
    assert rest == [["2", "b"], ["3", "c"]]
    assert reader.shape == 2
    assert reader.rows_read == 3


def test_empty_file_returns_end_of_file(tmp_path: Path) -> None:
    path = _write(tmp_path, "")
    with RowReader(path) as reader:
        assert reader.read_first() is None
        assert reader.shape is None


def test_second_row_with_fewer_fields_is_column_mismatch(tmp_path: Path) -> None:
    path = _write(tmp_path, "1,a\n2\n3,c\n")
    with RowReader(path) as reader:
        reader.read_first()
        with pytest.raises(ColumnMismatchError) as exc:
            reader.read_next()
    assert exc.value.row_number == 2
    assert exc.value.expected == 2
    assert exc.value.actual == 1
    assert exc.value.code == ErrorCode.COLUMN_MISMATCH


def test_header_row_is_row_zero(tmp_path: Path) -> None:
    path = _write(tmp_path, "id,name\n1\n")
    with RowReader(path) as reader:
        assert reader.read_first(header=True) == ["id", "name"]
        assert reader.rows_read == 0
        with pytest.raises(ColumnMismatchError) as exc:
            reader.read_next()
    assert exc.value.row_number == 1


def test_quoted_last_field_followed_by_terminator(tmp_path: Path) -> None:
    path = _write(tmp_path, '1,"a,b";\n2,c;\n3,"say ""hi""";\n')
    with RowReader(path, ScanConfig(terminator=";")) as reader:
        assert list(reader) == [["1", "a,b"], ["2", "c"], ["3", 'say "hi"']]


def test_backslashes_in_plain_fields_are_kept(tmp_path: Path) -> None:
    path = _write(tmp_path, '1,C:\\temp\\x\n2,"D:\\data\\"\n')
    with RowReader(path) as reader:
        assert list(reader) == [["1", "C:\\temp\\x"], ["2", "D:\\data\\"]]


def test_oversized_field_raises_read_error(tmp_path: Path) -> None:
    path = _write(tmp_path, "a,b\n1," + "x" * 200_000 + "\n")
    with RowReader(path) as reader:
        reader.read_first()
        with pytest.raises(ReadError) as exc:
            reader.read_next()
    assert exc.value.row_number == 2
    assert exc.value.code == ErrorCode.READ_ERROR


def test_undecodable_bytes_raise_read_error(tmp_path: Path) -> None:
    path = tmp_path / "latin.csv"
    path.write_bytes(b"x,y\n1,\xff\n")
    with pytest.raises(ReadError):
        with RowReader(path) as reader:
            list(reader)


def test_terminator_longer_than_field_is_read_error(tmp_path: Path) -> None:
    path = _write(tmp_path, "1,abc;;\n2,b\n")
    with RowReader(path, ScanConfig(terminator=";;")) as reader:
        assert reader.read_first() == ["1", "abc"]
        with pytest.raises(ReadError) as exc:
            reader.read_next()
    assert exc.value.row_number == 2
    assert "terminator" in str(exc.value)


def test_max_line_length_rejects_long_lines(tmp_path: Path) -> None:
    path = _write(tmp_path, "1,a\n22222,bbbbbb\n")
    with RowReader(path, ScanConfig(max_line_length=5)) as reader:
        reader.read_first()
        with pytest.raises(ReadError) as exc:
            reader.read_next()
    assert exc.value.row_number == 2


def test_reader_releases_handle_on_error(tmp_path: Path) -> None:
    path = _write(tmp_path, "1,a\n2,b,c\n")
    reader = RowReader(path)
    with pytest.raises(ColumnMismatchError):
        with reader:
            list(reader)
    assert reader.closed


def test_blank_lines_are_skipped(tmp_path: Path) -> None:
    path = _write(tmp_path, "1,a\n\n2,b\n\n")
    with RowReader(path) as reader:
        assert list(reader) == [["1", "a"], ["2", "b"]]
    assert reader.rows_read == 2


def test_enclosure_and_explicit_escape_are_honoured(tmp_path: Path) -> None:
    path = _write(tmp_path, '1,"a,b"\n2,"say ""hi"""\n3,c\\,d\n')
    with RowReader(path, ScanConfig(escape="\\")) as reader:
        records = list(reader)
    assert records == [["1", "a,b"], ["2", 'say "hi"'], ["3", "c,d"]]


def test_custom_separator_and_enclosure(tmp_path: Path) -> None:
    path = _write(tmp_path, "1|'x|y'|z#\n2|w|v#\n")
    config = ScanConfig(separator="|", enclosure="'", escape="", terminator="#")
    with RowReader(path, config) as reader:
        assert list(reader) == [["1", "x|y", "z"], ["2", "w", "v"]]


def test_read_next_before_read_first_is_state_error(tmp_path: Path) -> None:
    path = _write(tmp_path, "1,a\n")
    with RowReader(path) as reader:
        with pytest.raises(BackendError) as exc:
            reader.read_next()
    assert exc.value.code == ErrorCode.STATE_ERROR


def test_missing_file_is_io_error(tmp_path: Path) -> None:
    with pytest.raises(BackendError) as exc:
        RowReader(tmp_path / "missing.csv").open()
    assert exc.value.code == ErrorCode.IO_ERROR


def test_reading_twice_yields_identical_records(tmp_path: Path) -> None:
    path = _write(tmp_path, "1,a;\n2,b;\n3,c;\n")
    config = ScanConfig(terminator=";")
    with RowReader(path, config) as reader:
        first_pass = list(reader)
    with RowReader(path, config) as reader:
        second_pass = list(reader)
    assert first_pass == second_pass


def _write(tmp_path: Path, payload: str) -> Path:
    path = tmp_path / "rows.csv"
    path.write_text(payload, encoding="utf-8")
    return path
