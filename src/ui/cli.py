"""CLI for searching and dumping large delimited files chunk by chunk."""
from __future__ import annotations

import argparse
import time
from pathlib import Path
from typing import Any, Dict, List

from common.config import DEFAULT_PROFILE, load_runtime_config
from common.errors import BackendError
from common.models import RuntimeConfig, ScanProgress
from common.progress import BenchmarkRecorder
from core.scanning import ChunkedScanner, format_row
from ui.search_backend import SearchRequest, resolve_scan_config, run_search


def existing_file(value: str) -> Path:
    path = Path(value)
    if not path.is_file():
        raise argparse.ArgumentTypeError(f"Couldn't find path {value}")
    return path


def non_negative_int(value: str) -> int:
    if not value.isdigit():
        raise argparse.ArgumentTypeError(f"The column index must be a non-negative integer, got '{value}'")
    return int(value)


def positive_int(value: str) -> int:
    if not value.isdigit() or int(value) == 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got '{value}'")
    return int(value)


def render_progress(progress: ScanProgress) -> None:
    print(
        f"[{progress.current_phase}] {progress.file_path.name} chunk={progress.chunk_index} "
        f"rows={progress.rows_scanned} matches={progress.matches}"
    )


def command_search(args: argparse.Namespace) -> int:
    runtime = load_runtime(args)
    request = SearchRequest(
        path=args.path,
        column=args.column,
        key=args.key,
        find_all=args.all,
        has_header=args.header,
        chunk_size=args.chunk_size,
        max_rows=args.max_rows,
    )
    report = run_search(
        request,
        runtime,
        progress_log=Path(args.progress_log) if args.progress_log else None,
        progress_callback=render_progress if args.show_progress else None,
    )
    for line in report.lines:
        print(line)
    if report.message:
        print(report.message)
    return 0


def command_read(args: argparse.Namespace) -> int:
    runtime = load_runtime(args)
    config = resolve_scan_config(runtime)
    scanner = ChunkedScanner(args.path, config)
    result = scanner.read_all(has_header=args.header)
    if result.header is not None:
        print(format_row(result.header, config))
    if result.empty:
        print("[read] file has no data rows")
        return 0
    for record in result.records:
        print(format_row(record, config))
    return 0


def command_benchmark(args: argparse.Namespace) -> int:
    runtime = load_runtime(args)
    config = resolve_scan_config(runtime)
    chunk_size = args.chunk_size or runtime.profile.chunk_size
    scanner = ChunkedScanner(args.path, config)
    recorder = BenchmarkRecorder(Path(args.log))

    start = time.perf_counter()
    scanner.search_all(chunk_size, lambda chunk: [], has_header=args.header)
    duration = time.perf_counter() - start
    summary = scanner.last_summary
    rows = summary.rows_scanned if summary else 0
    throughput = rows / duration if duration else 0.0
    recorder.record(
        dataset=str(args.path),
        metrics={
            "seconds": duration,
            "rows": rows,
            "chunks": summary.chunks_scanned if summary else 0,
            "chunk_size": chunk_size,
            "rows_per_second": throughput,
        },
    )
    print(f"Benchmark complete: {rows} row(s) in {duration:.2f}s, throughput {throughput:,.0f} rows/s")
    return 0


def load_runtime(args: argparse.Namespace) -> RuntimeConfig:
    return load_runtime_config(
        profile=args.profile,
        config_path=Path(args.config) if args.config else None,
        overrides={"profile": collect_profile_overrides(args)},
    )


def collect_profile_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for name in ("separator", "enclosure", "escape", "terminator", "max_line_length"):
        value = getattr(args, name, None)
        if value is not None:
            overrides[name] = value
    return overrides


def add_scan_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", type=existing_file, help="Path of the delimited file")
    parser.add_argument(
        "--header",
        action="store_true",
        help="Treat the first row as header columns instead of data",
    )
    parser.add_argument(
        "--profile",
        default=DEFAULT_PROFILE,
        help="Configuration profile name (default: %(default)s)",
    )
    parser.add_argument("--config", help="Path to a config JSON (default: config/defaults.json)")
    parser.add_argument("--separator", help="Field separator (one character)")
    parser.add_argument("--enclosure", help="Field enclosure (one character)")
    parser.add_argument("--escape", help="Escape character, or '' to disable escaping")
    parser.add_argument("--terminator", help="Extra string every row carries after its last field")
    parser.add_argument(
        "--max-line-length",
        type=positive_int,
        help="Reject physical lines longer than this many characters",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="csvscan",
        description="Search large CSV files column-wise without loading them into memory",
    )
    subparsers = parser.add_subparsers(dest="command")

    search = subparsers.add_parser("search", help="Find rows whose column equals a key")
    add_scan_arguments(search)
    search.add_argument("column", type=non_negative_int, help="Index of the column to search")
    search.add_argument("key", help="Value to search for")
    search.add_argument("--all", action="store_true", help="Return every matching row, not only the first")
    search.add_argument("--max-rows", type=positive_int, help="Stop after this many matches (requires --all)")
    search.add_argument("--chunk-size", type=positive_int, help="Rows per chunk (default: profile chunk_size)")
    search.add_argument("--progress-log", help="Append JSONL progress events to this file")
    search.add_argument("--show-progress", action="store_true", help="Print a line after every chunk")
    search.set_defaults(func=command_search)

    read = subparsers.add_parser("read", help="Print every row of a file")
    add_scan_arguments(read)
    read.set_defaults(func=command_read)

    benchmark = subparsers.add_parser("benchmark", help="Measure full-scan throughput")
    add_scan_arguments(benchmark)
    benchmark.add_argument("--chunk-size", type=positive_int, help="Rows per chunk (default: profile chunk_size)")
    benchmark.add_argument(
        "--log",
        default="artifacts/benchmarks.jsonl",
        help="JSONL file collecting benchmark runs (default: %(default)s)",
    )
    benchmark.set_defaults(func=command_benchmark)

    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 2
    if args.command == "search" and args.max_rows is not None and not args.all:
        parser.error("--max-rows only applies together with --all")
    try:
        return args.func(args)
    except BackendError as exc:
        print(f"Error: {exc}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
