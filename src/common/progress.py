"""Structured progress logging utilities."""
from __future__ import annotations

import json
import time
from dataclasses import asdict
from pathlib import Path
from typing import Optional

from .models import ScanProgress, ScanSummary


class ProgressLogger:
    """Writes per-chunk scan progress and final summaries to JSONL."""

    def __init__(self, path: Optional[Path]) -> None:
        self.path = path
        if path:
            path.parent.mkdir(parents=True, exist_ok=True)

    def emit(self, progress: ScanProgress) -> None:
        if not self.path:
            return
        payload = asdict(progress)
        payload["file_path"] = str(progress.file_path)
        self._append({"event": "progress", **payload})

    def emit_summary(self, summary: ScanSummary) -> None:
        if not self.path:
            return
        payload = asdict(summary)
        payload["file_path"] = str(summary.file_path)
        payload["rows_per_second"] = summary.rows_per_second
        self._append({"event": "summary", **payload})

    def _append(self, payload: dict) -> None:
        payload["timestamp"] = time.time()
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(payload))
            handle.write("\n")


class BenchmarkRecorder:
    """Stores throughput measurements for later analysis."""

    def __init__(self, path: Path) -> None:
        self.path = path
        path.parent.mkdir(parents=True, exist_ok=True)

    def record(self, dataset: str, metrics: dict) -> None:
        payload = {"dataset": dataset, **metrics, "timestamp": time.time()}
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(payload))
            handle.write("\n")
