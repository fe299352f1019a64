"""Display formatting for scanned records."""
from __future__ import annotations

from typing import Sequence

from common.models import ScanConfig


def format_row(record: Sequence[str], config: ScanConfig) -> str:
    """Render a record the way it looks on disk: separator-joined plus terminator.

    Quoting and escaping are not reapplied, so fields containing the
    separator, enclosure, or terminator do not survive re-parsing. This is a
    display helper, not a CSV writer.
    """

    return config.separator.join(record) + config.terminator
