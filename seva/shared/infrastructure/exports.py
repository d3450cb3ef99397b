"""
CSV Export
==========

Serialises rows for spreadsheet download. Fields containing commas, quotes
or newlines are quoted and embedded quotes doubled (RFC 4180).
"""

import csv
import io
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple, set)):
        return ";".join(str(_cell(item)) for item in value)
    return value


def to_csv(columns: Sequence[str], rows: Iterable[Mapping[str, Any]]) -> str:
    """Render `rows` as CSV text with a header line of `columns`."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(columns)
    for row in rows:
        writer.writerow([_cell(row.get(column)) for column in columns])
    return buffer.getvalue()
