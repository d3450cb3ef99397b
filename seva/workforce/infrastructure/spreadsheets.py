"""
Spreadsheet Reader
==================

Reads uploaded staff rosters (.csv or .xlsx) into (headers, rows) where each
row is a dict keyed by header. Blank lines are skipped.
"""

import csv
import io
from datetime import date, datetime
from typing import Any, Dict, List, Tuple

import openpyxl

from seva.core.exceptions import ValidationException

Rows = List[Dict[str, str]]


def _cell_text(value: Any) -> str:
    """Spreadsheet cell -> text; whole-number floats lose their '.0' (phone numbers)."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value).strip()


def _to_dicts(raw_rows: List[List[Any]]) -> Tuple[List[str], Rows]:
    rows = [[_cell_text(c) for c in row] for row in raw_rows]
    rows = [row for row in rows if any(row)]
    if len(rows) < 2:
        raise ValidationException("File must have at least a header row and one data row")

    headers = [h.strip().strip('"') for h in rows[0]]
    data: Rows = []
    for row in rows[1:]:
        padded = row + [""] * (len(headers) - len(row))
        data.append({header: padded[i] for i, header in enumerate(headers) if header})
    return [h for h in headers if h], data


def read_csv(content: bytes) -> Tuple[List[str], Rows]:
    text = content.decode("utf-8-sig", errors="replace")
    return _to_dicts(list(csv.reader(io.StringIO(text))))


def read_xlsx(content: bytes) -> Tuple[List[str], Rows]:
    """First worksheet of an Excel workbook."""
    try:
        wb = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except Exception as e:
        raise ValidationException("Could not read the Excel file", {"file": str(e)}) from e
    try:
        ws = wb.active
        raw_rows = [list(row) for row in ws.iter_rows(values_only=True)] if ws else []
    finally:
        wb.close()
    return _to_dicts(raw_rows)


def read_spreadsheet(file_name: str, content: bytes) -> Tuple[List[str], Rows]:
    if file_name.lower().endswith(".xlsx"):
        return read_xlsx(content)
    return read_csv(content)
