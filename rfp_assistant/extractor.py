"""
Record Extractor Module

Turns the sheets of an RFP workbook into ExtractedRecord objects, one per
non-empty row, grouped by the row's Category column. Cells are rendered the
way the spreadsheet displays them, so percentages, currency and thousands
separators survive into the embedded text.
"""

import io
import logging
import math
import re
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional, Tuple

from openpyxl import load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from rfp_assistant.models import ExtractedRecord

logger = logging.getLogger(__name__)

CATEGORY_FIELD = "Category"
UNCATEGORIZED = "uncategorized"

CURRENCY_SYMBOLS = "$€£¥"

_BRACKETED = re.compile(r"\[[^\]]*\]")
_QUOTED = re.compile(r'"[^"]*"')
_PADDING = re.compile(r"[_*\\].")
_CURRENCY_TAG = re.compile(r"\[\$([^\]\-]*)")
_DECIMALS = re.compile(r"\.([0#]+)")


def format_number(value: float, number_format: Optional[str]) -> Optional[str]:
    """
    Render a number with its cell's number format.

    Covers fixed decimals, percentages, thousands separators, currency symbols
    and scientific notation, using the positive section of the format.

    Returns:
        Display text, or None when the format is General or not understood
    """
    if not number_format or number_format == "General":
        return None

    section = number_format.split(";")[0]
    tag = _CURRENCY_TAG.search(section)
    symbol = tag.group(1) if tag else ""

    pattern = _PADDING.sub("", _QUOTED.sub("", _BRACKETED.sub("", section)))
    if "?" in pattern or ("0" not in pattern and "#" not in pattern):
        return None
    if not symbol:
        literals = _BRACKETED.sub("", section)
        symbol = next((char for char in literals if char in CURRENCY_SYMBOLS), "")

    match = _DECIMALS.search(pattern)
    decimals = len(match.group(1)) if match else 0
    percent = "%" in pattern
    number = value * 100 if percent else value
    sign = "-" if number < 0 else ""

    if "E+" in pattern.upper():
        digits = f"{abs(number):.{decimals}E}"
    elif "," in pattern.split(".")[0]:
        digits = f"{abs(number):,.{decimals}f}"
    else:
        digits = f"{abs(number):.{decimals}f}"

    return f"{sign}{symbol}{digits}{'%' if percent else ''}"


def render_cell(value: Any, number_format: Optional[str] = None) -> Optional[str]:
    """
    Render a cell value as display text.

    Returns:
        Trimmed text, or None for an empty cell
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, (int, float)):
        formatted = format_number(value, number_format)
        if formatted is not None:
            return formatted
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
    return str(value).strip()


def read_headers(header_row: List[Optional[str]]) -> List[str]:
    """Header names by column position; empty headers become ""."""
    return [text or "" for text in header_row]


def row_to_fields(headers: List[str], row: List[Optional[str]]) -> Dict[str, str]:
    """Map header -> cell text for non-empty cells under a non-empty header."""
    fields = {}
    for header, text in zip(headers, row):
        if not header or text is None:
            continue
        fields[header] = text
    return fields


def render_text(fields: Dict[str, str]) -> str:
    return "\n".join(
        f"{key}: {value}" for key, value in fields.items()
        if isinstance(value, str) and value
    )


def read_rows(sheet: Worksheet) -> List[List[Optional[str]]]:
    """Rendered text of every row, cell by cell."""
    return [
        [render_cell(cell.value, cell.number_format) for cell in row]
        for row in sheet.iter_rows()
    ]


def extract_sheet(sheet_name: str, rows: List[List[Optional[str]]]) -> List[ExtractedRecord]:
    """
    Extract the records of a single worksheet.

    Args:
        sheet_name: Worksheet name
        rows: Rendered cell text, header row first

    Returns:
        Records grouped by category in first-appearance order
    """
    if not rows:
        return []

    headers = read_headers(rows[0])

    groups: Dict[str, List[Dict[str, str]]] = {}
    for row in rows[1:]:
        fields = row_to_fields(headers, row)
        if not fields:
            continue
        category = fields.get(CATEGORY_FIELD) or UNCATEGORIZED
        groups.setdefault(category, []).append(fields)

    records = []
    for category, items in groups.items():
        for fields in items:
            text = render_text(fields)
            if not text.strip():
                continue
            records.append(ExtractedRecord(
                category=category,
                sheet_name=sheet_name,
                text=text,
                original_data=fields,
            ))
    return records


def extract_records(buffer: bytes) -> Tuple[List[ExtractedRecord], List[str]]:
    """
    Extract records from every sheet of an .xlsx workbook.

    Formula cells contribute their last computed value. Malformed rows are
    skipped; an unreadable workbook raises whatever the reader raises.

    Args:
        buffer: Raw .xlsx bytes

    Returns:
        (records in sheet order, sheet names in workbook order)
    """
    workbook = load_workbook(io.BytesIO(buffer), data_only=True)

    records: List[ExtractedRecord] = []
    for sheet in workbook.worksheets:
        sheet_records = extract_sheet(sheet.title, read_rows(sheet))
        logger.info("Processing worksheet: %s (%d records)", sheet.title, len(sheet_records))
        records.extend(sheet_records)

    return records, list(workbook.sheetnames)
