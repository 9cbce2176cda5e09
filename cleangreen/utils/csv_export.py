"""CSV export for admin lists"""

import csv
import json
import logging
from datetime import datetime
from io import StringIO
from typing import Any, Callable, Iterable, Optional, Sequence

from fastapi.responses import StreamingResponse

logger = logging.getLogger(__name__)

# (record key, column header, optional formatter)
Column = tuple[str, str, Optional[Callable[[Any], str]]]


def format_cell(value: Any) -> str:
    """None becomes an empty cell, nested values are JSON-encoded"""
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def header_for(key: str) -> str:
    """createdAt -> Created At"""
    words = []
    current = ""
    for ch in key:
        if ch.isupper() and current:
            words.append(current)
            current = ch
        elif ch == "_":
            if current:
                words.append(current)
            current = ""
        else:
            current += ch
    if current:
        words.append(current)
    return " ".join(w[:1].upper() + w[1:] for w in words)


def columns_for(rows: Sequence[dict]) -> list[Column]:
    """Columns derived from the keys of the rows, in first-seen order"""
    keys: list[str] = []
    for row in rows:
        for key in row:
            if key not in keys:
                keys.append(key)
    return [(key, header_for(key), None) for key in keys]


def to_csv(rows: Iterable[Any], columns: Optional[list[Column]] = None) -> str:
    """
    Render records as CSV text.

    Fields containing a comma, quote or newline are quoted with embedded
    quotes doubled. Records may be dicts or pydantic models.
    """
    records = [row.model_dump() if hasattr(row, "model_dump") else dict(row) for row in rows]
    if columns is None:
        columns = columns_for(records)

    output = StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow([header for _, header, _ in columns])

    for record in records:
        values = []
        for key, _, formatter in columns:
            value = record.get(key)
            values.append(formatter(value) if formatter else format_cell(value))
        writer.writerow(values)

    return output.getvalue()


def csv_response(rows: Iterable[Any], name: str, columns: Optional[list[Column]] = None) -> StreamingResponse:
    """Attachment response for a list export, e.g. bookings_export_20250610_093000.csv"""
    content = to_csv(rows, columns)
    filename = f"{name}_export_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"

    logger.info(f"✅ CSV export successful: {filename}")

    return StreamingResponse(
        iter([content]),
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename={filename}",
            "Cache-Control": "no-cache",
        },
    )
