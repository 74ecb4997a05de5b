"""
Report service for the work-item HTML report and its Teams rendering.

Renders a list of work items as a fixed 7-column HTML table, reads that
table back (BeautifulSoup), and turns the header/rows into an Adaptive
Card body.  Cells are mapped by column position, so changing the column
order in :data:`REPORT_COLUMNS` changes what the card shows.
"""

from __future__ import annotations

import html
import logging
import os
from datetime import datetime
from typing import Iterable, Optional

from bs4 import BeautifulSoup

from .errors import ReportError
from .models import ReportTable, WorkItem

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

REPORT_TITLE = "Azure DevOps Work Item Report"

REPORT_COLUMNS = [
    "Id",
    "Title",
    "State",
    "Assigned To",
    "Created Date",
    "Changed Date",
    "Tags",
]

UNASSIGNED = "Unassigned"
EMPTY_CELL = "-"
ADAPTIVE_CARD_SCHEMA = "http://adaptivecards.io/schemas/adaptive-card.json"
ADAPTIVE_CARD_VERSION = "1.4"


# ---------------------------------------------------------------------------
# HTML rendering
# ---------------------------------------------------------------------------

def format_date(value: Optional[datetime]) -> str:
    """Locale-formatted date and time, or an empty string."""
    if value is None:
        return ""
    return value.strftime("%x %X")


def _row_cells(item: WorkItem) -> list[str]:
    return [
        str(item.id),
        item.title,
        item.state,
        item.assigned_to or UNASSIGNED,
        format_date(item.created_date),
        format_date(item.changed_date),
        item.tags,
    ]


def render_html(items: Iterable[WorkItem | dict]) -> str:
    """Render *items* as a standalone HTML document holding one table."""
    work_items = [i if isinstance(i, WorkItem) else WorkItem.model_validate(i) for i in items]

    header = "".join(f"<th>{html.escape(c)}</th>" for c in REPORT_COLUMNS)
    body_rows = []
    for item in work_items:
        cells = "".join(f"<td>{html.escape(c)}</td>" for c in _row_cells(item))
        body_rows.append(f"    <tr>{cells}</tr>")

    lines = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '  <meta charset="utf-8">',
        f"  <title>{REPORT_TITLE}</title>",
        "  <style>table{border-collapse:collapse}th,td{border:1px solid #ccc;padding:4px 8px}</style>",
        "</head>",
        "<body>",
        f"  <h2>{REPORT_TITLE}</h2>",
        "  <table>",
        f"    <tr>{header}</tr>",
        *body_rows,
        "  </table>",
        "</body>",
        "</html>",
    ]
    return "\n".join(lines) + "\n"


def save_report(html_text: str, output_path: str) -> str:
    """Write the rendered report, creating parent directories as needed."""
    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(html_text)
    logger.info("Saved HTML report to %s", output_path)
    return output_path


def load_report(path: str) -> str:
    """Read a previously saved report."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except OSError as e:
        raise ReportError(f"Failed to read report file {path}: {e}") from e


# ---------------------------------------------------------------------------
# HTML parsing
# ---------------------------------------------------------------------------

def parse_html_table(html_text: str) -> ReportTable:
    """
    Extract the header row and data rows of the (single) table in *html_text*.

    The first ``<tr>`` supplies the headers (``<th>`` cells, falling back to
    ``<td>``); each later row contributes its ``<td>`` cells.  All cell text
    is whitespace-trimmed.

    Raises:
        ReportError: the document contains no table.
    """
    soup = BeautifulSoup(html_text or "", "html.parser")
    table = soup.find("table")
    if table is None:
        raise ReportError("No table found in HTML report")

    rows = table.find_all("tr")
    if not rows:
        return ReportTable()

    first = rows[0]
    header_cells = first.find_all("th") or first.find_all("td")
    headers = [cell.get_text(strip=True) for cell in header_cells]
    data = [
        [cell.get_text(strip=True) for cell in row.find_all("td")]
        for row in rows[1:]
    ]
    return ReportTable(headers=headers, rows=data)


# ---------------------------------------------------------------------------
# Adaptive Card
# ---------------------------------------------------------------------------

def _column(text: str, bold: bool = False) -> dict:
    block = {"type": "TextBlock", "text": text or EMPTY_CELL, "wrap": True}
    if bold:
        block["weight"] = "Bolder"
    return {"type": "Column", "width": "stretch", "items": [block]}


def _column_set(cells: list[str], bold: bool = False) -> dict:
    return {"type": "ColumnSet", "columns": [_column(c, bold) for c in cells]}


def to_adaptive_card(
    headers: list[str],
    rows: list[list[str]],
    generated_at: Optional[datetime] = None,
) -> dict:
    """
    Build an Adaptive Card from a parsed report table.

    The body holds a title, a timestamp subtitle, then one ColumnSet per
    table row: the header row first (bold), then one per data row.
    """
    generated_at = generated_at or datetime.now()
    body = [
        {
            "type": "TextBlock",
            "text": REPORT_TITLE,
            "size": "Large",
            "weight": "Bolder",
            "wrap": True,
        },
        {
            "type": "TextBlock",
            "text": f"Generated on {generated_at.strftime('%x %X')}",
            "isSubtle": True,
            "spacing": "None",
            "wrap": True,
        },
        _column_set(headers, bold=True),
    ]
    body.extend(_column_set(row) for row in rows)

    return {
        "$schema": ADAPTIVE_CARD_SCHEMA,
        "type": "AdaptiveCard",
        "version": ADAPTIVE_CARD_VERSION,
        "body": body,
    }
