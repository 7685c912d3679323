"""
=============================================================================
Row Extraction
=============================================================================

Two ways of turning a raw HTML document into TaskItems:

1. parse_rows - parses the CSV text returned by the extraction service
2. fallback_parse_html - regex over <tr>/<td> rows, no LLM involved

The fallback only recognizes rows with exactly the cell count expected for
the source, so header rows (<th>) and unrelated tables are ignored.
=============================================================================
"""

import csv
import html
import io
import logging
import re

from task_planner.errors import ExtractionError
from task_planner.models import CSV_COLUMNS, AgentKind, TaskItem

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^\s*```[\w-]*\s*$")
_ROW_RE = re.compile(r"<tr[^>]*>(.*?)</tr>", re.IGNORECASE | re.DOTALL)
_CELL_RE = re.compile(r"<td[^>]*>(.*?)</td>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[a-zA-Z/][^>]*>")
_HEADER_FIRST_CELLS = {CSV_COLUMNS[0].lower(), "appid", "app id"}

# Table layout per source: TaskItem field for each <td>, in order
FALLBACK_COLUMNS: dict[AgentKind, tuple[str, ...]] = {
    AgentKind.COMPLIANCE: (
        "task_type",
        "task_subtype",
        "task",
        "due_date",
        "parent_ticket",
    ),
    AgentKind.ISSUE: (
        "task_type",
        "task_subtype",
        "task",
        "due_date",
        "ticket",
        "status",
        "more_details",
    ),
    AgentKind.SCAN: (
        "task_type",
        "task_subtype",
        "task",
        "due_date",
        "ticket",
        "status",
        "more_details",
    ),
}


def _strip_code_fences(text: str) -> str:
    return "\n".join(line for line in text.splitlines() if not _FENCE_RE.match(line))


def parse_rows(text: str, app_id: str) -> list[TaskItem]:
    """
    Parse extraction-service output into TaskItems.

    Tolerates markdown code fences, blank lines, a leading header row and
    quoted fields. Rows shorter than 9 columns are padded; an empty first
    column falls back to app_id.

    Raises ExtractionError when no rows can be recovered.
    """
    if not text or not text.strip():
        raise ExtractionError("Extraction service returned no content")

    try:
        rows = list(csv.reader(io.StringIO(_strip_code_fences(text)), skipinitialspace=True))
    except csv.Error as e:
        raise ExtractionError(f"Unparseable CSV from extraction service: {e}") from e

    items: list[TaskItem] = []
    for row in rows:
        cells = [cell.strip() for cell in row]
        if not any(cells):
            continue
        if cells[0].lower() in _HEADER_FIRST_CELLS:
            continue

        item = TaskItem.from_row(cells)
        if not item.app_id:
            item = item.model_copy(update={"app_id": app_id})
        items.append(item)

    if not items:
        raise ExtractionError("Extraction service output contained no rows")

    return items


def _clean_cell(raw: str) -> str:
    return html.unescape(_TAG_RE.sub("", raw)).strip()


def fallback_parse_html(document: str, source: AgentKind, app_id: str) -> list[TaskItem]:
    """Deterministic HTML table extractor used when the extraction service fails."""
    columns = FALLBACK_COLUMNS[source]
    items: list[TaskItem] = []

    for row_match in _ROW_RE.finditer(document):
        cells = _CELL_RE.findall(row_match.group(1))
        if len(cells) != len(columns):
            continue
        values = dict(zip(columns, (_clean_cell(cell) for cell in cells)))
        items.append(TaskItem(app_id=app_id, **values))

    logger.debug(f"[EXTRACT] Fallback matched {len(items)} {source} rows")
    return items
