"""
=============================================================================
Task Item Store
=============================================================================

Durable, key-deduplicated table of every TaskItem collected across runs.

FILE FORMAT:
------------
A CSV table: a fixed header line with the 9 column names, then one row per
item in insertion order. Fields containing commas, quotes or newlines are
quoted RFC 4180 style.

MERGE RULES:
------------
- Identity is (app_id, task)
- Existing rows only get their ticket/status/more_details filled in when the
  stored value is empty and the incoming one is not
- Everything else on an existing row is left untouched
- The full table is rewritten on every merge (no append log)
=============================================================================
"""

import csv
import io
import logging
import os
import tempfile
import threading
from pathlib import Path

from task_planner.errors import StoreError
from task_planner.models import CSV_COLUMNS, FILLABLE_FIELDS, MergeResult, TaskItem

logger = logging.getLogger(__name__)


def to_csv_text(items: list[TaskItem]) -> str:
    """Render items as CSV text, header first."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    writer.writerows(item.to_row() for item in items)
    return buffer.getvalue().rstrip("\n")


def read_csv_text(text: str) -> list[TaskItem]:
    """Parse CSV text produced by to_csv_text. Short rows are skipped."""
    return _items_from_rows(csv.reader(io.StringIO(text, newline="")))


def _items_from_rows(reader) -> list[TaskItem]:
    rows = [row for row in reader if any(cell.strip() for cell in row)]
    if not rows:
        return []

    if tuple(cell.strip() for cell in rows[0]) == CSV_COLUMNS:
        rows = rows[1:]

    items: list[TaskItem] = []
    for row in rows:
        if len(row) < len(CSV_COLUMNS):
            logger.warning(f"[STORE] Skipping malformed row with {len(row)} columns")
            continue
        items.append(TaskItem.from_row(row))
    return items


class TaskItemStore:
    """
    CSV-backed store with idempotent merge-on-write.

    A store instance is the single writer for its file: load-merge-persist
    runs under a lock so concurrent workflow runs sharing the instance
    cannot lose each other's updates.
    """

    def __init__(self, path: Path | str):
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[TaskItem]:
        """Load all stored rows; an absent file is an empty table."""
        if not self._path.exists():
            return []
        # newline="" keeps quoted \r and \r\n inside fields intact
        try:
            with self._path.open(encoding="utf-8", newline="") as handle:
                return _items_from_rows(csv.reader(handle))
        except OSError as e:
            raise StoreError(f"Failed to read task table {self._path}: {e}") from e

    def write_rows(self, items: list[TaskItem]) -> None:
        """Replace the whole table with items (atomic rename)."""
        payload = to_csv_text(items) + "\n"
        directory = self._path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=directory
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
                    handle.write(payload)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StoreError(f"Failed to write task table {self._path}: {e}") from e

    def merge(self, items: list[TaskItem]) -> MergeResult:
        """
        Merge a batch of items into the durable table.

        Returns how many rows were appended and how many existing rows had
        at least one fillable field populated.
        """
        with self._lock:
            rows = self.load()
            index = {row.key: position for position, row in enumerate(rows)}
            added = 0
            updated = 0

            for item in items:
                position = index.get(item.key)

                if position is None:
                    index[item.key] = len(rows)
                    rows.append(item)
                    added += 1
                    continue

                existing = rows[position]
                fills = {
                    name: getattr(item, name)
                    for name in FILLABLE_FIELDS
                    if not getattr(existing, name) and getattr(item, name)
                }
                if fills:
                    rows[position] = existing.model_copy(update=fills)
                    updated += 1

            self.write_rows(rows)

        logger.info(
            f"[STORE] Merged {len(items)} items into {self._path}: "
            f"added={added}, updated={updated}, total={len(rows)}"
        )
        return MergeResult(added=added, updated=updated)
