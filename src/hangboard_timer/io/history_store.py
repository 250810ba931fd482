"""
JSONL-based history storage for hangboard sessions.

Handles reading, writing, and managing the session history file.
"""

import dataclasses
import json
import logging
from pathlib import Path
from typing import Any, Iterable

from ..core.engine.config_loader import get_user_dir
from ..core.models import SessionRecord
from ..core.record_builder import new_record_id
from .serializers import (
    ValidationError,
    dict_to_record,
    record_to_dict,
    record_to_json_line,
)

logger = logging.getLogger(__name__)

STORE_VERSION = 1


class HistoryStore:
    """
    Manages session history stored in JSONL format.

    The history file contains one JSON object per line:
    - First line: store metadata with type="meta" and the store version
    - Subsequent lines: session records

    Records are keyed by id.  get_all() returns them newest-first.
    """

    def __init__(self, history_path: str | Path):
        """
        Initialize the history store.

        Args:
            history_path: Path to the JSONL history file
        """
        self.history_path = Path(history_path)

    def exists(self) -> bool:
        """Check if the history file exists."""
        return self.history_path.exists()

    def init(self) -> None:
        """
        Initialize empty history file if it doesn't exist.

        Creates parent directories if needed.
        """
        self.history_path.parent.mkdir(parents=True, exist_ok=True)

        if not self.history_path.exists():
            self._write_records([])

    def _load(self) -> list[SessionRecord]:
        """Load records in file order; a missing file is an empty history."""
        if not self.history_path.exists():
            return []

        records: list[SessionRecord] = []

        with open(self.history_path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue

                try:
                    data = json.loads(line)

                    if isinstance(data, dict) and data.get("type") == "meta":
                        continue

                    records.append(dict_to_record(data))

                except (json.JSONDecodeError, ValidationError) as e:
                    raise ValidationError(
                        f"Error parsing line {line_num} in {self.history_path}: {e}"
                    ) from e

        return records

    def _write_records(self, records: list[SessionRecord]) -> None:
        """
        Rewrite the whole history file.

        Args:
            records: Records to write
        """
        self.history_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.history_path, "w", encoding="utf-8") as f:
            f.write(json.dumps({"type": "meta", "version": STORE_VERSION}) + "\n")
            for record in records:
                f.write(record_to_json_line(record) + "\n")

    def get_all(self) -> list[SessionRecord]:
        """
        Load all records.

        Returns:
            List of SessionRecord, newest first (by started_at)

        Raises:
            ValidationError: If a line of the file is invalid
        """
        records = self._load()
        records.sort(key=lambda r: r.started_at, reverse=True)
        return records

    def get(self, record_id: str) -> SessionRecord | None:
        """Return the record with the given id, or None."""
        for record in self._load():
            if record.id == record_id:
                return record
        return None

    def put(self, record: SessionRecord) -> None:
        """
        Insert a record, replacing any existing record with the same id.

        Args:
            record: Record to store
        """
        records = [r for r in self._load() if r.id != record.id]
        records.append(record)
        self._write_records(records)
        logger.debug("Stored session %s", record.id)

    def update(self, record: SessionRecord) -> None:
        """
        Replace an existing record (user edit).

        Raises:
            KeyError: If no record has this id
        """
        records = self._load()
        for i, existing in enumerate(records):
            if existing.id == record.id:
                records[i] = record
                self._write_records(records)
                return
        raise KeyError(record.id)

    def delete(self, record_id: str) -> SessionRecord:
        """
        Delete a record by id.

        Returns:
            The deleted record

        Raises:
            KeyError: If no record has this id
        """
        records = self._load()
        for i, existing in enumerate(records):
            if existing.id == record_id:
                del records[i]
                self._write_records(records)
                return existing
        raise KeyError(record_id)

    def import_records(
        self,
        items: Any,
        workout_types: Iterable[str] | None = None,
    ) -> list[SessionRecord]:
        """
        Bulk-insert externally authored records.

        Every item is validated before anything is written; the first
        invalid item aborts the whole batch.  Imported records get a fresh
        id and imported=True.

        Args:
            items: List of record-shaped dicts (e.g. parsed from an export file)
            workout_types: If given, allowed workout_type values

        Returns:
            The records as stored

        Raises:
            ValidationError: If items is not a list or any item is invalid
        """
        if not isinstance(items, list):
            raise ValidationError("Expected a JSON array of session records")

        allowed = list(workout_types) if workout_types is not None else None
        parsed: list[SessionRecord] = []
        for index, item in enumerate(items):
            try:
                record = dict_to_record(item, allowed)
            except ValidationError as e:
                raise ValidationError(f"Invalid record #{index + 1}: {e}") from e
            parsed.append(dataclasses.replace(record, id=new_record_id(), imported=True))

        records = self._load()
        records.extend(parsed)
        self._write_records(records)
        logger.info("Imported %d sessions into %s", len(parsed), self.history_path)
        return parsed

    def export_records(self) -> list[dict[str, Any]]:
        """All records as JSON-compatible dicts, newest first."""
        return [record_to_dict(r) for r in self.get_all()]

    def clear_history(self) -> None:
        """
        Clear all history (dangerous - use with caution).
        """
        if self.history_path.exists():
            self._write_records([])


def get_default_data_dir() -> Path:
    """Default directory for history and weights (~/.hangboard-timer)."""
    return get_user_dir()


def get_default_history_path() -> Path:
    return get_default_data_dir() / "history.jsonl"


def get_default_store() -> HistoryStore:
    """
    Get a HistoryStore with the default path.

    Returns:
        HistoryStore instance
    """
    return HistoryStore(get_default_history_path())
