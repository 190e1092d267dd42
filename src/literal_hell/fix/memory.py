"""Rejection memory: fixes the user declined, persisted across runs.

The store is a single JSON object at ``{project_root}/.literal-hell-wards``
mapping ``"<file>:<line>:<column>:<original>"`` to a record. A missing or
unreadable store means an empty memory; failures are logged, never raised.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from literal_hell.core.models import RejectedFixRecord

logger = logging.getLogger(__name__)


class RejectionMemory:
    """Persisted key -> record mapping of declined and auto-skipped fixes."""

    def __init__(self, path: Path):
        self.path = path
        self._records: dict[str, RejectedFixRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def get(self, key: str) -> RejectedFixRecord | None:
        return self._records.get(key)

    def is_rejected(self, key: str, include_auto_skipped: bool = True) -> bool:
        record = self._records.get(key)
        if record is None:
            return False
        return include_auto_skipped or not record.auto_skipped

    def reject(
        self,
        file_path: str,
        line: int,
        column: int,
        original: str,
        reason: str | None = None,
        auto_skipped: bool = False,
    ) -> RejectedFixRecord:
        record = RejectedFixRecord(
            file_path=file_path,
            line=line,
            column=column,
            original=original,
            reason=reason,
            auto_skipped=auto_skipped,
        )
        self._records[record.key] = record
        return record

    def load(self) -> None:
        self._records = {}
        if not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("rejection store is not a JSON object")
            for key, value in data.items():
                record = RejectedFixRecord.from_dict(value)
                self._records[key] = record
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error("Error loading rejected fixes from %s: %s", self.path, e)
            self._records = {}
            return
        logger.info("Loaded %d previously rejected fixes", len(self._records))

    def save(self) -> bool:
        data = {key: record.to_dict() for key, record in self._records.items()}
        try:
            self.path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            logger.error("Error saving rejected fixes to %s: %s", self.path, e)
            return False
        return True

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.error("Error clearing rejection history at %s: %s", self.path, e)
        self._records = {}
        logger.info("Cleared fix rejection history")
