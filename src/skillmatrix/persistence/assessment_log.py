"""Append-only assessment log — the record of every level change.

Every change of an assessment's level appends one entry. Entries are
immutable once written. The log serves as:
1. The input of the historical reconstructor (state at a past instant).
2. The audit trail of who was rated what, and when.

The log can be persisted to a JSONL file (one JSON object per line) and
loaded back. Each line carries a sha256 digest of its canonical form;
tampered lines are rejected on load.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Optional

from skillmatrix.models.assessment import AssessmentLogEntry, PairKey
from skillmatrix.persistence.codec import log_entry_from_dict, log_entry_to_dict

logger = logging.getLogger(__name__)


def entry_digest(record: dict[str, Any]) -> str:
    canonical = json.dumps(record, sort_keys=True, ensure_ascii=False).encode("utf-8")
    return f"sha256:{hashlib.sha256(canonical).hexdigest()}"


@dataclass(frozen=True)
class ChainViolation:
    """An entry whose previous_level does not match the chain."""
    employee_id: str
    skill_id: str
    timestamp: datetime
    expected_previous: int
    actual_previous: int

    def describe(self) -> str:
        return (
            f"{self.employee_id}/{self.skill_id} at {self.timestamp.isoformat()}: "
            f"previous_level {self.actual_previous}, expected {self.expected_previous}"
        )


class AssessmentLog:
    """Append-only assessment change log with optional file persistence.

    Entries can only be appended, never modified or deleted.
    """

    def __init__(
        self,
        storage_path: Optional[Path] = None,
        entries: Iterable[AssessmentLogEntry] = (),
    ) -> None:
        self._entries: list[AssessmentLogEntry] = []
        self._seen: set[tuple[str, str, datetime, int, int]] = set()
        self._storage_path = storage_path

        if storage_path and storage_path.exists():
            self._load_from_file(storage_path)
        for entry in entries:
            self.append(entry)

    @staticmethod
    def _identity(entry: AssessmentLogEntry) -> tuple[str, str, datetime, int, int]:
        return (
            entry.employee_id,
            entry.skill_id,
            entry.timestamp,
            entry.previous_level,
            entry.new_level,
        )

    def append(self, entry: AssessmentLogEntry) -> None:
        """Append an entry to the log.

        Raises ValueError if an identical entry was already recorded
        (replay protection).
        """
        identity = self._identity(entry)
        if identity in self._seen:
            raise ValueError(
                f"Duplicate log entry: {entry.employee_id}/{entry.skill_id} "
                f"at {entry.timestamp.isoformat()}"
            )
        self._entries.append(entry)
        self._seen.add(identity)

        if self._storage_path:
            self._append_to_file(entry)

    def record_change(
        self,
        employee_id: str,
        skill_id: str,
        previous_level: int,
        new_level: int,
        timestamp: datetime,
        note: Optional[str] = None,
    ) -> Optional[AssessmentLogEntry]:
        """Append an entry for a level change; no-op when the level is unchanged."""
        if previous_level == new_level:
            return None
        entry = AssessmentLogEntry(
            employee_id=employee_id,
            skill_id=skill_id,
            previous_level=previous_level,
            new_level=new_level,
            timestamp=timestamp,
            note=note,
        )
        self.append(entry)
        return entry

    def entries(self, employee_id: Optional[str] = None) -> list[AssessmentLogEntry]:
        """Return entries in append order, optionally for one employee."""
        if employee_id is None:
            return list(self._entries)
        return [e for e in self._entries if e.employee_id == employee_id]

    def entries_after(self, instant: datetime) -> list[AssessmentLogEntry]:
        """Entries strictly newer than instant."""
        return [e for e in self._entries if e.timestamp > instant]

    @property
    def count(self) -> int:
        return len(self._entries)

    @property
    def last_entry(self) -> Optional[AssessmentLogEntry]:
        return self._entries[-1] if self._entries else None

    def verify_chain(self, initial_level: int = 0) -> list[ChainViolation]:
        """Check that every pair's entries form an unbroken chain.

        Returns an empty list when the chain holds.
        """
        ordered = sorted(
            enumerate(self._entries),
            key=lambda item: (item[1].timestamp, item[0]),
        )
        last_level: dict[PairKey, int] = {}
        violations: list[ChainViolation] = []
        for _, entry in ordered:
            expected = last_level.get(entry.key, initial_level)
            if entry.previous_level != expected:
                violations.append(ChainViolation(
                    employee_id=entry.employee_id,
                    skill_id=entry.skill_id,
                    timestamp=entry.timestamp,
                    expected_previous=expected,
                    actual_previous=entry.previous_level,
                ))
            last_level[entry.key] = entry.new_level
        if violations:
            logger.warning("Assessment log chain has %d violation(s)", len(violations))
        return violations

    def _append_to_file(self, entry: AssessmentLogEntry) -> None:
        """Append a single entry to the JSONL file."""
        record = log_entry_to_dict(entry)
        record["hash"] = entry_digest(record)
        with self._storage_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, sort_keys=True, ensure_ascii=False) + "\n")

    def _load_from_file(self, path: Path) -> None:
        """Load entries from a JSONL file with integrity verification.

        Fail-closed: rejects tampered lines (hash mismatch) and duplicate
        entries.
        """
        with path.open("r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                data = json.loads(line)
                stored_hash = data.pop("hash", None)
                if stored_hash is not None and stored_hash != entry_digest(data):
                    raise ValueError(
                        f"Integrity check failed (line {line_num}): "
                        f"stored hash {stored_hash} != computed {entry_digest(data)}"
                    )
                entry = log_entry_from_dict(data)
                identity = self._identity(entry)
                if identity in self._seen:
                    raise ValueError(f"Duplicate log entry on load (line {line_num})")
                self._entries.append(entry)
                self._seen.add(identity)
        logger.debug("Loaded %d assessment log entries from %s", len(self._entries), path)
