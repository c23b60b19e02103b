"""Snapshot store — reads and writes organisation snapshots as JSON.

The file layout matches the storage layer's full export (employees,
categories, subcategories, skills, assessments, roles, history,
qualificationPlans, qualificationMeasures). Keys the engine does not use
(departments, settings, savedViews, ...) are ignored on load.

The snapshot version is a sha256 digest of the canonical JSON content,
so two loads of identical data share cache entries.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any

from skillmatrix.models.snapshot import OrganizationSnapshot
from skillmatrix.persistence import codec
from skillmatrix.skills.catalogue import SkillCatalogue

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Loads an OrganizationSnapshot from a JSON export file.

    Usage:
        store = SnapshotStore(Path("data/export.json"))
        snapshot = store.load()
    """

    def __init__(self, storage_path: Path) -> None:
        self._storage_path = storage_path

    @property
    def storage_path(self) -> Path:
        return self._storage_path

    @staticmethod
    def compute_version(data: dict[str, Any]) -> str:
        canonical = json.dumps(data, sort_keys=True, ensure_ascii=False).encode("utf-8")
        return hashlib.sha256(canonical).hexdigest()[:16]

    @staticmethod
    def from_dict(data: dict[str, Any]) -> OrganizationSnapshot:
        """Decode an export dict into a snapshot.

        Raises:
            ValueError: If an entity is malformed or assessments collide.
        """
        try:
            catalogue = SkillCatalogue.from_dict({
                "categories": data.get("categories", []),
                "subcategories": data.get("subcategories", []),
                "skills": data.get("skills", []),
            })
            snapshot = OrganizationSnapshot(
                employees=tuple(codec.employee_from_dict(e) for e in data.get("employees", [])),
                roles=tuple(codec.role_from_dict(r) for r in data.get("roles", [])),
                categories=tuple(catalogue.categories()),
                subcategories=tuple(catalogue.subcategories()),
                skills=tuple(catalogue.skills()),
                assessments=tuple(
                    codec.assessment_from_dict(a) for a in data.get("assessments", [])
                ),
                log_entries=tuple(
                    codec.log_entry_from_dict(e) for e in data.get("history", [])
                ),
                plans=tuple(
                    codec.plan_from_dict(p) for p in data.get("qualificationPlans") or []
                ),
                measures=tuple(
                    codec.measure_from_dict(m) for m in data.get("qualificationMeasures") or []
                ),
            )
        except KeyError as exc:
            raise ValueError(f"Snapshot entity missing field {exc}") from exc
        return replace(snapshot, version=SnapshotStore.compute_version(data))

    @staticmethod
    def to_dict(snapshot: OrganizationSnapshot) -> dict[str, Any]:
        catalogue = SkillCatalogue(snapshot.categories, snapshot.subcategories, snapshot.skills)
        data = catalogue.to_dict()
        data.update({
            "employees": [codec.employee_to_dict(e) for e in snapshot.employees],
            "roles": [codec.role_to_dict(r) for r in snapshot.roles],
            "assessments": [codec.assessment_to_dict(a) for a in snapshot.assessments],
            "history": [codec.log_entry_to_dict(e) for e in snapshot.log_entries],
            "qualificationPlans": [codec.plan_to_dict(p) for p in snapshot.plans],
            "qualificationMeasures": [codec.measure_to_dict(m) for m in snapshot.measures],
        })
        return data

    def load(self) -> OrganizationSnapshot:
        """Read and decode the snapshot file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the content is not a valid snapshot.
        """
        if not self._storage_path.exists():
            raise FileNotFoundError(f"Snapshot not found: {self._storage_path}")
        with self._storage_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Snapshot must be a JSON object: {self._storage_path}")
        snapshot = self.from_dict(data)
        logger.info(
            "Loaded snapshot %s: %d employees, %d assessments, %d log entries",
            snapshot.version,
            len(snapshot.employees),
            len(snapshot.assessments),
            len(snapshot.log_entries),
        )
        return snapshot

    def save(self, snapshot: OrganizationSnapshot) -> None:
        """Write the snapshot, replacing the file atomically."""
        self._storage_path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._storage_path.with_suffix(self._storage_path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(self.to_dict(snapshot), f, indent=2, ensure_ascii=False)
        tmp.replace(self._storage_path)
