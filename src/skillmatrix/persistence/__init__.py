"""Persistence adapters — snapshot files and the assessment change log."""

from skillmatrix.persistence.assessment_log import AssessmentLog, ChainViolation
from skillmatrix.persistence.snapshot_store import SnapshotStore

__all__ = ["AssessmentLog", "ChainViolation", "SnapshotStore"]
