"""Assessment models — current proficiency records and the change log."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from skillmatrix.models.skill import VALID_LEVELS

PairKey = tuple[str, str]  # (employee_id, skill_id)


@dataclass(frozen=True)
class Assessment:
    """The current proficiency of one employee in one skill.

    At most one assessment exists per (employee_id, skill_id).
    target_level is an individual override of the required proficiency.
    """
    employee_id: str
    skill_id: str
    level: int
    target_level: Optional[int] = None

    def __post_init__(self) -> None:
        if self.level not in VALID_LEVELS:
            raise ValueError(
                f"Assessment level must be one of {VALID_LEVELS}, got {self.level}"
            )

    @property
    def key(self) -> PairKey:
        return (self.employee_id, self.skill_id)


@dataclass(frozen=True)
class AssessmentLogEntry:
    """One level change, appended whenever an assessment's level changes.

    For a fixed pair, entries sorted by timestamp form a chain: each
    previous_level equals the new_level of the entry before it (0 for
    the first entry).
    """
    employee_id: str
    skill_id: str
    previous_level: int
    new_level: int
    timestamp: datetime
    note: Optional[str] = None

    @property
    def key(self) -> PairKey:
        return (self.employee_id, self.skill_id)
