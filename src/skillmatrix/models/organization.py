"""Organisation models — employees and roles.

Roles form a forest: each role may inherit from at most one parent role
(inherits_from_id). A role's effective requirements are its own plus
those of every ancestor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from skillmatrix.models.skill import REQUIREMENT_LEVELS


@dataclass(frozen=True)
class RoleRequirement:
    """A role's required proficiency in one skill."""
    skill_id: str
    level: int

    def __post_init__(self) -> None:
        if self.level not in REQUIREMENT_LEVELS:
            raise ValueError(
                f"Role requirement level must be one of {REQUIREMENT_LEVELS}, "
                f"got {self.level}"
            )


@dataclass(frozen=True)
class EmployeeRole:
    """A named role with skill requirements and an optional parent role."""
    role_id: str
    name: str
    inherits_from_id: Optional[str] = None
    required_skills: tuple[RoleRequirement, ...] = ()

    def requirement_for(self, skill_id: str) -> Optional[int]:
        """Return the highest level this role itself declares for a skill."""
        levels = [r.level for r in self.required_skills if r.skill_id == skill_id]
        return max(levels) if levels else None


@dataclass(frozen=True)
class Employee:
    """An employee as seen by the projection engine.

    is_active is tri-state: None (never set) and True both mean active;
    only an explicit False marks the employee as departed.
    deactivation_date marks a planned or occurred departure.
    """
    employee_id: str
    name: str = ""
    roles: tuple[str, ...] = ()  # role names (or ids, for legacy data)
    department: Optional[str] = None
    is_active: Optional[bool] = None
    deactivation_date: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return self.name or self.employee_id

    @property
    def currently_active(self) -> bool:
        return self.is_active is not False

    def active_at(self, instant: datetime) -> bool:
        """Whether the employee was still employed at a past instant."""
        if self.currently_active:
            return True
        return self.deactivation_date is not None and self.deactivation_date > instant
