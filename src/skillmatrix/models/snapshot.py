"""Organisation snapshot — the immutable input bundle of the engine.

The storage layer materialises every collection before the engine runs;
the engine never reads partially loaded data.
"""

from __future__ import annotations

from dataclasses import dataclass

from skillmatrix.models.assessment import Assessment, AssessmentLogEntry
from skillmatrix.models.organization import Employee, EmployeeRole
from skillmatrix.models.qualification import QualificationMeasure, QualificationPlan
from skillmatrix.models.skill import Category, Skill, SubCategory


@dataclass(frozen=True)
class OrganizationSnapshot:
    """Everything the projection engine reads, as one frozen value.

    version identifies the content (see SnapshotStore.compute_version) and
    keys result caches; an empty version disables caching.
    """
    employees: tuple[Employee, ...] = ()
    roles: tuple[EmployeeRole, ...] = ()
    categories: tuple[Category, ...] = ()
    subcategories: tuple[SubCategory, ...] = ()
    skills: tuple[Skill, ...] = ()
    assessments: tuple[Assessment, ...] = ()
    log_entries: tuple[AssessmentLogEntry, ...] = ()
    plans: tuple[QualificationPlan, ...] = ()
    measures: tuple[QualificationMeasure, ...] = ()
    version: str = ""

    def __post_init__(self) -> None:
        seen: set[tuple[str, str]] = set()
        for a in self.assessments:
            if a.key in seen:
                raise ValueError(
                    f"Duplicate assessment for employee '{a.employee_id}' "
                    f"and skill '{a.skill_id}'"
                )
            seen.add(a.key)
