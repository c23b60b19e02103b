"""Core data models for the skill matrix."""

from skillmatrix.models.assessment import Assessment, AssessmentLogEntry, PairKey
from skillmatrix.models.organization import Employee, EmployeeRole, RoleRequirement
from skillmatrix.models.qualification import (
    MeasureStatus,
    MeasureType,
    PlanStatus,
    QualificationMeasure,
    QualificationPlan,
)
from skillmatrix.models.skill import (
    LEVELS,
    NOT_ASSESSED,
    Category,
    Skill,
    SkillLevel,
    SubCategory,
)

__all__ = [
    "Assessment",
    "AssessmentLogEntry",
    "PairKey",
    "Employee",
    "EmployeeRole",
    "RoleRequirement",
    "MeasureStatus",
    "MeasureType",
    "PlanStatus",
    "QualificationMeasure",
    "QualificationPlan",
    "LEVELS",
    "NOT_ASSESSED",
    "Category",
    "Skill",
    "SkillLevel",
    "SubCategory",
]
