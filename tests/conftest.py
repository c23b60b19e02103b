"""Shared fixtures: a small plant with roles, a departure, measures and a change log.

Evaluation time is fixed at NOW (2026-01-15 UTC).

Roles:
    Machine Operator  turning 50, first aid 25
    Senior Operator   (inherits Machine Operator) turning 75, CNC programming 50
    Inspector         measuring 75

Employees:
    emp-anna  Senior Operator (referenced by name)
    emp-ben   Machine Operator, leaves on 2026-02-15
    emp-cara  Inspector, individual measuring target 100
    emp-dan   already inactive
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from skillmatrix.models.assessment import Assessment, AssessmentLogEntry
from skillmatrix.models.organization import Employee, EmployeeRole, RoleRequirement
from skillmatrix.models.qualification import (
    MeasureStatus,
    PlanStatus,
    QualificationMeasure,
    QualificationPlan,
)
from skillmatrix.models.snapshot import OrganizationSnapshot
from skillmatrix.policy.resolver import PolicyResolver
from skillmatrix.skills.catalogue import SkillCatalogue


CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"


def utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return utc(2026, 1, 15)


@pytest.fixture
def resolver() -> PolicyResolver:
    return PolicyResolver.from_config_dir(CONFIG_DIR)


@pytest.fixture
def catalogue() -> SkillCatalogue:
    return SkillCatalogue.from_config_dir(CONFIG_DIR)


@pytest.fixture
def roles() -> tuple[EmployeeRole, ...]:
    return (
        EmployeeRole(
            role_id="role-operator",
            name="Machine Operator",
            required_skills=(
                RoleRequirement("skill-turning", 50),
                RoleRequirement("skill-first-aid", 25),
            ),
        ),
        EmployeeRole(
            role_id="role-senior",
            name="Senior Operator",
            inherits_from_id="role-operator",
            required_skills=(
                RoleRequirement("skill-turning", 75),
                RoleRequirement("skill-cnc-programming", 50),
            ),
        ),
        EmployeeRole(
            role_id="role-inspector",
            name="Inspector",
            required_skills=(RoleRequirement("skill-measuring", 75),),
        ),
    )


@pytest.fixture
def employees() -> tuple[Employee, ...]:
    return (
        Employee("emp-anna", "Anna", roles=("Senior Operator",), department="Production"),
        Employee(
            "emp-ben", "Ben", roles=("role-operator",), department="Production",
            deactivation_date=utc(2026, 2, 15),
        ),
        Employee("emp-cara", "Cara", roles=("Inspector",), department="Quality", is_active=True),
        Employee(
            "emp-dan", "Dan", roles=("role-operator",), department="Production",
            is_active=False, deactivation_date=utc(2025, 12, 1),
        ),
    )


@pytest.fixture
def assessments() -> tuple[Assessment, ...]:
    return (
        Assessment("emp-anna", "skill-turning", 50),
        Assessment("emp-anna", "skill-cnc-programming", 25),
        Assessment("emp-anna", "skill-first-aid", 25),
        Assessment("emp-anna", "skill-welding", 75),
        Assessment("emp-ben", "skill-turning", 75),
        Assessment("emp-ben", "skill-first-aid", 0),
        Assessment("emp-cara", "skill-measuring", 50, target_level=100),
        Assessment("emp-cara", "skill-spc", -1),
        Assessment("emp-dan", "skill-turning", 100),
    )


@pytest.fixture
def log_entries() -> tuple[AssessmentLogEntry, ...]:
    return (
        AssessmentLogEntry("emp-anna", "skill-first-aid", 0, 25, utc(2025, 1, 5)),
        AssessmentLogEntry("emp-anna", "skill-welding", 0, 75, utc(2025, 1, 10)),
        AssessmentLogEntry("emp-ben", "skill-turning", 0, 50, utc(2025, 2, 1)),
        AssessmentLogEntry("emp-anna", "skill-turning", 0, 25, utc(2025, 3, 1)),
        AssessmentLogEntry("emp-cara", "skill-spc", 0, -1, utc(2025, 4, 1)),
        AssessmentLogEntry("emp-cara", "skill-measuring", 0, 50, utc(2025, 6, 1)),
        AssessmentLogEntry("emp-anna", "skill-turning", 25, 50, utc(2025, 9, 1)),
        AssessmentLogEntry("emp-anna", "skill-cnc-programming", 0, 25, utc(2025, 11, 1)),
        AssessmentLogEntry("emp-ben", "skill-turning", 50, 75, utc(2026, 1, 10)),
    )


@pytest.fixture
def plans() -> tuple[QualificationPlan, ...]:
    return (
        QualificationPlan("plan-anna", "emp-anna", PlanStatus.ACTIVE, target_role_id="role-senior"),
        QualificationPlan("plan-ben", "emp-ben", PlanStatus.ACTIVE),
        QualificationPlan("plan-cara", "emp-cara", PlanStatus.DRAFT),
    )


@pytest.fixture
def measures() -> tuple[QualificationMeasure, ...]:
    return (
        QualificationMeasure(
            "m-anna-turning", "plan-anna", "skill-turning", 50, 100,
            status=MeasureStatus.PENDING, target_date=utc(2026, 3, 15),
        ),
        QualificationMeasure(
            "m-anna-cnc", "plan-anna", "skill-cnc-programming", 25, 75,
            status=MeasureStatus.IN_PROGRESS, target_date=utc(2026, 10, 15),
        ),
        QualificationMeasure(
            "m-anna-milling", "plan-anna", "skill-milling", 0, 50,
            status=MeasureStatus.COMPLETED, target_date=utc(2026, 2, 1),
        ),
        QualificationMeasure(
            "m-ben-first-aid", "plan-ben", "skill-first-aid", 0, 50,
            status=MeasureStatus.PENDING, target_date=utc(2026, 3, 1),
        ),
        QualificationMeasure(
            "m-orphan", "plan-missing", "skill-measuring", 50, 75,
            status=MeasureStatus.PENDING, target_date=utc(2026, 2, 1),
        ),
        QualificationMeasure(
            "m-cara-spc", "plan-cara", "skill-spc", -1, 50,
            status=MeasureStatus.PENDING, target_date=utc(2026, 3, 1),
        ),
    )


@pytest.fixture
def snapshot(
    catalogue: SkillCatalogue,
    roles: tuple[EmployeeRole, ...],
    employees: tuple[Employee, ...],
    assessments: tuple[Assessment, ...],
    log_entries: tuple[AssessmentLogEntry, ...],
    plans: tuple[QualificationPlan, ...],
    measures: tuple[QualificationMeasure, ...],
) -> OrganizationSnapshot:
    return OrganizationSnapshot(
        employees=employees,
        roles=roles,
        categories=tuple(catalogue.categories()),
        subcategories=tuple(catalogue.subcategories()),
        skills=tuple(catalogue.skills()),
        assessments=assessments,
        log_entries=log_entries,
        plans=plans,
        measures=measures,
        version="test-snapshot",
    )
