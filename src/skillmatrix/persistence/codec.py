"""JSON codec for snapshot entities.

Field names on disk follow the storage layer's camelCase export format
(employeeId, targetLevel, inheritsFromId, ...). Timestamps are accepted as
ISO 8601 strings or epoch milliseconds and always decoded to aware UTC
datetimes; they are written back as ISO 8601 with a "Z" suffix.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional, Union

from skillmatrix.models.assessment import Assessment, AssessmentLogEntry
from skillmatrix.models.organization import Employee, EmployeeRole, RoleRequirement
from skillmatrix.models.qualification import (
    MeasureStatus,
    MeasureType,
    PlanStatus,
    QualificationMeasure,
    QualificationPlan,
)


def parse_timestamp(value: Union[str, int, float, None]) -> Optional[datetime]:
    """Decode an ISO 8601 string or epoch milliseconds to aware UTC.

    Naive ISO strings are taken to be UTC.

    Raises:
        ValueError: If the value cannot be parsed.
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid timestamp: {value!r}")
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return as_utc(datetime.fromisoformat(text))


def as_utc(value: datetime) -> datetime:
    """Return value as aware UTC; naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


# ------------------------------------------------------------------
# Decoding
# ------------------------------------------------------------------

def employee_from_dict(data: dict[str, Any]) -> Employee:
    return Employee(
        employee_id=data["id"],
        name=data.get("name", ""),
        roles=tuple(data.get("roles") or ()),
        department=data.get("department"),
        is_active=data.get("isActive"),
        deactivation_date=parse_timestamp(data.get("deactivationDate")),
    )


def role_from_dict(data: dict[str, Any]) -> EmployeeRole:
    return EmployeeRole(
        role_id=data["id"],
        name=data.get("name", data["id"]),
        inherits_from_id=data.get("inheritsFromId") or None,
        required_skills=tuple(
            RoleRequirement(skill_id=r["skillId"], level=r["level"])
            for r in data.get("requiredSkills") or ()
        ),
    )


def assessment_from_dict(data: dict[str, Any]) -> Assessment:
    return Assessment(
        employee_id=data["employeeId"],
        skill_id=data["skillId"],
        level=data["level"],
        target_level=data.get("targetLevel"),
    )


def log_entry_from_dict(data: dict[str, Any]) -> AssessmentLogEntry:
    timestamp = parse_timestamp(data["timestamp"])
    if timestamp is None:
        raise ValueError("Assessment log entry without timestamp")
    return AssessmentLogEntry(
        employee_id=data["employeeId"],
        skill_id=data["skillId"],
        previous_level=data["previousLevel"],
        new_level=data["newLevel"],
        timestamp=timestamp,
        note=data.get("note"),
    )


def plan_from_dict(data: dict[str, Any]) -> QualificationPlan:
    return QualificationPlan(
        plan_id=data["id"],
        employee_id=data["employeeId"],
        status=PlanStatus(data.get("status", PlanStatus.ACTIVE.value)),
        target_role_id=data.get("targetRoleId") or None,
    )


def measure_from_dict(data: dict[str, Any]) -> QualificationMeasure:
    return QualificationMeasure(
        measure_id=data["id"],
        plan_id=data["planId"],
        skill_id=data["skillId"],
        current_level=data.get("currentLevel", 0),
        target_level=data["targetLevel"],
        status=MeasureStatus(data.get("status", MeasureStatus.PENDING.value)),
        target_date=parse_timestamp(data.get("targetDate")),
        measure_type=MeasureType(data.get("type", MeasureType.INTERNAL.value)),
        start_date=parse_timestamp(data.get("startDate")),
        completed_date=parse_timestamp(data.get("completedDate")),
    )


# ------------------------------------------------------------------
# Encoding
# ------------------------------------------------------------------

def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


def employee_to_dict(employee: Employee) -> dict[str, Any]:
    return _drop_none({
        "id": employee.employee_id,
        "name": employee.name,
        "roles": list(employee.roles),
        "department": employee.department,
        "isActive": employee.is_active,
        "deactivationDate": format_timestamp(employee.deactivation_date),
    })


def role_to_dict(role: EmployeeRole) -> dict[str, Any]:
    return _drop_none({
        "id": role.role_id,
        "name": role.name,
        "inheritsFromId": role.inherits_from_id,
        "requiredSkills": [
            {"skillId": r.skill_id, "level": r.level} for r in role.required_skills
        ],
    })


def assessment_to_dict(assessment: Assessment) -> dict[str, Any]:
    return _drop_none({
        "employeeId": assessment.employee_id,
        "skillId": assessment.skill_id,
        "level": assessment.level,
        "targetLevel": assessment.target_level,
    })


def log_entry_to_dict(entry: AssessmentLogEntry) -> dict[str, Any]:
    return _drop_none({
        "employeeId": entry.employee_id,
        "skillId": entry.skill_id,
        "previousLevel": entry.previous_level,
        "newLevel": entry.new_level,
        "timestamp": format_timestamp(entry.timestamp),
        "note": entry.note,
    })


def plan_to_dict(plan: QualificationPlan) -> dict[str, Any]:
    return _drop_none({
        "id": plan.plan_id,
        "employeeId": plan.employee_id,
        "status": plan.status.value,
        "targetRoleId": plan.target_role_id,
    })


def measure_to_dict(measure: QualificationMeasure) -> dict[str, Any]:
    return _drop_none({
        "id": measure.measure_id,
        "planId": measure.plan_id,
        "skillId": measure.skill_id,
        "currentLevel": measure.current_level,
        "targetLevel": measure.target_level,
        "status": measure.status.value,
        "type": measure.measure_type.value,
        "targetDate": format_timestamp(measure.target_date),
        "startDate": format_timestamp(measure.start_date),
        "completedDate": format_timestamp(measure.completed_date),
    })
