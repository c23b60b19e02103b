"""Qualification plans and measures — scheduled training for employees."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


class PlanStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class MeasureStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MeasureType(str, enum.Enum):
    INTERNAL = "internal"
    EXTERNAL = "external"
    SELF_LEARNING = "self_learning"


@dataclass(frozen=True)
class QualificationPlan:
    """Groups measures for one employee, optionally towards a target role."""
    plan_id: str
    employee_id: str
    status: PlanStatus = PlanStatus.ACTIVE
    target_role_id: Optional[str] = None


@dataclass(frozen=True)
class QualificationMeasure:
    """A single training activity for one skill within a plan."""
    measure_id: str
    plan_id: str
    skill_id: str
    current_level: int
    target_level: int
    status: MeasureStatus = MeasureStatus.PENDING
    target_date: Optional[datetime] = None
    measure_type: MeasureType = MeasureType.INTERNAL
    start_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None
