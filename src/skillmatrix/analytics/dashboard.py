"""Dashboard analytics — headline figures around the projection engine.

Plain helper functions over assessments plus period comparison built on
the historical reconstructor. Everything here is a pure computation.
"""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from skillmatrix.models.assessment import Assessment, AssessmentLogEntry
from skillmatrix.models.organization import Employee
from skillmatrix.projection.fulfillment import round_half_up
from skillmatrix.projection.history import HistoricalReconstructor
from skillmatrix.skills.catalogue import SkillCatalogue


class ComparisonPeriod(str, enum.Enum):
    QUARTER = "quarter"
    YEAR = "year"


@dataclass(frozen=True)
class PeriodBoundaries:
    current_start: datetime
    previous_start: datetime
    previous_end: datetime


def period_boundaries(
    period: ComparisonPeriod,
    reference: Optional[datetime] = None,
) -> PeriodBoundaries:
    """Start of the current period and the span of the previous one.

    Boundaries share the reference's timezone.
    """
    now = reference or datetime.now(timezone.utc)
    tz = now.tzinfo

    if period == ComparisonPeriod.QUARTER:
        quarter = (now.month - 1) // 3
        current_start = datetime(now.year, quarter * 3 + 1, 1, tzinfo=tz)
        prev_quarter = quarter - 1
        prev_year = now.year
        if prev_quarter < 0:
            prev_quarter = 3
            prev_year -= 1
        previous_start = datetime(prev_year, prev_quarter * 3 + 1, 1, tzinfo=tz)
    else:
        current_start = datetime(now.year, 1, 1, tzinfo=tz)
        previous_start = datetime(now.year - 1, 1, 1, tzinfo=tz)

    return PeriodBoundaries(
        current_start=current_start,
        previous_start=previous_start,
        previous_end=current_start,
    )


def average_score(assessments: Iterable[Assessment]) -> Optional[int]:
    """Average level ignoring N/A (-1); None when nothing is assessed."""
    levels = [a.level for a in assessments if a.level != -1]
    if not levels:
        return None
    return round_half_up(sum(levels) / len(levels))


def percentage_change(previous: float, current: float) -> int:
    """Relative change in percent; growth from zero counts as 100%."""
    if previous == 0:
        return 100 if current > 0 else 0
    return round_half_up((current - previous) / previous * 100)


def skill_coverage(
    assessments: Iterable[Assessment],
    total_employees: int,
    threshold: int = 50,
) -> dict[str, int]:
    """How many employees reach a level threshold in a skill."""
    count = sum(1 for a in assessments if a.level >= threshold)
    percentage = round_half_up(count / total_employees * 100) if total_employees > 0 else 0
    return {"count": count, "percentage": percentage}


def goal_fulfillment(assessments: Iterable[Assessment]) -> dict[str, int]:
    """Share of assessments with an individual target that reach it."""
    with_targets = [a for a in assessments if a.target_level and a.target_level > 0]
    achieved = [a for a in with_targets if a.level >= a.target_level]
    percentage = (
        round_half_up(len(achieved) / len(with_targets) * 100) if with_targets else 0
    )
    return {
        "achieved": len(achieved),
        "total": len(with_targets),
        "percentage": percentage,
    }


def average_gap(assessments: Iterable[Assessment]) -> float:
    """Mean (target - level) over assessments with an individual target."""
    with_targets = [a for a in assessments if a.target_level and a.target_level > 0]
    if not with_targets:
        return 0.0
    return sum(a.target_level - a.level for a in with_targets) / len(with_targets)


def biggest_skill_gaps(
    assessments: Iterable[Assessment],
    catalogue: SkillCatalogue,
    limit: int = 5,
) -> list[dict[str, Any]]:
    """Skills with the largest positive average gap to individual targets."""
    by_skill: dict[str, list[Assessment]] = {}
    for a in assessments:
        if a.target_level and a.target_level > 0 and catalogue.has_skill(a.skill_id):
            by_skill.setdefault(a.skill_id, []).append(a)

    gaps = []
    for skill in catalogue.skills():
        group = by_skill.get(skill.skill_id)
        if not group:
            continue
        gap = average_gap(group)
        if gap > 0:
            gaps.append({
                "skill_id": skill.skill_id,
                "skill_name": skill.name,
                "avg_gap": gap,
                "count": len(group),
            })
    gaps.sort(key=lambda g: g["avg_gap"], reverse=True)
    return gaps[:limit]


def department_stats(
    employees: Iterable[Employee],
    assessments: Iterable[Assessment],
) -> list[dict[str, Any]]:
    """Average rated level per department, best department first.

    Employees without any rated skill count as 0 towards their department.
    """
    rated: dict[str, list[int]] = {}
    for a in assessments:
        if a.level > 0:
            rated.setdefault(a.employee_id, []).append(a.level)

    departments: dict[str, list[float]] = {}
    for emp in employees:
        if not emp.department:
            continue
        levels = rated.get(emp.employee_id, [])
        departments.setdefault(emp.department, []).append(
            sum(levels) / len(levels) if levels else 0.0
        )

    stats = [
        {
            "department": name,
            "employee_count": len(averages),
            "avg_score": round_half_up(sum(averages) / len(averages)),
        }
        for name, averages in departments.items()
    ]
    stats.sort(key=lambda s: s["avg_score"], reverse=True)
    return stats


@dataclass(frozen=True)
class PeriodComparison:
    """Total XP now vs. at the start of the current period."""
    period: ComparisonPeriod
    boundaries: PeriodBoundaries
    previous_xp: int
    current_xp: int
    change_percent: int

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["period"] = self.period.value
        data["boundaries"] = {k: v.isoformat() for k, v in data["boundaries"].items()}
        return data


def period_comparison(
    assessments: Iterable[Assessment],
    log_entries: Iterable[AssessmentLogEntry],
    period: ComparisonPeriod,
    reference: Optional[datetime] = None,
) -> PeriodComparison:
    """Compare XP today with XP at the start of the current period."""
    assessments = list(assessments)
    log_entries = list(log_entries)
    boundaries = period_boundaries(period, reference)
    reconstructor = HistoricalReconstructor()
    previous_xp = reconstructor.total_xp_at(
        assessments, log_entries, boundaries.current_start,
    )
    current_xp = sum(a.level for a in assessments if a.level > 0)
    return PeriodComparison(
        period=period,
        boundaries=boundaries,
        previous_xp=previous_xp,
        current_xp=current_xp,
        change_percent=percentage_change(previous_xp, current_xp),
    )
