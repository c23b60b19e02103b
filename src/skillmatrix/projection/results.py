"""Projection result types.

All results are frozen dataclasses with plain numeric/string fields.
to_dict() produces a JSON-ready structure for the CLI and other callers.
Averages are Optional: None means "no data in scope", never 0.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Optional


def score_delta(after: Optional[int], before: Optional[int]) -> int:
    """Difference between two averages, treating an absent average as 0."""
    return (after or 0) - (before or 0)


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


@dataclass(frozen=True)
class SkillBreakdown:
    """Per-skill detail of an employee row."""
    skill_id: str
    skill_name: str
    current_level: int
    target_level: Optional[int]
    current_fulfillment: int
    projected_level: int
    projected_fulfillment: int


@dataclass(frozen=True)
class EmployeeRow:
    """Current vs. projected averages for one currently active employee."""
    employee_id: str
    employee_name: str
    department: Optional[str]
    current_avg_score: Optional[int]
    projected_avg_score: Optional[int]
    delta: int
    is_departing: bool
    departure_date: Optional[datetime]
    planned_measure_count: int
    completing_measure_count: int
    skill_breakdown: tuple[SkillBreakdown, ...] = ()


@dataclass(frozen=True)
class CategoryBar:
    """Current vs. projected average for one category."""
    category_id: str
    category_name: str
    current_avg_score: Optional[int]
    projected_avg_score: Optional[int]
    delta: int


@dataclass(frozen=True)
class ProjectionKPIs:
    """Organisation-wide key figures, current vs. projected."""
    current_avg_score: Optional[int]
    projected_avg_score: Optional[int]
    score_delta: int
    current_deficit_count: int
    projected_deficit_count: int
    deficit_delta: int
    current_total_xp: int
    projected_total_xp: int
    xp_delta: int
    departure_count: int = 0
    departure_names: tuple[str, ...] = ()
    departure_ids: tuple[str, ...] = ()
    completing_measure_count: int = 0
    total_planned_measure_count: int = 0


@dataclass(frozen=True)
class ProjectionResult:
    """Full projection output for one instant.

    kind is "forecast" for a future horizon and "history" for a past
    instant. For history, "projected" means the reconstructed past state
    and deltas read past minus today.
    """
    kind: str
    label: str
    now: datetime
    instant: datetime
    kpis: ProjectionKPIs
    employee_rows: tuple[EmployeeRow, ...] = ()
    category_bars: tuple[CategoryBar, ...] = ()
    months: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return _jsonable(asdict(self))

    def employee_row(self, employee_id: str) -> Optional[EmployeeRow]:
        for row in self.employee_rows:
            if row.employee_id == employee_id:
                return row
        return None

    def category_bar(self, category_id: str) -> Optional[CategoryBar]:
        for bar in self.category_bars:
            if bar.category_id == category_id:
                return bar
        return None


@dataclass(frozen=True)
class TrendPoint:
    """One horizon of a multi-horizon forecast."""
    months: int
    horizon: datetime
    avg_score: Optional[int]
    deficit_count: int
    total_xp: int
    active_employee_count: int

    def to_dict(self) -> dict[str, Any]:
        return _jsonable(asdict(self))


@dataclass(frozen=True)
class Trend:
    points: tuple[TrendPoint, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {"points": [p.to_dict() for p in self.points]}
