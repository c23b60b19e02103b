"""Forecast simulator — projects levels forward to a horizon instant.

Two classes of already-known future events are applied to the present
state:

1. Departures. Currently active employees whose deactivation_date falls
   in (now, horizon] leave the forecast population. Employees that are
   already inactive are already departed and were never part of it.
2. Completing measures. Planned measures (pending / in progress by
   default policy) with a target_date at or before the horizon raise
   their (employee, skill) pair to the measure's target_level. The
   employee is resolved through the measure's plan.

Key rules:
- A completing measure can only raise a level, never lower it; several
  measures on one pair compose by taking the maximum.
- Measures for departing or unresolvable employees are ignored.
- A measure on a pair without an assessment creates a projected entry
  (the implicit current level is 0).
- Pure computation — no side effects.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional, Union

from skillmatrix.models.assessment import Assessment, PairKey
from skillmatrix.models.organization import Employee
from skillmatrix.models.qualification import QualificationMeasure, QualificationPlan
from skillmatrix.policy.resolver import PolicyResolver


def add_months(moment: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the end of the month."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


@dataclass(frozen=True)
class ForecastScenario:
    """The time window a forecast covers."""
    label: str
    months: Optional[int]
    now: datetime
    horizon: datetime

    @classmethod
    def build(
        cls,
        horizon: Union[int, datetime],
        now: Optional[datetime] = None,
    ) -> ForecastScenario:
        """Build a scenario from a month count or an explicit instant."""
        now = now or datetime.now(timezone.utc)
        if isinstance(horizon, datetime):
            return cls(
                label=horizon.strftime("until %Y-%m-%d"),
                months=None,
                now=now,
                horizon=horizon,
            )
        if horizon < 0:
            raise ValueError(f"Forecast horizon must be >= 0 months, got {horizon}")
        return cls(
            label=f"{horizon} months",
            months=horizon,
            now=now,
            horizon=add_months(now, horizon),
        )


@dataclass(frozen=True)
class ForecastState:
    """Projected state at the horizon, plus the event sets that produced it."""
    scenario: ForecastScenario
    levels: dict[PairKey, int]
    current_active_ids: frozenset[str]
    forecast_active_ids: frozenset[str]
    future_departures: tuple[Employee, ...]
    already_departed_ids: frozenset[str]
    planned_measures: tuple[QualificationMeasure, ...]
    completing_measures: tuple[QualificationMeasure, ...]
    measure_employees: dict[str, str]  # measure_id -> employee_id

    @property
    def departing_ids(self) -> frozenset[str]:
        return frozenset(e.employee_id for e in self.future_departures)

    def is_departing(self, employee_id: str) -> bool:
        return employee_id in self.departing_ids

    def measures_for(self, employee_id: str, completing: bool = False) -> list[QualificationMeasure]:
        """Planned (or only completing) measures resolved to an employee."""
        source = self.completing_measures if completing else self.planned_measures
        return [
            m for m in source
            if self.measure_employees.get(m.measure_id) == employee_id
        ]


class ForecastSimulator:
    """Applies scheduled measures and departures to the current state.

    Usage:
        simulator = ForecastSimulator(resolver)
        state = simulator.simulate(employees, assessments, measures, plans, 6)
    """

    def __init__(self, resolver: PolicyResolver) -> None:
        self._resolver = resolver

    def simulate(
        self,
        employees: Iterable[Employee],
        assessments: Iterable[Assessment],
        measures: Iterable[QualificationMeasure],
        plans: Iterable[QualificationPlan],
        horizon: Union[int, datetime, ForecastScenario],
        now: Optional[datetime] = None,
    ) -> ForecastState:
        """Project the per-pair levels to the horizon.

        Args:
            horizon: Months from now, an explicit instant, or a prebuilt
                scenario (whose own "now" then wins).
            now: Override current time (for testing).
        """
        if isinstance(horizon, ForecastScenario):
            scenario = horizon
        else:
            scenario = ForecastScenario.build(horizon, now=now)
        now = scenario.now
        employees = list(employees)

        # Departures
        current_active = [e for e in employees if e.currently_active]
        future_departures = tuple(
            e for e in current_active
            if e.deactivation_date is not None
            and now < e.deactivation_date <= scenario.horizon
        )
        departing_ids = {e.employee_id for e in future_departures}
        current_active_ids = frozenset(e.employee_id for e in current_active)
        forecast_active_ids = frozenset(current_active_ids - departing_ids)
        already_departed_ids = frozenset(
            e.employee_id for e in employees if not e.currently_active
        )

        # Completing measures
        planned_statuses = self._resolver.planned_measure_statuses()
        planned = tuple(m for m in measures if m.status in planned_statuses)
        completing = tuple(
            m for m in planned
            if m.target_date is not None and m.target_date <= scenario.horizon
        )

        plan_employees = {p.plan_id: p.employee_id for p in plans}
        measure_employees: dict[str, str] = {}
        for m in planned:
            employee_id = plan_employees.get(m.plan_id)
            if employee_id:
                measure_employees[m.measure_id] = employee_id

        # Projected levels
        levels: dict[PairKey, int] = {a.key: a.level for a in assessments}
        for m in completing:
            employee_id = measure_employees.get(m.measure_id)
            if employee_id is None or employee_id not in forecast_active_ids:
                continue
            key = (employee_id, m.skill_id)
            current = levels.get(key, 0)
            if m.target_level > current:
                levels[key] = m.target_level

        return ForecastState(
            scenario=scenario,
            levels=levels,
            current_active_ids=current_active_ids,
            forecast_active_ids=forecast_active_ids,
            future_departures=future_departures,
            already_departed_ids=already_departed_ids,
            planned_measures=planned,
            completing_measures=completing,
            measure_employees=measure_employees,
        )
