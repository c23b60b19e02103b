"""Projection aggregator — the entry point of the projection engine.

Folds per-pair levels into organisation KPIs, per-employee rows and
per-category bars, comparing the current state with either a forecast
(future horizon) or a reconstructed past state.

Every level is normalised through the target resolver and the
fulfillment scorer, and every average uses the one shared dual-mode
rule (see fulfillment.dual_mode_average).

Key rules:
- Assessments for unknown employees or skills are orphaned data and are
  left out of every figure.
- Departing employees keep their current row, but their projected
  average is None and they never contribute to projected aggregates.
- Deficits count assessed pairs of active employees whose level is
  below a defined target.
- XP is the sum of all positive levels, un-normalised.
- Historical results score past levels against today's targets; targets
  are not versioned.
- Pure computation: identical snapshots yield identical results.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional, Union

from skillmatrix.models.assessment import PairKey
from skillmatrix.models.organization import Employee
from skillmatrix.models.snapshot import OrganizationSnapshot
from skillmatrix.policy.resolver import PolicyResolver
from skillmatrix.projection.forecast import ForecastScenario, ForecastSimulator, ForecastState
from skillmatrix.projection.fulfillment import (
    ScoredPoint,
    dual_mode_average,
    fulfillment_score,
    is_deficit,
)
from skillmatrix.projection.history import HistoricalReconstructor
from skillmatrix.projection.results import (
    CategoryBar,
    EmployeeRow,
    ProjectionKPIs,
    ProjectionResult,
    SkillBreakdown,
    Trend,
    TrendPoint,
    score_delta,
)
from skillmatrix.projection.targets import TargetResolver
from skillmatrix.skills.catalogue import SkillCatalogue


class ProjectionAggregator:
    """Computes current vs. projected skill-fulfillment figures.

    Usage:
        aggregator = ProjectionAggregator(resolver, snapshot)
        result = aggregator.forecast(6)                      # 6 months ahead
        past = aggregator.history(datetime(2025, 1, 1, tzinfo=timezone.utc))
    """

    def __init__(self, resolver: PolicyResolver, snapshot: OrganizationSnapshot) -> None:
        self._resolver = resolver
        self._snapshot = snapshot
        self._catalogue = SkillCatalogue(
            snapshot.categories, snapshot.subcategories, snapshot.skills,
        )
        self._employees: dict[str, Employee] = {
            e.employee_id: e for e in snapshot.employees
        }
        self._assessments = tuple(
            a for a in snapshot.assessments if self._is_known(a.key)
        )
        self._current_levels: dict[PairKey, int] = {
            a.key: a.level for a in self._assessments
        }
        self._targets = TargetResolver(snapshot.roles, self._assessments)
        self._simulator = ForecastSimulator(resolver)
        self._reconstructor = HistoricalReconstructor()

    @property
    def catalogue(self) -> SkillCatalogue:
        return self._catalogue

    @property
    def targets(self) -> TargetResolver:
        return self._targets

    def _is_known(self, key: PairKey) -> bool:
        employee_id, skill_id = key
        return employee_id in self._employees and self._catalogue.has_skill(skill_id)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def simulate(
        self,
        horizon: Union[int, datetime],
        now: Optional[datetime] = None,
    ) -> ForecastState:
        """Run the forecast simulator over the snapshot."""
        return self._simulator.simulate(
            self._snapshot.employees,
            self._assessments,
            self._snapshot.measures,
            self._snapshot.plans,
            horizon,
            now=now,
        )

    def forecast(
        self,
        horizon: Union[int, datetime],
        now: Optional[datetime] = None,
    ) -> ProjectionResult:
        """Project the organisation to a future horizon.

        Args:
            horizon: Months from now, or an explicit future instant.
            now: Override current time (for testing).
        """
        state = self.simulate(horizon, now=now)
        projected = {k: v for k, v in state.levels.items() if self._is_known(k)}
        departing = state.departing_ids

        kpis = self._kpis(
            projected=projected,
            current_active=state.current_active_ids,
            projected_active=state.forecast_active_ids,
            departures=tuple(state.future_departures),
            completing_count=len(state.completing_measures),
            planned_count=len(state.planned_measures),
        )
        rows = self._employee_rows(
            projected, state.current_active_ids, state.forecast_active_ids, departing, state,
        )
        bars = self._category_bars(
            projected, state.current_active_ids, state.forecast_active_ids,
        )
        return ProjectionResult(
            kind="forecast",
            label=state.scenario.label,
            now=state.scenario.now,
            instant=state.scenario.horizon,
            months=state.scenario.months,
            kpis=kpis,
            employee_rows=rows,
            category_bars=bars,
        )

    def history(
        self,
        instant: datetime,
        now: Optional[datetime] = None,
    ) -> ProjectionResult:
        """Reconstruct the organisation at a past instant.

        "projected" fields carry the reconstructed past state and deltas
        read past minus today. Past levels are scored against today's
        targets. The past population is everyone still employed at the
        instant, including employees who have left since.
        """
        now = now or datetime.now(timezone.utc)
        past = self._reconstructor.state_at(
            self._assessments, self._snapshot.log_entries, instant,
        )
        past = {k: v for k, v in past.items() if self._is_known(k)}
        active = frozenset(
            e.employee_id for e in self._snapshot.employees if e.currently_active
        )
        past_active = frozenset(
            e.employee_id for e in self._snapshot.employees if e.active_at(instant)
        )
        kpis = self._kpis(
            projected=past,
            current_active=active,
            projected_active=past_active,
        )
        rows = self._employee_rows(past, active, past_active, frozenset(), None)
        bars = self._category_bars(past, active, past_active)
        return ProjectionResult(
            kind="history",
            label=instant.strftime("as of %Y-%m-%d"),
            now=now,
            instant=instant,
            kpis=kpis,
            employee_rows=rows,
            category_bars=bars,
        )

    def trend(
        self,
        months: Iterable[int],
        now: Optional[datetime] = None,
    ) -> Trend:
        """Forecast headline figures for several horizons, one call each."""
        now = now or datetime.now(timezone.utc)
        points: list[TrendPoint] = []
        for m in months:
            state = self.simulate(ForecastScenario.build(m, now=now))
            projected = {k: v for k, v in state.levels.items() if self._is_known(k)}
            active = state.forecast_active_ids
            points.append(TrendPoint(
                months=m,
                horizon=state.scenario.horizon,
                avg_score=dual_mode_average(self._points(projected, active)),
                deficit_count=self._deficits(projected, active),
                total_xp=self._total_xp(projected, active),
                active_employee_count=len(active),
            ))
        return Trend(points=tuple(points))

    # ------------------------------------------------------------------
    # Folding helpers
    # ------------------------------------------------------------------

    def _target(self, key: PairKey) -> int:
        employee_id, skill_id = key
        return self._targets.effective_target(self._employees[employee_id], skill_id)

    def _points(
        self,
        levels: dict[PairKey, int],
        active_ids: frozenset[str],
        skill_ids: Optional[set[str]] = None,
    ) -> list[ScoredPoint]:
        points: list[ScoredPoint] = []
        for key, level in levels.items():
            if key[0] not in active_ids:
                continue
            if skill_ids is not None and key[1] not in skill_ids:
                continue
            points.append(ScoredPoint(level=level, target=self._target(key)))
        return points

    def _deficits(self, levels: dict[PairKey, int], active_ids: frozenset[str]) -> int:
        """Deficits among assessed pairs, using the given level map."""
        count = 0
        for key in self._current_levels:
            if key[0] not in active_ids:
                continue
            level = levels.get(key, self._current_levels[key])
            if is_deficit(level, self._target(key)):
                count += 1
        return count

    @staticmethod
    def _total_xp(levels: dict[PairKey, int], active_ids: frozenset[str]) -> int:
        return sum(
            level for key, level in levels.items()
            if key[0] in active_ids and level > 0
        )

    def _kpis(
        self,
        projected: dict[PairKey, int],
        current_active: frozenset[str],
        projected_active: frozenset[str],
        departures: tuple[Employee, ...] = (),
        completing_count: int = 0,
        planned_count: int = 0,
    ) -> ProjectionKPIs:
        current = self._current_levels
        current_avg = dual_mode_average(self._points(current, current_active))
        projected_avg = dual_mode_average(self._points(projected, projected_active))
        current_deficits = self._deficits(current, current_active)
        projected_deficits = self._deficits(projected, projected_active)
        current_xp = self._total_xp(current, current_active)
        projected_xp = self._total_xp(projected, projected_active)
        return ProjectionKPIs(
            current_avg_score=current_avg,
            projected_avg_score=projected_avg,
            score_delta=score_delta(projected_avg, current_avg),
            current_deficit_count=current_deficits,
            projected_deficit_count=projected_deficits,
            deficit_delta=projected_deficits - current_deficits,
            current_total_xp=current_xp,
            projected_total_xp=projected_xp,
            xp_delta=projected_xp - current_xp,
            departure_count=len(departures),
            departure_names=tuple(e.display_name for e in departures),
            departure_ids=tuple(e.employee_id for e in departures),
            completing_measure_count=completing_count,
            total_planned_measure_count=planned_count,
        )

    def _employee_rows(
        self,
        projected: dict[PairKey, int],
        current_active: frozenset[str],
        projected_active: frozenset[str],
        departing_ids: frozenset[str],
        state: Optional[ForecastState],
    ) -> tuple[EmployeeRow, ...]:
        rows: list[EmployeeRow] = []
        for employee in self._snapshot.employees:
            if employee.employee_id not in current_active | projected_active:
                continue
            emp_id = employee.employee_id
            current_keys = [k for k in self._current_levels if k[0] == emp_id]
            extra_keys = [
                k for k in projected
                if k[0] == emp_id and k not in self._current_levels
            ]
            only_emp = frozenset({emp_id})

            current_avg: Optional[int] = None
            if emp_id in current_active:
                current_avg = dual_mode_average(self._points(
                    {k: self._current_levels[k] for k in current_keys}, only_emp,
                ))
            departing = emp_id in departing_ids
            projected_avg: Optional[int] = None
            if not departing and emp_id in projected_active:
                projected_avg = dual_mode_average(self._points(
                    {k: projected[k] for k in current_keys + extra_keys if k in projected},
                    only_emp,
                ))

            breakdown: list[SkillBreakdown] = []
            for key in current_keys + extra_keys:
                current_level = self._current_levels.get(key, 0)
                projected_level = projected.get(key, current_level)
                target = self._target(key)
                if not (
                    current_level > 0
                    or projected_level > 0
                    or (current_level >= 0 and target > 0)
                ):
                    continue
                breakdown.append(SkillBreakdown(
                    skill_id=key[1],
                    skill_name=self._catalogue.skill_name(key[1]),
                    current_level=current_level,
                    target_level=target or None,
                    current_fulfillment=max(0, fulfillment_score(current_level, target)),
                    projected_level=projected_level,
                    projected_fulfillment=max(0, fulfillment_score(projected_level, target)),
                ))
            # Worst-served skills first
            breakdown.sort(key=lambda b: b.current_fulfillment)

            planned = len(state.measures_for(emp_id)) if state else 0
            completing = len(state.measures_for(emp_id, completing=True)) if state else 0
            rows.append(EmployeeRow(
                employee_id=emp_id,
                employee_name=employee.display_name,
                department=employee.department,
                current_avg_score=current_avg,
                projected_avg_score=projected_avg,
                delta=score_delta(projected_avg, current_avg),
                is_departing=departing,
                departure_date=employee.deactivation_date if departing else None,
                planned_measure_count=planned,
                completing_measure_count=completing,
                skill_breakdown=tuple(breakdown),
            ))

        # Biggest improvers first
        rows.sort(key=lambda r: r.delta, reverse=True)
        return tuple(rows)

    def _category_bars(
        self,
        projected: dict[PairKey, int],
        current_active: frozenset[str],
        projected_active: frozenset[str],
    ) -> tuple[CategoryBar, ...]:
        bars: list[CategoryBar] = []
        for category in self._catalogue.categories():
            skill_ids = self._catalogue.skill_ids_for_category(category.category_id)
            current_avg = dual_mode_average(
                self._points(self._current_levels, current_active, skill_ids)
            )
            projected_avg = dual_mode_average(
                self._points(projected, projected_active, skill_ids)
            )
            bars.append(CategoryBar(
                category_id=category.category_id,
                category_name=category.name,
                current_avg_score=current_avg,
                projected_avg_score=projected_avg,
                delta=score_delta(projected_avg, current_avg),
            ))
        return tuple(bars)
