"""Projection service — unified facade over the projection engine.

This is the primary interface for programmatic access. It wires the
policy, the snapshot and the engine components together:
- Forecasts (single horizon, named preset, or a trend over horizons)
- Historical reconstruction at a past instant
- Dashboard headline figures
- Period comparison (XP now vs. start of quarter/year)
- Skill gaps and employee metrics
- Change-log chain verification

All operations return a ServiceResult. Domain and configuration problems
(unknown preset, role inheritance cycle, bad instant) produce a failed
result with error messages instead of raising.

A service instance represents one snapshot as of one moment ("now").
Results are memoised by (snapshot version, operation, argument, now);
identical requests reuse the computed result.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Callable, Hashable, Iterable, Optional, Union

from skillmatrix.analytics.dashboard import (
    ComparisonPeriod,
    average_gap,
    average_score,
    biggest_skill_gaps,
    department_stats,
    goal_fulfillment,
    period_comparison,
    skill_coverage,
)
from skillmatrix.analytics.gaps import SkillGapAnalyzer
from skillmatrix.analytics.privacy import Pseudonymizer
from skillmatrix.models.skill import score_band
from skillmatrix.models.snapshot import OrganizationSnapshot
from skillmatrix.persistence.assessment_log import AssessmentLog
from skillmatrix.persistence.codec import as_utc
from skillmatrix.policy.resolver import PolicyResolver
from skillmatrix.projection.aggregator import ProjectionAggregator
from skillmatrix.projection.results import ProjectionResult
from skillmatrix.projection.targets import RoleInheritanceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceResult:
    """Result of a service operation."""
    success: bool
    errors: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)


class ProjectionService:
    """Facade over the projection engine for one snapshot.

    Usage:
        resolver = PolicyResolver.from_config_dir(config_dir)
        snapshot = SnapshotStore(path).load()
        service = ProjectionService(resolver, snapshot)

        result = service.forecast(6)            # or "6m", or a datetime
        result = service.trend([3, 6, 12])
        result = service.history(datetime(2025, 1, 1, tzinfo=timezone.utc))
        result = service.skill_gaps("emp-1")
    """

    def __init__(
        self,
        resolver: PolicyResolver,
        snapshot: OrganizationSnapshot,
        now: Optional[datetime] = None,
        pseudonymizer: Optional[Pseudonymizer] = None,
    ) -> None:
        self._resolver = resolver
        self._snapshot = snapshot
        self._now = as_utc(now) if now else datetime.now(timezone.utc)
        self._aggregator = ProjectionAggregator(resolver, snapshot)
        self._gaps = SkillGapAnalyzer(resolver, snapshot)
        self._pseudonymizer = pseudonymizer
        self._cache: OrderedDict[Hashable, Any] = OrderedDict()
        self._cache_size = resolver.result_cache_size()
        self._cache_lock = threading.Lock()

    @property
    def now(self) -> datetime:
        return self._now

    # ------------------------------------------------------------------
    # Caching
    # ------------------------------------------------------------------

    def _cached(self, key: Hashable, compute: Callable[[], Any]) -> Any:
        if not self._snapshot.version or self._cache_size <= 0:
            return compute()
        full_key = (self._snapshot.version, key)
        with self._cache_lock:
            if full_key in self._cache:
                self._cache.move_to_end(full_key)
                return self._cache[full_key]
        value = compute()
        with self._cache_lock:
            self._cache[full_key] = value
            self._cache.move_to_end(full_key)
            while len(self._cache) > self._cache_size:
                self._cache.popitem(last=False)
        return value

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------

    def _resolve_horizon(self, horizon: Union[int, str, datetime, None]) -> Union[int, datetime]:
        if horizon is None:
            return self._resolver.default_horizon_months()
        if isinstance(horizon, str):
            return self._resolver.horizon_preset(horizon)
        if isinstance(horizon, datetime):
            return as_utc(horizon)
        return horizon

    def forecast(
        self,
        horizon: Union[int, str, datetime, None] = None,
        anonymize: bool = False,
    ) -> ServiceResult:
        """Forecast to a horizon: months, a preset name, or an instant."""
        try:
            resolved = self._resolve_horizon(horizon)
        except KeyError as exc:
            return ServiceResult(success=False, errors=[str(exc.args[0])])
        if isinstance(resolved, datetime) and resolved <= self._now:
            return ServiceResult(
                success=False,
                errors=[f"Forecast horizon {resolved.isoformat()} is not in the future"],
            )
        if isinstance(resolved, int) and resolved < 0:
            return ServiceResult(
                success=False,
                errors=[f"Forecast horizon must be >= 0 months, got {resolved}"],
            )

        try:
            result = self._cached(
                ("forecast", resolved, self._now),
                lambda: self._aggregator.forecast(resolved, now=self._now),
            )
        except RoleInheritanceError as exc:
            logger.warning("Forecast failed: %s", exc)
            return ServiceResult(success=False, errors=[str(exc)])

        logger.info(
            "Forecast %s: avg %s -> %s, %d departure(s), %d completing measure(s)",
            result.label,
            result.kpis.current_avg_score,
            result.kpis.projected_avg_score,
            result.kpis.departure_count,
            result.kpis.completing_measure_count,
        )
        return ServiceResult(success=True, data=self._present(result, anonymize))

    def trend(self, months: Optional[Iterable[int]] = None) -> ServiceResult:
        """Headline forecast figures for several horizons.

        Defaults to the configured horizon presets.
        """
        points = tuple(months) if months is not None else tuple(
            self._resolver.horizon_presets().values()
        )
        if any(m < 0 for m in points):
            return ServiceResult(success=False, errors=["Trend horizons must be >= 0 months"])
        try:
            trend = self._cached(
                ("trend", points, self._now),
                lambda: self._aggregator.trend(points, now=self._now),
            )
        except RoleInheritanceError as exc:
            logger.warning("Trend failed: %s", exc)
            return ServiceResult(success=False, errors=[str(exc)])
        return ServiceResult(success=True, data=trend.to_dict())

    def history(self, instant: datetime, anonymize: bool = False) -> ServiceResult:
        """State of the organisation at a past instant.

        Past levels are scored against today's targets.
        """
        instant = as_utc(instant)
        if instant >= self._now:
            return ServiceResult(
                success=False,
                errors=[f"History instant {instant.isoformat()} is not in the past"],
            )
        try:
            result = self._cached(
                ("history", instant, self._now),
                lambda: self._aggregator.history(instant, now=self._now),
            )
        except RoleInheritanceError as exc:
            logger.warning("History reconstruction failed: %s", exc)
            return ServiceResult(success=False, errors=[str(exc)])
        logger.info(
            "History %s: avg then %s, now %s",
            result.label,
            result.kpis.projected_avg_score,
            result.kpis.current_avg_score,
        )
        return ServiceResult(success=True, data=self._present(result, anonymize))

    def dashboard(self) -> ServiceResult:
        """Headline figures over currently active employees."""
        params = self._resolver.dashboard_params()
        catalogue = self._aggregator.catalogue
        active = [e for e in self._snapshot.employees if e.currently_active]
        active_ids = {e.employee_id for e in active}
        assessments = [
            a for a in self._snapshot.assessments
            if a.employee_id in active_ids and catalogue.has_skill(a.skill_id)
        ]
        coverage = {
            skill.skill_id: skill_coverage(
                [a for a in assessments if a.skill_id == skill.skill_id],
                len(active),
                threshold=params["coverage_threshold"],
            )
            for skill in catalogue.skills()
        }
        score = average_score(assessments)
        return ServiceResult(
            success=True,
            data={
                "employee_count": len(active),
                "skill_count": catalogue.skill_count(),
                "average_score": score,
                "score_band": score_band(score),
                "goal_fulfillment": goal_fulfillment(assessments),
                "average_gap": average_gap(assessments),
                "biggest_gaps": biggest_skill_gaps(assessments, catalogue),
                "departments": department_stats(active, assessments),
                "coverage": coverage,
            },
        )

    def period_comparison(self, period: Union[str, ComparisonPeriod]) -> ServiceResult:
        try:
            period = ComparisonPeriod(period)
        except ValueError:
            return ServiceResult(success=False, errors=[f"Unknown comparison period: {period}"])
        comparison = period_comparison(
            self._snapshot.assessments,
            self._snapshot.log_entries,
            period,
            reference=self._now,
        )
        return ServiceResult(success=True, data=comparison.to_dict())

    # ------------------------------------------------------------------
    # Employees
    # ------------------------------------------------------------------

    def skill_gaps(self, employee_id: str, target_role: Optional[str] = None) -> ServiceResult:
        try:
            gaps = self._gaps.skill_gaps(employee_id, target_role_ref=target_role)
        except RoleInheritanceError as exc:
            logger.warning("Gap analysis failed for %s: %s", employee_id, exc)
            return ServiceResult(success=False, errors=[str(exc)])
        return ServiceResult(
            success=True,
            data={
                "employee_id": employee_id,
                "gaps": [
                    {
                        "skill_id": g.skill_id,
                        "skill_name": g.skill_name,
                        "category_id": g.category_id,
                        "category_name": g.category_name,
                        "current_level": g.current_level,
                        "target_level": g.target_level,
                        "gap": g.gap,
                    }
                    for g in gaps
                ],
            },
        )

    def employee_metrics(self, employee_id: str) -> ServiceResult:
        try:
            metrics = self._gaps.employee_metrics(employee_id)
        except RoleInheritanceError as exc:
            logger.warning("Metrics failed for %s: %s", employee_id, exc)
            return ServiceResult(success=False, errors=[str(exc)])
        if metrics is None:
            return ServiceResult(success=False, errors=[f"Unknown employee: {employee_id}"])
        return ServiceResult(success=True, data=metrics.to_dict())

    # ------------------------------------------------------------------
    # Log
    # ------------------------------------------------------------------

    def verify_log(self) -> ServiceResult:
        """Check the change-log chain the historical replay relies on."""
        log = AssessmentLog(entries=self._snapshot.log_entries)
        violations = log.verify_chain()
        return ServiceResult(
            success=not violations,
            errors=[v.describe() for v in violations],
            data={"entries": log.count, "violations": len(violations)},
        )

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    def _present(self, result: ProjectionResult, anonymize: bool) -> dict[str, Any]:
        if anonymize:
            result = self._anonymize(result)
        return result.to_dict()

    def _anonymize(self, result: ProjectionResult) -> ProjectionResult:
        pseudonymizer = self._pseudonymizer or Pseudonymizer(
            Pseudonymizer.build_table(self._snapshot.employees)
        )
        employees = {e.employee_id: e for e in self._snapshot.employees}
        rows = tuple(
            replace(row, employee_name=pseudonymizer.display_name(employees[row.employee_id]))
            for row in result.employee_rows
        )
        names = tuple(
            pseudonymizer.display_name(employees[emp_id])
            for emp_id in result.kpis.departure_ids
        )
        kpis = replace(result.kpis, departure_names=names)
        return replace(result, employee_rows=rows, kpis=kpis)
