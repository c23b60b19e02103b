"""Tests for the forecast simulator: departures and completing measures."""

from datetime import datetime, timezone

import pytest

from skillmatrix.models.assessment import Assessment
from skillmatrix.models.organization import Employee
from skillmatrix.models.qualification import (
    MeasureStatus,
    QualificationMeasure,
    QualificationPlan,
)
from skillmatrix.projection.forecast import ForecastScenario, ForecastSimulator, add_months


def utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


@pytest.fixture
def simulator(resolver) -> ForecastSimulator:
    return ForecastSimulator(resolver)


@pytest.fixture
def state(simulator, employees, assessments, measures, plans, now):
    return simulator.simulate(employees, assessments, measures, plans, 3, now=now)


class TestAddMonths:
    def test_plain(self) -> None:
        assert add_months(utc(2026, 1, 15), 3) == utc(2026, 4, 15)

    def test_year_wrap(self) -> None:
        assert add_months(utc(2026, 11, 30), 3) == utc(2027, 2, 28)

    def test_clamps_to_month_end(self) -> None:
        assert add_months(utc(2026, 1, 31), 1) == utc(2026, 2, 28)
        assert add_months(utc(2028, 1, 31), 1) == utc(2028, 2, 29)

    def test_zero(self) -> None:
        assert add_months(utc(2026, 5, 31), 0) == utc(2026, 5, 31)


class TestScenario:
    def test_months(self, now) -> None:
        scenario = ForecastScenario.build(6, now=now)
        assert scenario.label == "6 months"
        assert scenario.months == 6
        assert scenario.horizon == utc(2026, 7, 15)

    def test_explicit_instant(self, now) -> None:
        scenario = ForecastScenario.build(utc(2026, 12, 31), now=now)
        assert scenario.label == "until 2026-12-31"
        assert scenario.months is None

    def test_negative_months_rejected(self, now) -> None:
        with pytest.raises(ValueError):
            ForecastScenario.build(-1, now=now)


class TestDepartures:
    def test_departure_inside_window(self, state) -> None:
        assert [e.employee_id for e in state.future_departures] == ["emp-ben"]
        assert state.is_departing("emp-ben")

    def test_departed_not_in_forecast(self, state) -> None:
        assert state.forecast_active_ids == frozenset({"emp-anna", "emp-cara"})

    def test_already_inactive_excluded(self, state) -> None:
        assert "emp-dan" not in state.current_active_ids
        assert state.already_departed_ids == frozenset({"emp-dan"})

    def test_departure_outside_window(self, simulator, employees, assessments, now) -> None:
        state = simulator.simulate(employees, assessments, [], [], utc(2026, 2, 1), now=now)
        assert state.future_departures == ()

    def test_departure_at_horizon_counts(self, simulator, employees, assessments, now) -> None:
        state = simulator.simulate(employees, assessments, [], [], utc(2026, 2, 15), now=now)
        assert state.departing_ids == frozenset({"emp-ben"})


class TestMeasures:
    def test_completing_measure_raises_level(self, state) -> None:
        """Measure targets 100 two months out, horizon 3 months: level becomes 100."""
        assert state.levels[("emp-anna", "skill-turning")] == 100

    def test_late_measure_not_applied(self, state) -> None:
        assert state.levels[("emp-anna", "skill-cnc-programming")] == 25

    def test_closed_measures_ignored(self, state) -> None:
        ids = {m.measure_id for m in state.planned_measures}
        assert "m-anna-milling" not in ids
        assert ("emp-anna", "skill-milling") not in state.levels

    def test_departing_employee_not_raised(self, state) -> None:
        assert state.levels[("emp-ben", "skill-first-aid")] == 0

    def test_not_assessed_pair_raised(self, state) -> None:
        assert state.levels[("emp-cara", "skill-spc")] == 50

    def test_counts(self, state) -> None:
        assert len(state.planned_measures) == 5
        assert {m.measure_id for m in state.completing_measures} == {
            "m-anna-turning", "m-ben-first-aid", "m-orphan", "m-cara-spc",
        }

    def test_measures_for(self, state) -> None:
        assert len(state.measures_for("emp-anna")) == 2
        assert len(state.measures_for("emp-anna", completing=True)) == 1

    def test_never_lowers(self, simulator, now) -> None:
        employees = [Employee("E")]
        assessments = [Assessment("E", "S", 100)]
        plans = [QualificationPlan("P", "E")]
        measures = [
            QualificationMeasure("M", "P", "S", 25, 50, target_date=utc(2026, 2, 1)),
        ]
        state = simulator.simulate(employees, assessments, measures, plans, 3, now=now)
        assert state.levels[("E", "S")] == 100

    def test_several_measures_take_max(self, simulator, now) -> None:
        employees = [Employee("E")]
        plans = [QualificationPlan("P", "E")]
        measures = [
            QualificationMeasure("M1", "P", "S", 0, 75, target_date=utc(2026, 2, 1)),
            QualificationMeasure(
                "M2", "P", "S", 0, 50, status=MeasureStatus.IN_PROGRESS,
                target_date=utc(2026, 2, 1),
            ),
        ]
        state = simulator.simulate(employees, [], measures, plans, 3, now=now)
        assert state.levels[("E", "S")] == 75

    def test_undated_measure_never_completes(self, simulator, now) -> None:
        employees = [Employee("E")]
        plans = [QualificationPlan("P", "E")]
        measures = [QualificationMeasure("M", "P", "S", 0, 75)]
        state = simulator.simulate(employees, [], measures, plans, 24, now=now)
        assert state.completing_measures == ()


class TestMonotonicity:
    @pytest.mark.parametrize("months", [0, 1, 3, 6, 12, 24])
    def test_levels_never_drop(
        self, simulator, employees, assessments, measures, plans, now, months,
    ) -> None:
        state = simulator.simulate(employees, assessments, measures, plans, months, now=now)
        for a in assessments:
            assert state.levels[a.key] >= a.level

    def test_longer_horizon_dominates(
        self, simulator, employees, assessments, measures, plans, now,
    ) -> None:
        short = simulator.simulate(employees, assessments, measures, plans, 3, now=now)
        long = simulator.simulate(employees, assessments, measures, plans, 12, now=now)
        for key, level in short.levels.items():
            if key[0] in long.forecast_active_ids:
                assert long.levels[key] >= level

    def test_zero_horizon_is_current(
        self, simulator, employees, assessments, measures, plans, now,
    ) -> None:
        state = simulator.simulate(employees, assessments, measures, plans, 0, now=now)
        assert state.levels == {a.key: a.level for a in assessments}
        assert state.future_departures == ()
