"""Tests for dashboard analytics helpers and period comparison."""

from datetime import datetime, timezone

from skillmatrix.analytics.dashboard import (
    ComparisonPeriod,
    average_gap,
    average_score,
    biggest_skill_gaps,
    department_stats,
    goal_fulfillment,
    percentage_change,
    period_boundaries,
    period_comparison,
    skill_coverage,
)
from skillmatrix.models.assessment import Assessment
from skillmatrix.models.skill import LEVELS, level_by_value, next_level, score_band


def utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


class TestLevelScale:
    def test_lookup(self) -> None:
        assert level_by_value(100).title == "Expert / mentor"
        assert level_by_value(-1).label == "N/A"
        assert level_by_value(30) is None

    def test_toggle_cycle(self) -> None:
        values = [lvl.value for lvl in LEVELS]
        assert next_level(0) == -1
        assert next_level(-1) == 25
        assert next_level(100) == 0
        assert next_level(42) == values[0]

    def test_bands(self) -> None:
        assert score_band(None) == "none"
        assert score_band(0) == "gray"
        assert score_band(10) == "orange"
        assert score_band(25) == "yellow"
        assert score_band(50) == "lime"
        assert score_band(75) == "green"


class TestPeriodBoundaries:
    def test_quarter(self) -> None:
        b = period_boundaries(ComparisonPeriod.QUARTER, utc(2026, 5, 10))
        assert b.current_start == utc(2026, 4, 1)
        assert b.previous_start == utc(2026, 1, 1)
        assert b.previous_end == utc(2026, 4, 1)

    def test_first_quarter_wraps_year(self) -> None:
        b = period_boundaries(ComparisonPeriod.QUARTER, utc(2026, 2, 1))
        assert b.previous_start == utc(2025, 10, 1)

    def test_year(self) -> None:
        b = period_boundaries(ComparisonPeriod.YEAR, utc(2026, 8, 1))
        assert b.current_start == utc(2026, 1, 1)
        assert b.previous_start == utc(2025, 1, 1)


class TestHelpers:
    def test_average_score_ignores_not_assessed(self) -> None:
        assessments = [Assessment("E", "A", 50), Assessment("E", "B", -1), Assessment("E", "C", 0)]
        assert average_score(assessments) == 25

    def test_average_score_empty(self) -> None:
        assert average_score([Assessment("E", "A", -1)]) is None

    def test_percentage_change(self) -> None:
        assert percentage_change(200, 250) == 25
        assert percentage_change(0, 10) == 100
        assert percentage_change(0, 0) == 0

    def test_skill_coverage(self) -> None:
        assessments = [Assessment("A", "S", 50), Assessment("B", "S", 25), Assessment("C", "S", 75)]
        assert skill_coverage(assessments, total_employees=4) == {"count": 2, "percentage": 50}
        assert skill_coverage([], total_employees=0) == {"count": 0, "percentage": 0}

    def test_goal_fulfillment(self) -> None:
        assessments = [
            Assessment("A", "S", 50, target_level=50),
            Assessment("B", "S", 25, target_level=75),
            Assessment("C", "S", 100),
        ]
        assert goal_fulfillment(assessments) == {"achieved": 1, "total": 2, "percentage": 50}

    def test_average_gap(self) -> None:
        assessments = [
            Assessment("A", "S", 50, target_level=100),
            Assessment("B", "S", 75, target_level=75),
        ]
        assert average_gap(assessments) == 25.0
        assert average_gap([]) == 0.0

    def test_biggest_gaps(self, catalogue) -> None:
        assessments = [
            Assessment("A", "skill-welding", 25, target_level=75),
            Assessment("A", "skill-spc", 50, target_level=75),
            Assessment("A", "skill-turning", 75, target_level=75),
        ]
        gaps = biggest_skill_gaps(assessments, catalogue)
        assert [g["skill_id"] for g in gaps] == ["skill-welding", "skill-spc"]
        assert gaps[0]["avg_gap"] == 50

    def test_department_stats(self, employees, assessments) -> None:
        stats = department_stats(employees, assessments)
        by_name = {s["department"]: s for s in stats}
        assert by_name["Quality"]["avg_score"] == 50
        assert by_name["Production"]["employee_count"] == 3


class TestPeriodComparison:
    def test_quarter(self, assessments, log_entries, now) -> None:
        comparison = period_comparison(
            assessments, log_entries, ComparisonPeriod.QUARTER, reference=now,
        )
        assert comparison.previous_xp == 375
        assert comparison.current_xp == 400
        assert comparison.change_percent == 7

    def test_to_dict(self, assessments, log_entries, now) -> None:
        data = period_comparison(
            assessments, log_entries, ComparisonPeriod.YEAR, reference=now,
        ).to_dict()
        assert data["period"] == "year"
        assert data["boundaries"]["current_start"] == "2026-01-01T00:00:00+00:00"
