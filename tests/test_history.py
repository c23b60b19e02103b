"""Tests for reconstructing past levels from the change log."""

from datetime import datetime, timezone

from skillmatrix.models.assessment import Assessment, AssessmentLogEntry
from skillmatrix.projection.history import HistoricalReconstructor


def utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


class TestStateAt:
    def test_now_equals_current(self, assessments, log_entries, now) -> None:
        state = HistoricalReconstructor().state_at(assessments, log_entries, now)
        assert state == {a.key: a.level for a in assessments}

    def test_rewinds_newer_entries(self, assessments, log_entries) -> None:
        state = HistoricalReconstructor().state_at(assessments, log_entries, utc(2025, 10, 1))
        assert state[("emp-anna", "skill-cnc-programming")] == 0
        assert state[("emp-ben", "skill-turning")] == 50
        assert state[("emp-anna", "skill-turning")] == 50

    def test_before_all_entries(self, assessments, log_entries) -> None:
        """Every logged pair rewinds to the chain start."""
        state = HistoricalReconstructor().state_at(assessments, log_entries, utc(2024, 1, 1))
        for entry in log_entries:
            assert state[entry.key] == 0
        # Never logged: keeps its level
        assert state[("emp-dan", "skill-turning")] == 100

    def test_entry_at_instant_counts_as_applied(self) -> None:
        assessments = [Assessment("E", "S", 50)]
        entries = [AssessmentLogEntry("E", "S", 25, 50, utc(2025, 6, 1))]
        state = HistoricalReconstructor().state_at(assessments, entries, utc(2025, 6, 1))
        assert state[("E", "S")] == 50

    def test_same_timestamp_uses_append_order(self) -> None:
        stamp = utc(2025, 6, 1)
        assessments = [Assessment("E", "S", 75)]
        entries = [
            AssessmentLogEntry("E", "S", 25, 50, stamp),
            AssessmentLogEntry("E", "S", 50, 75, stamp),
        ]
        state = HistoricalReconstructor().state_at(assessments, entries, utc(2025, 5, 1))
        assert state[("E", "S")] == 25

    def test_round_trip(self, assessments, log_entries) -> None:
        """Replaying newer entries forward restores today's state."""
        instant = utc(2025, 7, 1)
        state = HistoricalReconstructor().state_at(assessments, log_entries, instant)
        for entry in sorted(log_entries, key=lambda e: e.timestamp):
            if entry.timestamp > instant:
                assert state[entry.key] == entry.previous_level
                state[entry.key] = entry.new_level
        assert state == {a.key: a.level for a in assessments}

    def test_inputs_untouched(self, assessments, log_entries) -> None:
        before = list(assessments)
        HistoricalReconstructor().state_at(assessments, log_entries, utc(2025, 1, 1))
        assert list(assessments) == before


class TestTotalXp:
    def test_sums_positive_levels(self, assessments, log_entries, now) -> None:
        xp = HistoricalReconstructor().total_xp_at(assessments, log_entries, now)
        assert xp == 400

    def test_past_xp(self, assessments, log_entries) -> None:
        xp = HistoricalReconstructor().total_xp_at(assessments, log_entries, utc(2026, 1, 1))
        assert xp == 375
