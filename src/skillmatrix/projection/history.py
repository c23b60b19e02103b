"""Historical reconstructor — recovers past levels from the change log.

The log is append-only and chained per (employee, skill): every entry's
previous_level is the level that held just before it. Replaying every
entry newer than the query instant in reverse chronological order, and
overwriting each pair with previous_level, leaves each pair at the level
it had at the query instant. Pairs with no newer entries keep their
current level.

Only levels are reconstructed. Targets are not versioned, so any
fulfillment computed from a reconstructed state is scored against
today's targets.

Pure computation — no side effects. The engine trusts the chain
invariant; AssessmentLog.verify_chain() checks it separately.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from skillmatrix.models.assessment import Assessment, AssessmentLogEntry, PairKey


class HistoricalReconstructor:
    """Rebuilds the per-pair level map as of a past instant.

    Usage:
        reconstructor = HistoricalReconstructor()
        levels = reconstructor.state_at(assessments, log_entries, instant)
    """

    def state_at(
        self,
        assessments: Iterable[Assessment],
        log_entries: Iterable[AssessmentLogEntry],
        instant: datetime,
    ) -> dict[PairKey, int]:
        """Return {(employee_id, skill_id): level} as of instant.

        Entries with timestamp exactly equal to instant are treated as
        already applied at instant.
        """
        levels: dict[PairKey, int] = {a.key: a.level for a in assessments}

        # Ties on timestamp fall back to append order
        newer = [
            (entry.timestamp, position, entry)
            for position, entry in enumerate(log_entries)
            if entry.timestamp > instant
        ]
        newer.sort(key=lambda item: (item[0], item[1]), reverse=True)

        for _, _, entry in newer:
            levels[entry.key] = entry.previous_level

        return levels

    def total_xp_at(
        self,
        assessments: Iterable[Assessment],
        log_entries: Iterable[AssessmentLogEntry],
        instant: datetime,
    ) -> int:
        """Sum of positive reconstructed levels as of instant."""
        state = self.state_at(assessments, log_entries, instant)
        return sum(level for level in state.values() if level > 0)
