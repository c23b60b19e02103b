"""Fulfillment scoring — normalises a level against its target.

fulfillment(level, target):
    level < 0          -> -1  (not assessed; excluded from averages)
    target > 0         -> min(100, round(level / target * 100))
    otherwise          -> level (the raw scale doubles as fulfillment)

Dual-mode averaging (shared by every aggregation site):
- Points WITH a target are averaged inclusive of 0% and exclusive of -1.
- Points WITHOUT a target are averaged exclusive of both 0 and -1, so an
  unrated "extra" skill never drags down an average it cannot be
  measured against.
- If a scope holds at least one point with a target, only those points
  count; the raw class is a fallback for scopes with no target at all.
- An empty scope averages to None, never 0.

Rounding is half-up on integers, so 62.5 becomes 63.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from skillmatrix.models.skill import NOT_ASSESSED


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def fulfillment_score(level: int, target: Optional[int] = None) -> int:
    """Normalise a raw level against a target.

    Returns -1 for unassessed levels, a value in [0, 100] when a target
    is defined, and the raw level otherwise.
    """
    if level < 0:
        return NOT_ASSESSED
    if target is not None and target > 0:
        return min(100, round_half_up(level / target * 100))
    return level


@dataclass(frozen=True)
class ScoredPoint:
    """One (level, target) data point inside an aggregation scope."""
    level: int
    target: int = 0

    @property
    def has_target(self) -> bool:
        return self.target > 0

    @property
    def fulfillment(self) -> int:
        return fulfillment_score(self.level, self.target)


def average_fulfillment(values: Iterable[int]) -> Optional[int]:
    """Average of fulfillment values, keeping 0% and dropping -1."""
    valid = [v for v in values if v >= 0]
    if not valid:
        return None
    return round_half_up(sum(valid) / len(valid))


def average_raw(levels: Iterable[int]) -> Optional[int]:
    """Average of raw levels, dropping 0 and -1."""
    valid = [v for v in levels if v > 0]
    if not valid:
        return None
    return round_half_up(sum(valid) / len(valid))


def dual_mode_average(points: Iterable[ScoredPoint]) -> Optional[int]:
    """Average a scope of points using the dual-mode rule."""
    with_target: list[int] = []
    without_target: list[int] = []
    for point in points:
        if point.level < 0:
            continue
        if point.has_target:
            with_target.append(point.fulfillment)
        else:
            without_target.append(point.level)
    if with_target:
        return average_fulfillment(with_target)
    return average_raw(without_target)


def is_deficit(level: int, target: int) -> bool:
    """A pair is in deficit when a target exists and the level is below it."""
    return target > 0 and level < target
