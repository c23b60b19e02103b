"""Temporal skill-state projection engine — targets, scoring, replay, forecast."""

from skillmatrix.projection.aggregator import ProjectionAggregator
from skillmatrix.projection.forecast import ForecastScenario, ForecastSimulator, ForecastState
from skillmatrix.projection.fulfillment import dual_mode_average, fulfillment_score
from skillmatrix.projection.history import HistoricalReconstructor
from skillmatrix.projection.results import ProjectionResult, Trend
from skillmatrix.projection.targets import RoleInheritanceError, TargetResolver

__all__ = [
    "ProjectionAggregator",
    "ForecastScenario",
    "ForecastSimulator",
    "ForecastState",
    "dual_mode_average",
    "fulfillment_score",
    "HistoricalReconstructor",
    "ProjectionResult",
    "Trend",
    "RoleInheritanceError",
    "TargetResolver",
]
