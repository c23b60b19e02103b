"""Analytics around the projection engine — dashboard figures, gaps, privacy."""

from skillmatrix.analytics.dashboard import ComparisonPeriod, period_boundaries, period_comparison
from skillmatrix.analytics.gaps import EmployeeMetrics, SkillGap, SkillGapAnalyzer
from skillmatrix.analytics.privacy import Pseudonymizer

__all__ = [
    "ComparisonPeriod",
    "period_boundaries",
    "period_comparison",
    "EmployeeMetrics",
    "SkillGap",
    "SkillGapAnalyzer",
    "Pseudonymizer",
]
