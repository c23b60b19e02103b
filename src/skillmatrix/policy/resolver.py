"""Policy resolver — loads and validates the projection policy config.

All tunable behaviour of the engine lives in config/projection_policy.json:
which measure statuses count as planned, which plan statuses count as
active, named forecast horizons, and dashboard thresholds.

Usage:
    resolver = PolicyResolver.from_config_dir(Path("config"))
    statuses = resolver.planned_measure_statuses()
    months = resolver.horizon_preset("6m")
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from skillmatrix.models.qualification import MeasureStatus, PlanStatus
from skillmatrix.models.skill import VALID_LEVELS


class PolicyResolver:
    """Read-only access to the projection policy.

    The policy is validated on construction; an invalid policy never
    reaches the engine.
    """

    POLICY_FILENAME = "projection_policy.json"

    def __init__(self, policy_data: dict[str, Any]) -> None:
        self._data = policy_data
        self._validate()

    @classmethod
    def from_config_dir(cls, config_dir: Path) -> PolicyResolver:
        """Load the policy from a config directory.

        Raises:
            FileNotFoundError: If projection_policy.json does not exist.
            ValueError: If the policy is structurally invalid.
        """
        path = config_dir / cls.POLICY_FILENAME
        if not path.exists():
            raise FileNotFoundError(f"Projection policy not found: {path}")
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        return cls(data)

    @classmethod
    def default(cls) -> PolicyResolver:
        """Built-in policy matching the shipped config file."""
        return cls({
            "version": "builtin",
            "levels": {"scale": list(VALID_LEVELS), "not_assessed": -1},
            "forecast": {
                "planned_measure_statuses": ["pending", "in_progress"],
                "horizon_presets_months": {"3m": 3, "6m": 6, "12m": 12, "24m": 24},
                "default_horizon_months": 6,
            },
            "plans": {"active_statuses": ["active", "draft"]},
            "dashboard": {
                "coverage_threshold": 50,
                "top_skill_count": 3,
                "learning_need_count": 3,
            },
            "service": {"result_cache_size": 32},
        })

    def _validate(self) -> None:
        for section in ("version", "levels", "forecast", "plans", "dashboard"):
            if section not in self._data:
                raise ValueError(f"Projection policy missing '{section}' field")

        scale = self._data["levels"].get("scale")
        if not isinstance(scale, list) or sorted(scale) != sorted(VALID_LEVELS):
            raise ValueError(
                f"Projection policy level scale must be {list(VALID_LEVELS)}, got {scale!r}"
            )

        valid_measure = {s.value for s in MeasureStatus}
        for status in self._data["forecast"].get("planned_measure_statuses", []):
            if status not in valid_measure:
                raise ValueError(f"Unknown measure status in policy: {status!r}")
        if not self._data["forecast"].get("planned_measure_statuses"):
            raise ValueError("Projection policy needs at least one planned measure status")

        valid_plan = {s.value for s in PlanStatus}
        for status in self._data["plans"].get("active_statuses", []):
            if status not in valid_plan:
                raise ValueError(f"Unknown plan status in policy: {status!r}")

        for name, months in self._data["forecast"].get("horizon_presets_months", {}).items():
            if not isinstance(months, int) or months <= 0:
                raise ValueError(
                    f"Horizon preset '{name}' must be a positive integer, got {months!r}"
                )

        threshold = self._data["dashboard"].get("coverage_threshold", 50)
        if not (0 <= threshold <= 100):
            raise ValueError(f"coverage_threshold must be in [0, 100], got {threshold}")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def version(self) -> str:
        return self._data.get("version", "unknown")

    def planned_measure_statuses(self) -> frozenset[MeasureStatus]:
        """Measure statuses that take part in forecasting."""
        return frozenset(
            MeasureStatus(s) for s in self._data["forecast"]["planned_measure_statuses"]
        )

    def active_plan_statuses(self) -> frozenset[PlanStatus]:
        return frozenset(PlanStatus(s) for s in self._data["plans"].get("active_statuses", []))

    def horizon_presets(self) -> dict[str, int]:
        """Named forecast horizons in months, ordered by length."""
        presets = self._data["forecast"].get("horizon_presets_months", {})
        return dict(sorted(presets.items(), key=lambda item: item[1]))

    def horizon_preset(self, name: str) -> int:
        """Months for a named horizon.

        Raises:
            KeyError: If the preset does not exist.
        """
        presets = self._data["forecast"].get("horizon_presets_months", {})
        if name not in presets:
            raise KeyError(f"Unknown horizon preset: {name}")
        return presets[name]

    def default_horizon_months(self) -> int:
        return self._data["forecast"].get("default_horizon_months", 6)

    def dashboard_params(self) -> dict[str, int]:
        config = self._data["dashboard"]
        return {
            "coverage_threshold": config.get("coverage_threshold", 50),
            "top_skill_count": config.get("top_skill_count", 3),
            "learning_need_count": config.get("learning_need_count", 3),
        }

    def result_cache_size(self) -> int:
        return self._data.get("service", {}).get("result_cache_size", 32)
