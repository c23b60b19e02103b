#!/usr/bin/env python3
"""Skill matrix configuration checks against the shipped config files.

Usage:
    python3 tools/check_config.py
    python3 tools/check_config.py path/to/config
"""

import json
import sys
from pathlib import Path

# Add src to path for skillmatrix imports
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from skillmatrix.policy.resolver import PolicyResolver
from skillmatrix.skills.catalogue import SkillCatalogue


def load_json(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def check_policy(config_dir: Path, errors: list[str]) -> None:
    try:
        resolver = PolicyResolver.from_config_dir(config_dir)
    except (FileNotFoundError, ValueError) as exc:
        errors.append(f"projection policy: {exc}")
        return

    planned = {s.value for s in resolver.planned_measure_statuses()}
    for closed in ("completed", "cancelled"):
        if closed in planned:
            errors.append(f"planned_measure_statuses must not include '{closed}'")

    active = {s.value for s in resolver.active_plan_statuses()}
    if "archived" in active:
        errors.append("active plan statuses must not include 'archived'")

    if resolver.default_horizon_months() <= 0:
        errors.append("default_horizon_months must be > 0")

    if not resolver.horizon_presets():
        errors.append("at least one horizon preset is required")

    if resolver.result_cache_size() < 0:
        errors.append("result_cache_size must be >= 0")


def check_catalogue(config_dir: Path, errors: list[str]) -> None:
    path = config_dir / SkillCatalogue.CATALOGUE_FILENAME
    if not path.exists():
        return
    raw = load_json(path)

    for kind in ("categories", "subcategories", "skills"):
        ids = [item.get("id") for item in raw.get(kind, [])]
        dupes = sorted({i for i in ids if ids.count(i) > 1})
        if dupes:
            errors.append(f"duplicate {kind} ids: {', '.join(dupes)}")

    try:
        catalogue = SkillCatalogue.from_dict(raw)
    except (KeyError, ValueError) as exc:
        errors.append(f"skill catalogue: {exc}")
        return

    for category in catalogue.categories():
        if not catalogue.skill_ids_for_category(category.category_id):
            errors.append(f"category '{category.category_id}' has no skills")


def check(config_dir: Path = ROOT / "config") -> int:
    errors: list[str] = []
    check_policy(config_dir, errors)
    check_catalogue(config_dir, errors)

    if errors:
        print("Config check failed:")
        for err in errors:
            print(f"- {err}")
        return 1

    print("Config check passed.")
    return 0


if __name__ == "__main__":
    target = Path(sys.argv[1]) if len(sys.argv) > 1 else ROOT / "config"
    raise SystemExit(check(target))
