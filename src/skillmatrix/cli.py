"""Skill matrix CLI — command-line interface for the projection engine.

Usage:
    skillmatrix forecast --months 6
    skillmatrix forecast --preset 12m --anonymize
    skillmatrix forecast --until 2027-01-01
    skillmatrix trend --months 3 6 12 24
    skillmatrix history --at 2025-06-30
    skillmatrix dashboard
    skillmatrix compare --period quarter
    skillmatrix gaps --employee emp-1 --role "Team Lead"
    skillmatrix metrics --employee emp-1
    skillmatrix verify-log --log data/assessment_log.jsonl
    skillmatrix levels

Settings can come from a .env file at the project root:
    SKILLMATRIX_CONFIG_DIR, SKILLMATRIX_DATA_DIR, SKILLMATRIX_LOG_LEVEL
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from skillmatrix.analytics.dashboard import ComparisonPeriod
from skillmatrix.models.skill import LEVELS
from skillmatrix.persistence.assessment_log import AssessmentLog
from skillmatrix.persistence.codec import parse_timestamp
from skillmatrix.persistence.snapshot_store import SnapshotStore
from skillmatrix.policy.resolver import PolicyResolver
from skillmatrix.service import ProjectionService, ServiceResult

logger = logging.getLogger(__name__)

ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG = ROOT / "config"
DEFAULT_DATA = ROOT / "data"
SNAPSHOT_FILENAME = "snapshot.json"


def _parse_instant(text: str) -> datetime:
    try:
        parsed = parse_timestamp(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid date: {text}") from exc
    if parsed is None:
        raise argparse.ArgumentTypeError("Empty date")
    return parsed


def _make_service(args: argparse.Namespace) -> ProjectionService:
    """Create a ProjectionService over the snapshot named by the arguments."""
    resolver = PolicyResolver.from_config_dir(args.config)
    snapshot_path = args.snapshot or (args.data / SNAPSHOT_FILENAME)
    snapshot = SnapshotStore(snapshot_path).load()
    return ProjectionService(resolver, snapshot, now=args.now)


def _emit(result: ServiceResult) -> int:
    if result.success:
        print(json.dumps(result.data, indent=2, ensure_ascii=False))
        return 0
    print(f"Failed: {'; '.join(result.errors)}", file=sys.stderr)
    return 1


def cmd_forecast(args: argparse.Namespace) -> int:
    service = _make_service(args)
    horizon = args.until or args.preset
    if horizon is None:
        horizon = args.months
    return _emit(service.forecast(horizon, anonymize=args.anonymize))


def cmd_trend(args: argparse.Namespace) -> int:
    service = _make_service(args)
    return _emit(service.trend(args.months))


def cmd_history(args: argparse.Namespace) -> int:
    service = _make_service(args)
    return _emit(service.history(args.at, anonymize=args.anonymize))


def cmd_dashboard(args: argparse.Namespace) -> int:
    service = _make_service(args)
    return _emit(service.dashboard())


def cmd_compare(args: argparse.Namespace) -> int:
    service = _make_service(args)
    return _emit(service.period_comparison(args.period))


def cmd_gaps(args: argparse.Namespace) -> int:
    service = _make_service(args)
    return _emit(service.skill_gaps(args.employee, target_role=args.role))


def cmd_metrics(args: argparse.Namespace) -> int:
    service = _make_service(args)
    return _emit(service.employee_metrics(args.employee))


def cmd_verify_log(args: argparse.Namespace) -> int:
    if args.log is None:
        result = _make_service(args).verify_log()
    else:
        if not args.log.exists():
            print(f"Failed: Log not found: {args.log}", file=sys.stderr)
            return 1
        log = AssessmentLog(storage_path=args.log)
        violations = log.verify_chain()
        result = ServiceResult(
            success=not violations,
            errors=[v.describe() for v in violations],
            data={"entries": log.count, "violations": len(violations)},
        )
    if result.success:
        print(f"Chain intact: {result.data['entries']} entries")
        return 0
    for error in result.errors:
        print(f"  {error}", file=sys.stderr)
    print(f"Failed: {len(result.errors)} chain violation(s)", file=sys.stderr)
    return 1


def cmd_levels(args: argparse.Namespace) -> int:
    print(json.dumps(
        [
            {"value": lvl.value, "label": lvl.label, "title": lvl.title,
             "description": lvl.description}
            for lvl in LEVELS
        ],
        indent=2,
        ensure_ascii=False,
    ))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skillmatrix",
        description="Skill matrix — competence projection CLI",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path(os.getenv("SKILLMATRIX_CONFIG_DIR") or DEFAULT_CONFIG),
        help="Path to config directory (default: config/)",
    )
    parser.add_argument(
        "--data",
        type=Path,
        default=Path(os.getenv("SKILLMATRIX_DATA_DIR") or DEFAULT_DATA),
        help="Path to data directory (default: data/)",
    )
    parser.add_argument(
        "--snapshot",
        type=Path,
        help=f"Snapshot file (default: <data>/{SNAPSHOT_FILENAME})",
    )
    parser.add_argument(
        "--now",
        type=_parse_instant,
        help="Evaluate as of this instant instead of the current time",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("SKILLMATRIX_LOG_LEVEL", "WARNING"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command")

    # forecast
    p_fc = sub.add_parser("forecast", help="Project competences to a future horizon")
    horizon = p_fc.add_mutually_exclusive_group()
    horizon.add_argument("--months", type=int, help="Horizon in months")
    horizon.add_argument("--preset", help="Named horizon preset (e.g. 6m)")
    horizon.add_argument("--until", type=_parse_instant, help="Horizon as a date")
    p_fc.add_argument("--anonymize", action="store_true", help="Replace names with aliases")

    # trend
    p_tr = sub.add_parser("trend", help="Forecast headline figures for several horizons")
    p_tr.add_argument("--months", type=int, nargs="+", help="Horizons in months (default: presets)")

    # history
    p_hi = sub.add_parser("history", help="Reconstruct the state at a past instant")
    p_hi.add_argument("--at", required=True, type=_parse_instant, help="Past date")
    p_hi.add_argument("--anonymize", action="store_true", help="Replace names with aliases")

    # dashboard
    sub.add_parser("dashboard", help="Show headline figures for active employees")

    # compare
    p_cmp = sub.add_parser("compare", help="Compare XP with the start of the current period")
    p_cmp.add_argument(
        "--period", default="quarter",
        choices=[p.value for p in ComparisonPeriod],
        help="Comparison period (default: quarter)",
    )

    # gaps
    p_gap = sub.add_parser("gaps", help="List an employee's skill gaps")
    p_gap.add_argument("--employee", required=True, help="Employee ID")
    p_gap.add_argument("--role", help="Target role ID or name (default: own roles)")

    # metrics
    p_met = sub.add_parser("metrics", help="Show an employee's competence metrics")
    p_met.add_argument("--employee", required=True, help="Employee ID")

    # verify-log
    p_log = sub.add_parser("verify-log", help="Verify the assessment change-log chain")
    p_log.add_argument("--log", type=Path, help="JSONL log file (default: snapshot history)")

    # levels
    sub.add_parser("levels", help="Show the proficiency level scale")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    load_dotenv(ROOT / ".env")
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "forecast": cmd_forecast,
        "trend": cmd_trend,
        "history": cmd_history,
        "dashboard": cmd_dashboard,
        "compare": cmd_compare,
        "gaps": cmd_gaps,
        "metrics": cmd_metrics,
        "verify-log": cmd_verify_log,
        "levels": cmd_levels,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    try:
        return handler(args)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        print(f"Failed: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
