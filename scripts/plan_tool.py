"""Command-line front end for the plan import pipeline.

Examples::

    python scripts/plan_tool.py validate plan.json
    python scripts/plan_tool.py remap plan.json --long-run-day Saturday --no-strength
    python scripts/plan_tool.py export https://example.com/plan.json -o plan.md
    python scripts/plan_tool.py publish plan.json --status draft
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional

from core.config import WEEKDAYS, get_settings
from core.db import db_session, init_db
from core.logging_config import setup_logging
from core.services.plan_acquisition import PlanAcquisitionError, fetch_plan_url, load_plan_file
from core.services.plan_catalog import CatalogMetadataError, publish_library_plan
from core.services.plan_export import export_markdown, summarize_plan
from core.services.plan_import import ConsistencyError, StructuralValidationError, import_plan
from core.services.plan_remap import remap_for_preferences
from core.validators import RemapPreferences


def _load(source: str) -> dict[str, Any]:
    if source.startswith(("http://", "https://")):
        return fetch_plan_url(source)
    return load_plan_file(source)


def _write(text: str, output: Optional[str]) -> None:
    if output:
        Path(output).write_text(text, encoding="utf-8")
    else:
        print(text)


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(prog="plan_tool", description="Validate, remap, export and publish training plans.")
    sub = parser.add_subparsers(dest="command", required=True)

    p_validate = sub.add_parser("validate", help="validate a plan and print the normalized JSON")
    p_validate.add_argument("source", help="plan file path or http(s) URL")
    p_validate.add_argument("-o", "--output")

    p_remap = sub.add_parser("remap", help="validate then move long sessions to preferred days")
    p_remap.add_argument("source")
    p_remap.add_argument("--long-run-day", choices=WEEKDAYS, default=settings.default_long_run_day)
    p_remap.add_argument("--long-ride-day", choices=WEEKDAYS, default=settings.default_long_ride_day)
    p_remap.add_argument("--strength", dest="include_strength", action="store_true", help="keep all strength sessions")
    p_remap.add_argument(
        "--no-strength", dest="include_strength", action="store_false", help="drop strength sessions not tagged mandatory_strength"
    )
    p_remap.set_defaults(include_strength=settings.default_include_strength)
    p_remap.add_argument("-o", "--output")

    p_export = sub.add_parser("export", help="validate then render markdown")
    p_export.add_argument("source")
    p_export.add_argument("-o", "--output")

    p_publish = sub.add_parser("publish", help="validate then store in the plan catalog")
    p_publish.add_argument("source")
    p_publish.add_argument("--discipline", choices=["run", "ride", "swim", "strength", "triathlon", "hybrid"])
    p_publish.add_argument("--tag", action="append", default=[])
    p_publish.add_argument("--status", choices=["draft", "published"], default="published")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(get_settings().log_level)

    try:
        result = import_plan(_load(args.source))
    except (PlanAcquisitionError, StructuralValidationError, ConsistencyError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.command == "validate":
        summary = summarize_plan(result.plan)
        print(f"discipline={result.discipline} shape={result.shape} sessions={summary.total_sessions}", file=sys.stderr)
        _write(json.dumps(result.plan, indent=2), args.output)
    elif args.command == "remap":
        prefs = RemapPreferences(
            long_run_day=args.long_run_day,
            long_ride_day=args.long_ride_day,
            include_strength=args.include_strength,
        )
        _write(json.dumps(remap_for_preferences(result.plan, prefs), indent=2), args.output)
    elif args.command == "export":
        _write(export_markdown(result.plan), args.output)
    elif args.command == "publish":
        init_db()
        try:
            with db_session() as s:
                row = publish_library_plan(
                    s,
                    plan=result.plan,
                    discipline=args.discipline or result.discipline,
                    tags=args.tag,
                    status=args.status,
                )
                print(f"published id={row.id} name={row.name} discipline={row.discipline}")
        except CatalogMetadataError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
