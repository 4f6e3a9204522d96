"""Rewrite an authored plan into the shape the universal schema accepts.

Expands macros and swim cue text into ``steps_preset``, drops authoring-only
fields, filters ``export_hints`` and injects the optional weekly header into
``notes_by_week``. Best-effort: nothing here rejects a plan.
"""

from __future__ import annotations

import logging
from copy import deepcopy
from typing import Any, Mapping, Optional

from core.logging_config import get_logger, log_event
from core.services.plan_dsl import DEFAULTS_FALLBACK, DefaultsTable, expand_session
from core.services.plan_macros import expand_macro, macro_source
from core.validators import EXPORT_HINT_KEYS

logger = get_logger(__name__)

SWIM_AUTHORING_FIELDS = ("main", "extra", "override_wu", "override_cd")
# min_weeks, max_weeks and ui_text are restored after validation.
AUTHORING_PLAN_FIELDS = ("defaults", "min_weeks", "max_weeks", "ui_text")


def raw_discipline(session: Any) -> str:
    """Discipline of an unvalidated session, read from ``discipline`` or legacy ``type``."""
    if not isinstance(session, Mapping):
        return ""
    return str(session.get("discipline") or session.get("type") or "").strip().lower()


def _has_steps(session: Mapping[str, Any]) -> bool:
    steps = session.get("steps_preset")
    return isinstance(steps, list) and len(steps) > 0


def resolve_defaults(plan: Mapping[str, Any]) -> DefaultsTable:
    raw = plan.get("defaults")
    if isinstance(raw, Mapping):
        return DefaultsTable.from_mapping(raw)
    return DEFAULTS_FALLBACK


def preprocess_session(
    session: Any,
    defaults: DefaultsTable,
    *,
    week: Optional[str] = None,
    index: Optional[int] = None,
) -> Any:
    if not isinstance(session, dict):
        return session
    s = dict(session)
    discipline = raw_discipline(s)

    alias = macro_source(s)
    if alias and not _has_steps(s):
        steps = expand_macro(alias)
        if steps:
            s["steps_preset"] = steps
        else:
            log_event(logger, "plan_macro_miss", logging.DEBUG, week=week, index=index, macro=alias)

    if discipline == "swim":
        if not _has_steps(s) and (s.get("main") or s.get("extra")):
            try:
                steps = expand_session({**s, "discipline": discipline}, defaults)
            except Exception as exc:
                log_event(
                    logger,
                    "plan_dsl_expansion_failed",
                    logging.WARNING,
                    week=week,
                    index=index,
                    error=str(exc),
                )
            else:
                if steps:
                    s["steps_preset"] = steps
        for key in SWIM_AUTHORING_FIELDS:
            s.pop(key, None)

    s.pop("macro", None)
    return s


def filter_export_hints(plan: dict[str, Any]) -> None:
    hints = plan.get("export_hints")
    if not isinstance(hints, Mapping):
        return
    keep = {k: v for k, v in hints.items() if k in EXPORT_HINT_KEYS}
    if keep:
        plan["export_hints"] = keep
    else:
        plan.pop("export_hints", None)


def optional_header(plan: Mapping[str, Any]) -> Optional[str]:
    ui_text = plan.get("ui_text")
    if not isinstance(ui_text, Mapping):
        return None
    header = ui_text.get("optional_header")
    if isinstance(header, str) and header.strip():
        return header
    return None


def inject_week_header(plan: dict[str, Any], header: str) -> None:
    weeks = plan.get("sessions_by_week")
    if not isinstance(weeks, Mapping):
        return
    notes = plan.get("notes_by_week")
    if not isinstance(notes, dict):
        notes = {}
    for week in weeks:
        existing = notes.get(week)
        lines = list(existing) if isinstance(existing, list) else []
        if not lines or lines[0] != header:
            lines.insert(0, header)
        notes[week] = lines
    plan["notes_by_week"] = notes


def preprocess_for_schema(raw: Any) -> Any:
    """Return a schema-ready deep copy of ``raw``; the input is never mutated."""
    if not isinstance(raw, Mapping):
        return deepcopy(raw)
    plan = deepcopy(dict(raw))
    defaults = resolve_defaults(plan)

    weeks = plan.get("sessions_by_week")
    if weeks is None:
        plan["sessions_by_week"] = {}
    elif isinstance(weeks, Mapping):
        out_weeks: dict[str, Any] = {}
        for week, sessions in weeks.items():
            if isinstance(sessions, list):
                out_weeks[week] = [
                    preprocess_session(s, defaults, week=str(week), index=i) for i, s in enumerate(sessions)
                ]
            else:
                out_weeks[week] = sessions
        plan["sessions_by_week"] = out_weeks

    filter_export_hints(plan)

    header = optional_header(plan)
    if header is not None:
        inject_week_header(plan, header)

    for key in AUTHORING_PLAN_FIELDS:
        plan.pop(key, None)

    weeks_out = plan.get("sessions_by_week")
    log_event(
        logger,
        "plan_preprocessed",
        logging.DEBUG,
        weeks=len(weeks_out) if isinstance(weeks_out, Mapping) else 0,
    )
    return plan
