"""Read-only views over a finished plan: markdown export and preview summary."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

DAY_ORDER = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def _day_rank(session: Mapping[str, Any]) -> int:
    day = session.get("day")
    return DAY_ORDER.index(day) if day in DAY_ORDER else -1


def sorted_week_keys(plan: Mapping[str, Any]) -> list[str]:
    weeks = plan.get("sessions_by_week") or {}

    def key(value: str) -> tuple[int, str]:
        text = str(value).strip()
        return (int(text), text) if text.isdigit() else (10**9, text)

    return sorted(weeks, key=key)


def week_sessions_by_day(plan: Mapping[str, Any], week: str) -> list[dict[str, Any]]:
    sessions = (plan.get("sessions_by_week") or {}).get(week) or []
    return sorted((s for s in sessions if isinstance(s, Mapping)), key=_day_rank)


def _is_minutes(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def export_markdown(plan: Mapping[str, Any]) -> str:
    lines = [f"# {plan.get('name', '')}"]
    if plan.get("description"):
        lines += ["", str(plan["description"])]
    lines += ["", f"Weeks: {plan.get('duration_weeks')}", ""]
    for week in sorted_week_keys(plan):
        lines.append(f"## Week {week}")
        for s in week_sessions_by_day(plan, week):
            discipline = s.get("discipline") or s.get("type") or ""
            lines.append(f"- {s.get('day')}: {discipline}".strip())
            meta = []
            if s.get("type") and s.get("type") != s.get("discipline"):
                meta.append(str(s["type"]))
            if _is_minutes(s.get("duration")):
                meta.append(f"{s['duration']} min")
            if meta:
                lines.append(f"  - {' • '.join(meta)}")
            if s.get("description"):
                lines.append(f"  - {s['description']}")
        lines.append("")
    return "\n".join(lines)


def markdown_filename(plan: Mapping[str, Any]) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", str(plan.get("name") or "plan").lower()).strip("-")
    return f"{slug or 'plan'}.md"


@dataclass
class PlanSummary:
    name: str
    duration_weeks: Optional[int]
    total_sessions: int = 0
    minutes_by_week: dict[str, float] = field(default_factory=dict)
    week_window: Optional[tuple[int, int]] = None
    phase_order: list[str] = field(default_factory=list)


def summarize_plan(plan: Mapping[str, Any]) -> PlanSummary:
    """Counts for a plan preview; blueprint plans report their window and phases instead."""
    summary = PlanSummary(name=str(plan.get("name") or ""), duration_weeks=plan.get("duration_weeks"))
    if not plan.get("sessions_by_week"):
        if _is_minutes(plan.get("min_weeks")) and _is_minutes(plan.get("max_weeks")):
            summary.week_window = (int(plan["min_weeks"]), int(plan["max_weeks"]))
        blueprint = plan.get("phase_blueprint")
        if isinstance(blueprint, Mapping) and isinstance(blueprint.get("order"), list):
            summary.phase_order = [str(p) for p in blueprint["order"]]
        return summary
    for week in sorted_week_keys(plan):
        sessions = week_sessions_by_day(plan, week)
        summary.total_sessions += len(sessions)
        summary.minutes_by_week[week] = sum(s["duration"] for s in sessions if _is_minutes(s.get("duration")))
    return summary
