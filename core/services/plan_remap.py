"""Per-athlete re-arrangement of an accepted plan.

Moves each week's long run and long ride to the athlete's preferred days and
optionally drops non-mandatory strength work. Pure: returns a new plan.
"""

from __future__ import annotations

from copy import deepcopy
from datetime import date, timedelta
from typing import Any, Callable, Mapping, Optional

from core.logging_config import get_logger, log_event
from core.services.plan_preprocessor import raw_discipline
from core.validators import RemapPreferences

logger = get_logger(__name__)

LONG_RUN_TAG = "long_run"
LONG_RIDE_TAG = "long_ride"
MANDATORY_STRENGTH_TAG = "mandatory_strength"
RIDE_DISCIPLINES = {"ride", "bike", "cycling"}


def is_run_session(session: Any) -> bool:
    return raw_discipline(session) == "run"


def is_ride_session(session: Any) -> bool:
    return raw_discipline(session) in RIDE_DISCIPLINES


def is_strength_session(session: Any) -> bool:
    return raw_discipline(session) == "strength"


def has_tag(session: Any, tag: str) -> bool:
    tags = session.get("tags") if isinstance(session, Mapping) else None
    return isinstance(tags, (list, tuple, set)) and tag in tags


def _duration(session: Mapping[str, Any]) -> float:
    value = session.get("duration")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return 0.0


def pick_long_session(sessions: list[Any], tag: str, matches: Callable[[Any], bool]) -> Optional[int]:
    """Index of the tagged session, else the longest matching one (first wins on ties)."""
    for idx, session in enumerate(sessions):
        if has_tag(session, tag):
            return idx
    best, best_duration = None, -1.0
    for idx, session in enumerate(sessions):
        if matches(session) and _duration(session) > best_duration:
            best, best_duration = idx, _duration(session)
    return best


def remap_week(sessions: list[Any], prefs: RemapPreferences) -> list[Any]:
    week = [dict(s) if isinstance(s, Mapping) else s for s in sessions]

    run_idx = pick_long_session(week, LONG_RUN_TAG, is_run_session)
    if run_idx is not None:
        week[run_idx]["day"] = prefs.long_run_day

    ride_idx = pick_long_session(week, LONG_RIDE_TAG, is_ride_session)
    if ride_idx is not None:
        week[ride_idx]["day"] = prefs.long_ride_day

    if not prefs.include_strength:
        week = [s for s in week if not is_strength_session(s) or has_tag(s, MANDATORY_STRENGTH_TAG)]
    return week


def remap_for_preferences(plan: Mapping[str, Any], prefs: RemapPreferences) -> dict[str, Any]:
    """Return a copy of ``plan`` with long sessions moved and strength filtered."""
    out = deepcopy(dict(plan))
    weeks = out.get("sessions_by_week")
    if not isinstance(weeks, Mapping):
        return out
    out["sessions_by_week"] = {
        week: remap_week(sessions, prefs) if isinstance(sessions, list) else sessions
        for week, sessions in weeks.items()
    }
    log_event(
        logger,
        "plan_remapped",
        long_run_day=prefs.long_run_day,
        long_ride_day=prefs.long_ride_day,
        include_strength=prefs.include_strength,
    )
    return out


def next_monday(today: Optional[date] = None) -> date:
    """Default start date when accepting a plan: the coming Monday, never today."""
    today = today or date.today()
    return today + timedelta(days=7 - today.weekday())
