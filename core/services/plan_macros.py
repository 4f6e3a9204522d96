"""Authoring macros: short alias tokens that stand for a fixed step sequence.

Authors write ``"macro": "@SWIM_TECH_1200_DEFAULT"`` (or put the alias in the
session description) instead of hand-listing every step token. The table is
build-time configuration, not user data.
"""

from __future__ import annotations

from typing import Any, Optional

MACRO_PREFIX = "@"

MACRO_TABLE: dict[str, tuple[str, ...]] = {
    "@RUN_INT_6x400_5k_R2": (
        "warmup_run_quality_12min",
        "interval_6x400m_5kpace_R2min",
        "cooldown_easy_10min",
    ),
    "@BK_VO2_6x3_R3": (
        "warmup_bike_quality_15min_fastpedal",
        "bike_vo2_6x3min_R3min",
        "cooldown_bike_easy_10min",
    ),
    "@BK_THR_4x8_R5": (
        "warmup_bike_quality_15min_fastpedal",
        "bike_thr_4x8min_R5min",
        "cooldown_bike_easy_10min",
    ),
    "@SWIM_TECH_1200_DEFAULT": (
        "swim_warmup_200yd_easy",
        "swim_drills_4x50yd_catchup",
        "swim_drills_4x50yd_singlearm",
        "swim_pull_2x100yd",
        "swim_kick_2x100yd",
        "swim_cooldown_200yd_easy",
    ),
}


def expand_macro(alias: Any) -> Optional[list[str]]:
    """Return the step list bound to ``alias``, or None when the alias is unknown."""
    steps = MACRO_TABLE.get(str(alias or "").strip())
    if steps is None:
        return None
    return list(steps)


def macro_source(session: dict[str, Any]) -> Optional[str]:
    """Pick the alias a session asks for.

    An explicit ``macro`` field wins; otherwise a description that starts with
    ``@`` is treated as an alias.
    """
    explicit = session.get("macro")
    if isinstance(explicit, str) and explicit:
        return explicit
    description = session.get("description")
    if isinstance(description, str) and description.strip().startswith(MACRO_PREFIX):
        return description.strip()
    return None
