"""Tiny cue language that expands session ``main``/``extra`` text into step tokens.

Example::

    expand_session({"discipline": "swim", "main": "drills(catchup,singlearm); pull2x100; kick2x100"},
                   DEFAULTS_FALLBACK)

Blocks are separated by ``;``. Warm-up and cool-down tokens come from the
session overrides or the supplied defaults table.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


class DSLExpansionError(ValueError):
    """A cue block could not be resolved to step tokens."""


SWIM_DRILL_ALIAS = {
    "catchup": "swim_drills_4x50yd_catchup",
    "singlearm": "swim_drills_4x50yd_singlearm",
    "fist": "swim_drills_4x50yd_fist",
    "scull": "swim_drills_4x50yd_scull",
    "scullfront": "swim_drills_2x100yd_scullfront",
    "fingertipdrag": "swim_drills_4x50yd_fingertipdrag",
    "616": "swim_drills_4x50yd_616",
    "zipper": "swim_drills_4x50yd_zipper",
    "doggypaddle": "swim_drills_4x50yd_doggypaddle",
}

SWIM_FIXED_BLOCKS = {
    "pull2x100": "swim_pull_2x100yd",
    "pull4x50": "swim_pull_4x50yd",
    "pull300": "swim_pull_300yd_steady",
    "kick2x100": "swim_kick_2x100yd",
    "kick4x50": "swim_kick_4x50yd",
    "endurance_800": "swim_endurance_800yd_easy",
}

_SWIM_AEROBIC = re.compile(r"^aerobic\((\d+)x(\d+)\)$", re.I)
_SWIM_DRILLS = re.compile(r"^drills\(([^)]+)\)$", re.I)
_RUN_INTERVAL = re.compile(r"^(\d+)x(\d+)m@(\w+)\s+R(\d+)$", re.I)
_RUN_TEMPO = re.compile(r"^tempo\s+(\d+)mi\s*@\s*(\w+)\+([0-9:]+)$", re.I)
_BIKE_VO2 = re.compile(r"^vo2\s+(\d+)x(\d+)\s+r(\d+)$", re.I)
_BIKE_THR = re.compile(r"^thr(?:eshold)?\s+(\d+)x(\d+)\s+r(\d+)$", re.I)
_BIKE_SS = re.compile(r"^ss\s+(\d+)x(\d+)\s+r(\d+)$", re.I)
_BIKE_END = re.compile(r"^end\s+(\d+)$", re.I)
_STRENGTH_TOKEN = re.compile(r"^[a-z0-9_]+$", re.I)

_DISCIPLINE_KEYS = {
    "swim": "swim",
    "run": "run",
    "bike": "bike",
    "ride": "bike",
    "cycling": "bike",
    "strength": "strength",
}


@dataclass(frozen=True)
class StepDefaults:
    wu: Optional[str] = None
    cd: Optional[str] = None


@dataclass(frozen=True)
class DefaultsTable:
    """Warm-up/cool-down fallback tokens keyed by DSL discipline (swim, run, bike)."""

    rows: Mapping[str, StepDefaults] = field(default_factory=dict)

    def for_discipline(self, discipline: str) -> StepDefaults:
        return self.rows.get(discipline) or StepDefaults()

    @classmethod
    def from_mapping(cls, raw: Any) -> "DefaultsTable":
        """Build a table from authored ``defaults``; malformed rows are ignored."""
        rows: dict[str, StepDefaults] = {}
        if isinstance(raw, Mapping):
            for key, row in raw.items():
                if not isinstance(row, Mapping):
                    continue
                name = _DISCIPLINE_KEYS.get(str(key).strip().lower())
                if name is None:
                    continue
                wu = row.get("wu")
                cd = row.get("cd")
                rows[name] = StepDefaults(
                    wu=str(wu) if isinstance(wu, str) and wu else None,
                    cd=str(cd) if isinstance(cd, str) and cd else None,
                )
        return cls(rows=rows)


DEFAULTS_FALLBACK = DefaultsTable(
    rows={
        "swim": StepDefaults(wu="swim_warmup_200yd_easy", cd="swim_cooldown_200yd_easy"),
        "run": StepDefaults(wu="warmup_run_quality_12min", cd="cooldown_easy_10min"),
        "bike": StepDefaults(wu="warmup_bike_quality_15min_fastpedal", cd="cooldown_bike_easy_10min"),
    }
)


def _swim_block(token: str) -> list[str]:
    t = token.strip()
    fixed = SWIM_FIXED_BLOCKS.get(t.lower())
    if fixed:
        return [fixed]

    aerobic = _SWIM_AEROBIC.match(t)
    if aerobic:
        reps, dist = aerobic.group(1), aerobic.group(2)
        effort = "easysteady" if int(dist) <= 100 else "easy"
        return [f"swim_aerobic_{reps}x{dist}yd_{effort}"]

    drills = _SWIM_DRILLS.match(t)
    if drills:
        steps = []
        for name in (part.strip().lower() for part in drills.group(1).split(",")):
            alias = SWIM_DRILL_ALIAS.get(name)
            if alias is None:
                raise DSLExpansionError(f'Unknown swim drill "{name}"')
            steps.append(alias)
        return steps

    raise DSLExpansionError(f'Unknown swim block "{token}"')


def _run_block(token: str) -> list[str]:
    t = token.strip()
    interval = _RUN_INTERVAL.match(t)
    if interval:
        reps, dist, pace, rest = interval.groups()
        return [f"interval_{reps}x{dist}m_{pace.lower()}pace_R{rest}min"]
    tempo = _RUN_TEMPO.match(t)
    if tempo:
        dist, base, plus = tempo.groups()
        return [f"tempo_{dist}mi_{base.lower()}pace_plus{plus}"]
    raise DSLExpansionError(f'Unknown run block "{token}"')


def _bike_block(token: str) -> list[str]:
    t = token.strip()
    for pattern, label in ((_BIKE_VO2, "vo2"), (_BIKE_THR, "thr"), (_BIKE_SS, "ss")):
        m = pattern.match(t)
        if m:
            reps, work, rest = m.groups()
            return [f"bike_{label}_{reps}x{work}min_R{rest}min"]
    end = _BIKE_END.match(t)
    if end:
        return [f"bike_endurance_{end.group(1)}min_Z2"]
    raise DSLExpansionError(f'Unknown bike block "{token}"')


def _strength_block(token: str) -> list[str]:
    if _STRENGTH_TOKEN.match(token):
        return [token]
    raise DSLExpansionError(f'Unknown strength block "{token}"')


_BLOCK_PARSERS = {
    "swim": _swim_block,
    "run": _run_block,
    "bike": _bike_block,
    "strength": _strength_block,
}


def parse_main(discipline: str, dsl: Any) -> list[str]:
    """Parse a ``;``-separated cue string into step tokens for one discipline."""
    if dsl is None or dsl == "":
        return []
    if not isinstance(dsl, str):
        raise DSLExpansionError(f"Cue text must be a string, got {type(dsl).__name__}")
    parser = _BLOCK_PARSERS.get(discipline)
    if parser is None:
        return []
    steps: list[str] = []
    for part in (p.strip() for p in dsl.split(";")):
        if part:
            steps.extend(parser(part))
    return steps


def dsl_discipline(value: Any) -> str:
    """Map a session discipline onto the cue-language discipline key."""
    text = str(value or "").strip().lower()
    return _DISCIPLINE_KEYS.get(text, text)


def expand_session(session: Mapping[str, Any], defaults: DefaultsTable) -> list[str]:
    """Expand a session's cue text into a full step list.

    An existing non-empty ``steps_preset`` is returned unchanged. Strength
    sessions get no warm-up or cool-down.
    """
    existing = session.get("steps_preset")
    if isinstance(existing, list) and existing:
        return list(existing)

    discipline = dsl_discipline(session.get("discipline"))
    row = defaults.for_discipline(discipline)
    wu = session.get("override_wu") or row.wu
    cd = session.get("override_cd") or row.cd
    main = parse_main(discipline, session.get("main"))
    extra = parse_main(discipline, session.get("extra"))
    if discipline == "strength":
        return main + extra
    return [step for step in [wu, *main, *extra, cd] if step]
