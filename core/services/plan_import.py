"""Plan import pipeline: classify, preprocess, validate, reattach, check.

Two plan shapes are accepted:

- *blueprint* plans (a week-count window plus a phase ordering, no concrete
  weeks) pass straight through with ``duration_weeks`` defaulted to
  ``max_weeks`` and a ``triathlon`` catalog tag;
- *sessions* plans go through the preprocessor and the universal schema, then
  get their authoring-only fields restored for display and a catalog
  discipline tag inferred from their sessions.

Only the schema and the week-count consistency check can reject a plan.
"""

from __future__ import annotations

import logging
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Callable, Literal, Mapping

from pydantic import BaseModel

from core.logging_config import get_logger, log_event
from core.services.plan_preprocessor import preprocess_for_schema, raw_discipline
from core.validators import SchemaValidationResult, normalize_discipline, validate_universal_plan

logger = get_logger(__name__)

PlanShape = Literal["blueprint", "sessions"]
SchemaValidator = Callable[[Any], SchemaValidationResult]

BLUEPRINT_DISCIPLINE = "triathlon"
SWIM_DISPLAY_FIELDS = ("main", "extra")


class StructuralValidationError(ValueError):
    """The universal schema rejected the preprocessed plan."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors) or ["Plan rejected by schema"]
        super().__init__("\n".join(self.errors))


class ConsistencyError(ValueError):
    """duration_weeks is shorter than the last populated week."""

    def __init__(self, duration_weeks: int, last_week: int):
        self.duration_weeks = duration_weeks
        self.last_week = last_week
        super().__init__(f"duration_weeks ({duration_weeks}) is less than last week key ({last_week})")


@dataclass(frozen=True)
class IngestedPlan:
    shape: PlanShape
    payload: Any


@dataclass
class PlanImportResult:
    plan: dict[str, Any]
    discipline: str
    shape: PlanShape


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_blueprint(raw: Any) -> bool:
    return (
        isinstance(raw, Mapping)
        and raw.get("sessions_by_week") is None
        and _is_number(raw.get("min_weeks"))
        and _is_number(raw.get("max_weeks"))
        and bool(raw.get("phase_blueprint"))
    )


def classify_plan(raw: Any) -> IngestedPlan:
    """Decide the plan shape once and take a private deep copy of the input."""
    shape: PlanShape = "blueprint" if is_blueprint(raw) else "sessions"
    return IngestedPlan(shape=shape, payload=deepcopy(raw))


def _whole_weeks(plan: dict[str, Any], key: str, errors: list[str]) -> None:
    value = plan.get(key)
    if not _is_number(value) or not float(value).is_integer() or value < 1:
        errors.append(f"{key}: must be a whole number of weeks")
        return
    plan[key] = int(value)


def accept_blueprint(payload: dict[str, Any]) -> PlanImportResult:
    """Blueprints skip the schema; only their week window has to be whole weeks."""
    plan = deepcopy(payload)
    if not _is_number(plan.get("duration_weeks")):
        plan["duration_weeks"] = plan["max_weeks"]
    errors: list[str] = []
    for key in ("min_weeks", "max_weeks", "duration_weeks"):
        _whole_weeks(plan, key, errors)
    if errors:
        raise StructuralValidationError(errors)
    return PlanImportResult(plan=plan, discipline=BLUEPRINT_DISCIPLINE, shape="blueprint")


def _same_session(raw: Mapping[str, Any], validated: Mapping[str, Any]) -> bool:
    raw_id, out_id = raw.get("id"), validated.get("id")
    if raw_id is not None and out_id is not None:
        return str(raw_id) == str(out_id)
    raw_day = str(raw.get("day") or "").strip().title()
    return raw_day == validated.get("day") and normalize_discipline(raw_discipline(raw)) == validated.get("discipline")


def reattach_authoring_fields(original: Any, validated: dict[str, Any]) -> dict[str, Any]:
    """Restore fields the preprocessor stripped, reading them from the original input."""
    if not isinstance(original, Mapping):
        return validated
    for key in ("min_weeks", "max_weeks"):
        if _is_number(original.get(key)):
            validated[key] = original[key]
    if original.get("ui_text"):
        validated["ui_text"] = deepcopy(original["ui_text"])

    raw_weeks = original.get("sessions_by_week")
    if not isinstance(raw_weeks, Mapping):
        return validated
    for week, sessions in (validated.get("sessions_by_week") or {}).items():
        raw_sessions = raw_weeks.get(week)
        if not isinstance(raw_sessions, list):
            continue
        for index, session in enumerate(sessions):
            raw = raw_sessions[index] if index < len(raw_sessions) else None
            if not isinstance(raw, Mapping) or raw_discipline(raw) != "swim":
                continue
            if not _same_session(raw, session):
                log_event(logger, "plan_reattach_skipped", logging.WARNING, week=week, index=index)
                continue
            for key in SWIM_DISPLAY_FIELDS:
                value = raw.get(key)
                if isinstance(value, str) and value.strip():
                    session[key] = value
    return validated


def last_week_key(plan: Mapping[str, Any]) -> int:
    weeks = plan.get("sessions_by_week") or {}
    numbers = [int(str(k).strip()) for k in weeks if str(k).strip().isdigit()]
    return max(numbers) if numbers else 0


def check_week_consistency(plan: Mapping[str, Any]) -> None:
    last_week = last_week_key(plan)
    duration = plan.get("duration_weeks")
    if _is_number(duration) and duration < last_week:
        raise ConsistencyError(duration, last_week)


def infer_discipline(plan: Mapping[str, Any]) -> str:
    """Best-effort catalog tag from the sessions a plan actually contains."""
    seen = set()
    for sessions in (plan.get("sessions_by_week") or {}).values():
        if not isinstance(sessions, list):
            continue
        for session in sessions:
            seen.add(normalize_discipline(raw_discipline(session)))
    has_run, has_ride, has_swim = "run" in seen, "ride" in seen, "swim" in seen
    if has_run and has_ride and has_swim:
        return "hybrid"
    if has_ride and not has_run and not has_swim:
        return "ride"
    if has_swim and not has_run and not has_ride:
        return "swim"
    if "strength" in seen and not (has_run or has_ride or has_swim):
        return "strength"
    return "run"


def _dump_validated(plan: Any) -> dict[str, Any]:
    if isinstance(plan, BaseModel):
        return plan.model_dump(mode="json", exclude_none=True)
    return deepcopy(plan)


def import_plan(raw: Any, validator: SchemaValidator = validate_universal_plan) -> PlanImportResult:
    """Turn an authored plan into a normalized, validated plan.

    Raises StructuralValidationError when the schema rejects the plan and
    ConsistencyError when duration_weeks is shorter than the last week.
    """
    ingested = classify_plan(raw)
    if ingested.shape == "blueprint":
        try:
            result = accept_blueprint(ingested.payload)
        except StructuralValidationError as exc:
            log_event(logger, "plan_import_rejected", logging.WARNING, reason="blueprint", errors=len(exc.errors))
            raise
        log_event(logger, "plan_import_accepted", shape="blueprint", duration_weeks=result.plan["duration_weeks"])
        return result

    cleaned = preprocess_for_schema(ingested.payload)
    outcome = validator(cleaned)
    if not outcome.ok:
        log_event(logger, "plan_import_rejected", logging.WARNING, reason="schema", errors=len(outcome.errors))
        raise StructuralValidationError(outcome.errors)

    plan = reattach_authoring_fields(ingested.payload, _dump_validated(outcome.plan))
    try:
        check_week_consistency(plan)
    except ConsistencyError as exc:
        log_event(logger, "plan_import_rejected", logging.WARNING, reason="consistency", message=str(exc))
        raise
    discipline = infer_discipline(plan)
    log_event(
        logger,
        "plan_import_accepted",
        shape="sessions",
        discipline=discipline,
        duration_weeks=plan.get("duration_weeks"),
        weeks=len(plan.get("sessions_by_week") or {}),
    )
    return PlanImportResult(plan=plan, discipline=discipline, shape="sessions")
