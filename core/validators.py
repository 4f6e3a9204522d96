"""Pydantic validation models for all plan-facing data entry points.

``UniversalPlan`` is the strict schema a preprocessed plan must satisfy before
it is accepted. Authoring conveniences (macros, swim cue text, defaults,
ui_text) are not part of it and must be stripped first.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from core.config import get_settings

Weekday = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
Discipline = Literal["run", "ride", "swim", "strength", "brick", "other"]
CatalogDiscipline = Literal["run", "ride", "swim", "strength", "triathlon", "hybrid"]

DISCIPLINES = {"run", "ride", "swim", "strength", "brick", "other"}
DISCIPLINE_ALIASES = {"bike": "ride", "cycling": "ride"}
EXPORT_HINT_KEYS = frozenset(
    {
        "pace_tolerance_quality",
        "pace_tolerance_easy",
        "power_tolerance_SS_thr",
        "power_tolerance_VO2",
    }
)
WEEK_KEY = re.compile(r"^[1-9][0-9]*$")


def normalize_discipline(value: Any) -> Optional[str]:
    """Lower-case a discipline label and fold ride aliases; None when unrecognised."""
    text = str(value or "").strip().lower()
    text = DISCIPLINE_ALIASES.get(text, text)
    return text if text in DISCIPLINES else None


def _title_weekday(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().title()
    return value


class PlanSession(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: Optional[str] = Field(default=None, min_length=1, max_length=80)
    day: Weekday
    discipline: Optional[Discipline] = None
    type: Optional[str] = Field(default=None, max_length=80)
    duration: Optional[int] = Field(default=None, ge=0, le=1440)
    description: Optional[str] = Field(default=None, max_length=2000)
    steps_preset: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    intensity: Optional[dict[str, Any]] = None
    workout_spec: Optional[dict[str, Any]] = None

    @field_validator("day", mode="before")
    @classmethod
    def _day_title_case(cls, v):
        return _title_weekday(v)

    @field_validator("discipline", mode="before")
    @classmethod
    def _discipline_aliases(cls, v):
        if isinstance(v, str):
            text = v.strip().lower()
            return DISCIPLINE_ALIASES.get(text, text)
        return v

    @field_validator("tags")
    @classmethod
    def _tags_as_set(cls, v):
        seen: list[str] = []
        for tag in v:
            if tag not in seen:
                seen.append(tag)
        return seen

    @model_validator(mode="after")
    def _resolve_discipline(self):
        if self.discipline is None:
            resolved = normalize_discipline(self.type)
            if resolved is None:
                raise ValueError("discipline is required (or a legacy type naming one)")
            self.discipline = resolved
        return self


class UniversalPlan(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=5000)
    duration_weeks: int = Field(ge=1, le=104)
    swim_unit: Optional[Literal["yd", "m"]] = None
    baselines_template: Optional[dict[str, Any]] = None
    tolerances: Optional[dict[str, float]] = None
    export_hints: Optional[dict[str, float]] = None
    sessions_by_week: dict[str, list[PlanSession]]
    notes_by_week: Optional[dict[str, list[str]]] = None

    @field_validator("sessions_by_week")
    @classmethod
    def _weeks_present(cls, v):
        if not v:
            raise ValueError("sessions_by_week must contain at least one week")
        bad = [k for k in v if not WEEK_KEY.match(k)]
        if bad:
            raise ValueError(f"week keys must be positive integers, got {bad}")
        return v

    @field_validator("notes_by_week")
    @classmethod
    def _note_keys(cls, v):
        if v is not None:
            bad = [k for k in v if not WEEK_KEY.match(k)]
            if bad:
                raise ValueError(f"week keys must be positive integers, got {bad}")
        return v

    @field_validator("export_hints")
    @classmethod
    def _hint_allow_list(cls, v):
        if v is not None:
            unknown = sorted(set(v) - EXPORT_HINT_KEYS)
            if unknown:
                raise ValueError(f"unsupported export_hints keys: {unknown}")
        return v


@dataclass
class SchemaValidationResult:
    ok: bool
    plan: Optional[UniversalPlan] = None
    errors: list[str] = field(default_factory=list)


def format_validation_errors(exc: ValidationError) -> list[str]:
    errors = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        errors.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return errors


def validate_universal_plan(data: Any) -> SchemaValidationResult:
    """Check a preprocessed plan against the universal schema."""
    try:
        plan = UniversalPlan.model_validate(data)
    except ValidationError as exc:
        return SchemaValidationResult(ok=False, errors=format_validation_errors(exc))
    return SchemaValidationResult(ok=True, plan=plan)


class RemapPreferences(BaseModel):
    """Athlete day preferences; unset fields come from the DEFAULT_* settings."""

    model_config = ConfigDict(frozen=True)

    long_run_day: Weekday = Field(default_factory=lambda: get_settings().default_long_run_day)
    long_ride_day: Weekday = Field(default_factory=lambda: get_settings().default_long_ride_day)
    include_strength: bool = Field(default_factory=lambda: get_settings().default_include_strength)

    @field_validator("long_run_day", "long_ride_day", mode="before")
    @classmethod
    def _day_title_case(cls, v):
        return _title_weekday(v)


class LibraryPlanPublishInput(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=5000)
    discipline: CatalogDiscipline
    duration_weeks: int = Field(ge=1, le=104)
    tags: list[str] = Field(default_factory=list)
    status: Literal["draft", "published"] = "published"
    template: dict[str, Any]

    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, v):
        cleaned: list[str] = []
        for tag in v:
            text = str(tag).strip()
            if text and text not in cleaned:
                cleaned.append(text)
        return cleaned
