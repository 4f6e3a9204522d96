from __future__ import annotations

from datetime import date as dt_date
from datetime import datetime as dt_datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl

from core.validators import CatalogDiscipline, RemapPreferences


class PlanSummaryOut(BaseModel):
    name: str
    duration_weeks: Optional[int] = None
    total_sessions: int = 0
    minutes_by_week: dict[str, float] = Field(default_factory=dict)
    week_window: Optional[tuple[int, int]] = None
    phase_order: list[str] = Field(default_factory=list)


class PlanImportOut(BaseModel):
    plan: dict[str, Any]
    discipline: str
    shape: Literal["blueprint", "sessions"]
    summary: PlanSummaryOut


class ImportUrlInput(BaseModel):
    url: HttpUrl


class RemapInput(BaseModel):
    plan: dict[str, Any]
    preferences: RemapPreferences = Field(default_factory=RemapPreferences)
    start_date: Optional[dt_date] = None


class RemapOut(BaseModel):
    plan: dict[str, Any]
    start_date: dt_date


class ExportInput(BaseModel):
    plan: dict[str, Any]


class PublishInput(BaseModel):
    plan: dict[str, Any]
    discipline: Optional[CatalogDiscipline] = None
    tags: list[str] = Field(default_factory=list)
    status: Literal["draft", "published"] = "published"


class LibraryPlanOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    discipline: str
    duration_weeks: int
    tags: list[str]
    status: str
    created_at: dt_datetime


class LibraryPlanDetailOut(LibraryPlanOut):
    template: dict[str, Any]


class SimpleStatusResponse(BaseModel):
    status: str
