from dataclasses import asdict
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from api.deps import get_db
from api.ratelimit import import_url_limit, limiter
from api.schemas import (
    ExportInput,
    ImportUrlInput,
    LibraryPlanDetailOut,
    LibraryPlanOut,
    PlanImportOut,
    PlanSummaryOut,
    PublishInput,
    RemapInput,
    RemapOut,
    SimpleStatusResponse,
)
from core.services.plan_acquisition import fetch_plan_url
from core.services.plan_catalog import get_library_plan, list_library_plans, publish_library_plan
from core.services.plan_export import export_markdown, markdown_filename, summarize_plan
from core.services.plan_import import PlanImportResult, import_plan
from core.services.plan_remap import next_monday, remap_for_preferences

router = APIRouter(prefix="/api/v1")


def _import_out(result: PlanImportResult) -> PlanImportOut:
    return PlanImportOut(
        plan=result.plan,
        discipline=result.discipline,
        shape=result.shape,
        summary=PlanSummaryOut(**asdict(summarize_plan(result.plan))),
    )


@router.get("/health", response_model=SimpleStatusResponse, tags=["system"])
def health():
    return SimpleStatusResponse(status="ok")


@router.post("/plans/validate", response_model=PlanImportOut, tags=["plans"])
def validate_plan(raw: Annotated[Any, Body()]):
    return _import_out(import_plan(raw))


@router.post("/plans/import-url", response_model=PlanImportOut, tags=["plans"])
@limiter.limit(import_url_limit)
def import_plan_from_url(request: Request, body: ImportUrlInput):
    raw = fetch_plan_url(str(body.url))
    return _import_out(import_plan(raw))


@router.post("/plans/remap", response_model=RemapOut, tags=["plans"])
def remap_plan(body: RemapInput):
    return RemapOut(
        plan=remap_for_preferences(body.plan, body.preferences),
        start_date=body.start_date or next_monday(),
    )


@router.post("/plans/export/markdown", response_class=PlainTextResponse, tags=["plans"])
def export_plan_markdown(body: ExportInput):
    return PlainTextResponse(
        export_markdown(body.plan),
        media_type="text/markdown; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{markdown_filename(body.plan)}"'},
    )


@router.post("/plans/publish", response_model=LibraryPlanOut, status_code=status.HTTP_201_CREATED, tags=["catalog"])
def publish_plan(body: PublishInput, db: Annotated[Session, Depends(get_db)]):
    result = import_plan(body.plan)
    row = publish_library_plan(
        db,
        plan=result.plan,
        discipline=body.discipline or result.discipline,
        tags=body.tags,
        status=body.status,
    )
    return LibraryPlanOut.model_validate(row)


@router.get("/plans", response_model=list[LibraryPlanOut], tags=["catalog"])
def list_plans(
    db: Annotated[Session, Depends(get_db)],
    discipline: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
):
    return [LibraryPlanOut.model_validate(r) for r in list_library_plans(db, discipline=discipline, status=status_filter)]


@router.get("/plans/{plan_id}", response_model=LibraryPlanDetailOut, tags=["catalog"])
def get_plan(plan_id: int, db: Annotated[Session, Depends(get_db)]):
    row = get_library_plan(db, plan_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Plan not found")
    return LibraryPlanDetailOut.model_validate(row)
