"""Catalog store for finished plans."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from core.logging_config import get_logger, log_event
from core.models import LibraryPlan
from core.validators import LibraryPlanPublishInput, format_validation_errors

logger = get_logger(__name__)


class CatalogMetadataError(ValueError):
    """Catalog metadata derived from a plan failed validation."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("\n".join(self.errors))


def publish_library_plan(
    session: Session,
    *,
    plan: Mapping[str, Any],
    discipline: str,
    tags: Iterable[str] = (),
    status: str = "published",
) -> LibraryPlan:
    """Persist a finished plan with its catalog metadata.

    Metadata is checked with LibraryPlanPublishInput; a failure raises
    CatalogMetadataError and nothing is written.
    """
    try:
        payload = LibraryPlanPublishInput(
            name=str(plan.get("name") or ""),
            description=str(plan.get("description") or ""),
            discipline=discipline,
            duration_weeks=plan.get("duration_weeks"),
            tags=list(tags),
            status=status,
            template=dict(plan),
        )
    except ValidationError as exc:
        raise CatalogMetadataError(format_validation_errors(exc)) from exc
    row = LibraryPlan(**payload.model_dump())
    session.add(row)
    session.flush()
    log_event(
        logger,
        "library_plan_published",
        plan_id=row.id,
        discipline=row.discipline,
        status=row.status,
        duration_weeks=row.duration_weeks,
    )
    return row


def list_library_plans(
    session: Session,
    discipline: Optional[str] = None,
    status: Optional[str] = None,
) -> list[LibraryPlan]:
    q = select(LibraryPlan)
    if discipline:
        q = q.where(LibraryPlan.discipline == discipline)
    if status:
        q = q.where(LibraryPlan.status == status)
    return list(session.execute(q.order_by(LibraryPlan.name, LibraryPlan.id)).scalars().all())


def get_library_plan(session: Session, plan_id: int) -> Optional[LibraryPlan]:
    return session.get(LibraryPlan, plan_id)
