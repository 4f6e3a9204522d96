from __future__ import annotations

import logging
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from api.observability import (
    configure_logging,
    monotonic_ms,
    new_request_id,
    request_log_fields,
    reset_request_id,
    set_request_id,
)
from api.ratelimit import limiter, rate_limit_exceeded_handler
from api.routes import router
from core.config import get_settings
from core.services.plan_acquisition import PlanAcquisitionError
from core.services.plan_catalog import CatalogMetadataError
from core.services.plan_import import ConsistencyError, StructuralValidationError

logger = logging.getLogger(__name__)


def _error(status_code: int, code: str, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": {"code": code, "message": message, **extra}})


def structural_error_handler(request: Request, exc: Exception) -> JSONResponse:
    errors = exc.errors if isinstance(exc, StructuralValidationError) else [str(exc)]
    return _error(422, "PLAN_SCHEMA_INVALID", str(exc), errors=errors)


def consistency_error_handler(request: Request, exc: Exception) -> JSONResponse:
    extra = {}
    if isinstance(exc, ConsistencyError):
        extra = {"duration_weeks": exc.duration_weeks, "last_week": exc.last_week}
    return _error(422, "PLAN_WEEKS_INCONSISTENT", str(exc), **extra)


def acquisition_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return _error(400, "PLAN_ACQUISITION_FAILED", str(exc))


def metadata_error_handler(request: Request, exc: Exception) -> JSONResponse:
    errors = exc.errors if isinstance(exc, CatalogMetadataError) else [str(exc)]
    return _error(422, "CATALOG_METADATA_INVALID", str(exc), errors=errors)


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Plan Import API", version="1.0.0")
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(StructuralValidationError, structural_error_handler)
    app.add_exception_handler(ConsistencyError, consistency_error_handler)
    app.add_exception_handler(PlanAcquisitionError, acquisition_error_handler)
    app.add_exception_handler(CatalogMetadataError, metadata_error_handler)
    app.include_router(router)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context_and_logging(request: Request, call_next: Callable) -> Response:
        header_name = settings.request_id_header_name or "X-Request-ID"
        request_id = (request.headers.get(header_name) or "").strip() or new_request_id()
        token = set_request_id(request_id)
        started_ms = monotonic_ms()
        client_ip = getattr(request.client, "host", None)
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = monotonic_ms() - started_ms
            logger.exception(
                "http_request_error",
                extra=request_log_fields(
                    method=request.method,
                    path=request.url.path,
                    status_code=500,
                    duration_ms=duration_ms,
                    client_ip=client_ip,
                ),
            )
            raise
        else:
            response.headers[header_name] = request_id
            duration_ms = monotonic_ms() - started_ms
            logger.info(
                "http_request",
                extra=request_log_fields(
                    method=request.method,
                    path=request.url.path,
                    status_code=response.status_code,
                    duration_ms=duration_ms,
                    client_ip=client_ip,
                ),
            )
            return response
        finally:
            reset_request_id(token)

    return app


app = create_app()
