"""Plan acquisition: pasted text, uploaded file, or remote URL.

Every source yields an already-parsed JSON object. Failures raise
PlanAcquisitionError with a short opaque message; nothing is partially
consumed.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import httpx

from core.config import get_settings
from core.logging_config import get_logger, log_event

logger = get_logger(__name__)


class PlanAcquisitionError(ValueError):
    """The plan could not be read or parsed."""


def parse_plan_text(text: str) -> dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise PlanAcquisitionError(f"Invalid JSON: {exc.msg} (line {exc.lineno}, column {exc.colno})") from exc
    if not isinstance(data, dict):
        raise PlanAcquisitionError("Plan JSON must be an object")
    return data


def load_plan_file(path: str | Path) -> dict[str, Any]:
    file_path = Path(path)
    settings = get_settings()
    try:
        size = file_path.stat().st_size
        if size > settings.plan_max_bytes:
            raise PlanAcquisitionError(f"Plan file exceeds {settings.plan_max_bytes} bytes")
        text = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise PlanAcquisitionError(f"Cannot read plan file: {exc.strerror or exc}") from exc
    except UnicodeDecodeError as exc:
        raise PlanAcquisitionError("Invalid JSON file: not UTF-8 text") from exc
    return parse_plan_text(text)


def _read_capped(resp: httpx.Response, limit: int) -> bytes:
    declared = resp.headers.get("Content-Length", "")
    if declared.isdigit() and int(declared) > limit:
        raise PlanAcquisitionError(f"Plan document exceeds {limit} bytes")
    body = bytearray()
    for chunk in resp.iter_bytes():
        body.extend(chunk)
        if len(body) > limit:
            raise PlanAcquisitionError(f"Plan document exceeds {limit} bytes")
    return bytes(body)


def fetch_plan_url(url: str, client: Optional[httpx.Client] = None) -> dict[str, Any]:
    """GET a plan document; pass ``client`` to reuse a connection pool or inject a transport.

    The body is streamed and reading stops as soon as it passes PLAN_MAX_BYTES.
    """
    settings = get_settings()
    own_client = client is None
    http = client or httpx.Client(timeout=settings.plan_fetch_timeout_s, follow_redirects=True)
    try:
        with http.stream("GET", url) as resp:
            if resp.status_code >= 400:
                log_event(logger, "plan_fetch_failed", logging.WARNING, url=url, status_code=resp.status_code)
                raise PlanAcquisitionError(f"{resp.status_code} {resp.reason_phrase}")
            body = _read_capped(resp, settings.plan_max_bytes)
            encoding = resp.encoding or "utf-8"
    except httpx.HTTPError as exc:
        log_event(logger, "plan_fetch_failed", logging.WARNING, url=url, error=str(exc))
        raise PlanAcquisitionError(f"Failed to fetch: {exc}") from exc
    finally:
        if own_client:
            http.close()

    try:
        text = body.decode(encoding)
    except (LookupError, UnicodeDecodeError) as exc:
        raise PlanAcquisitionError(f"Invalid JSON: body is not {encoding} text") from exc
    log_event(logger, "plan_fetched", url=url, bytes=len(body))
    return parse_plan_text(text)
