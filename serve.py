"""Run the plan import API.

Run with:  python3 serve.py
"""

from __future__ import annotations

import os

import uvicorn

from core.config import get_settings
from core.db import init_db

API_PORT = int(os.getenv("PORT", "8000"))


def main() -> None:
    settings = get_settings()
    if settings.is_dev:
        # Local dev convenience; staging/production run `alembic upgrade head`.
        init_db()
    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=API_PORT,
        log_level=settings.log_level.lower(),
        # http_request middleware already logs every request.
        access_log=not settings.is_production,
    )


if __name__ == "__main__":
    main()
