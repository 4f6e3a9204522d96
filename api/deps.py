from __future__ import annotations

from collections.abc import Generator

from sqlalchemy.orm import Session

from core.db import db_session


def get_db() -> Generator[Session, None, None]:
    """Per-request session: committed when the handler returns, rolled back if it raises."""
    with db_session() as session:
        yield session
