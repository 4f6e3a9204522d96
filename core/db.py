from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from core.config import get_database_url
from core.models import Base


@lru_cache(maxsize=4)
def get_engine(url: Optional[str] = None) -> Engine:
    url = url or get_database_url()
    if url.startswith("sqlite") and (":memory:" in url or url.rstrip("/") == "sqlite:"):
        # One shared connection so every session sees the same in-memory database.
        return create_engine(url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    return create_engine(url, pool_pre_ping=True)


@lru_cache(maxsize=4)
def get_session_factory(url: Optional[str] = None) -> sessionmaker[Session]:
    return sessionmaker(bind=get_engine(url), autoflush=False, autocommit=False, expire_on_commit=False)


def init_db(url: Optional[str] = None) -> None:
    """Create missing tables; production databases are migrated with alembic instead."""
    Base.metadata.create_all(get_engine(url))


def reset_caches() -> None:
    get_session_factory.cache_clear()
    get_engine.cache_clear()


@contextmanager
def db_session(url: Optional[str] = None) -> Iterator[Session]:
    session = get_session_factory(url)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
