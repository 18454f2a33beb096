# pyright: reportMissingTypeStubs=false
"""
SQLAlchemy engine, declarative base and the request-scoped session.

Every table carries naive server-local ``created_at``/``updated_at`` columns;
they are stamped here on flush rather than by database defaults so SQLite
(tests) and PostgreSQL behave the same.
"""

import logging
from typing import Any, Dict, Generator

from fastapi import HTTPException
from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from core.config import DATABASE_URL
from core.constants import DB_POOL_RECYCLE_SECONDS

logger = logging.getLogger(__name__)

TIMESTAMP_COLUMNS = ("created_at", "updated_at")


def build_engine_options(url: str) -> Dict[str, Any]:
    if url.startswith("sqlite"):
        # Async route handlers share the connection across threadpool workers
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_recycle": DB_POOL_RECYCLE_SECONDS}


engine = create_engine(DATABASE_URL, **build_engine_options(DATABASE_URL))

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base for the case log tables."""


@event.listens_for(Base, "before_insert", propagate=True)  # type: ignore
def stamp_created(mapper, connection, target):  # type: ignore
    from utils.datetime_utils import local_now
    now = local_now()
    for column in TIMESTAMP_COLUMNS:
        if column in mapper.columns and getattr(target, column, None) is None:  # type: ignore
            setattr(target, column, now)


@event.listens_for(Base, "before_update", propagate=True)  # type: ignore
def stamp_updated(mapper, connection, target):  # type: ignore
    from utils.datetime_utils import local_now
    if "updated_at" in mapper.columns:  # type: ignore
        target.updated_at = local_now()


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency yielding one session per request.

    The session is rolled back when the request fails and always closed.
    HTTP errors are expected outcomes and are not logged here.
    """
    db = SessionLocal()
    try:
        yield db
    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        logger.exception(f"Rolling back request session after error: {e}")
        db.rollback()
        raise
    finally:
        db.close()
