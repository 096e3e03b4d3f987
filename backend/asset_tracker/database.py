"""Database engine, session factory and unit-of-work helper."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import settings
from .domain_errors import ConflictError, DomainError, InternalError

logger = logging.getLogger(__name__)

Base = declarative_base()


def _engine_kwargs() -> dict:
    if settings.is_sqlite:
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        "pool_pre_ping": True,
    }


engine = create_engine(settings.DATABASE_URL, **_engine_kwargs())


if engine.dialect.name == "postgresql":

    @event.listens_for(engine, "connect")
    def _set_lock_timeout(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute(f"SET lock_timeout = {int(settings.DATABASE_LOCK_TIMEOUT_MS)}")
        cursor.close()


SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_db() -> Iterator[Session]:
    """FastAPI dependency: one session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """Run a block as one all-or-nothing transaction.

    Commits on normal exit and rolls back on any exception. Domain errors pass
    through unchanged; unique/foreign-key violations become ``ConflictError``;
    any other storage failure (lock timeout, deadlock, lost connection) becomes
    a retryable ``InternalError``.
    """
    try:
        yield db
        db.commit()
    except DomainError as exc:
        db.rollback()
        logger.warning("Unit of work rolled back: %s", exc.code)
        raise
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Unit of work rolled back on integrity violation")
        raise ConflictError("Operation conflicts with existing data") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Unit of work failed in storage layer")
        raise InternalError("Storage failure, the operation can be retried") from exc
    except Exception:
        db.rollback()
        raise
