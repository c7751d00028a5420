"""Database connection and session management."""

import logging
from datetime import date, datetime, timezone
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from membership.config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.database_url

# Create engine (SQLite uses StaticPool for simplicity in dev/test)
if DATABASE_URL.startswith("sqlite"):
    engine = create_engine(
        DATABASE_URL,
        echo=settings.database_echo,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    engine = create_engine(DATABASE_URL, echo=settings.database_echo, pool_pre_ping=True)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit_or_rollback(db: Session) -> None:
    """Commit the unit of work; on a storage error roll it back and re-raise."""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Commit failed, session rolled back: {e}", exc_info=True)
        raise


def utc_today() -> date:
    """Current calendar date in UTC, the single clock of the ledger and reports."""
    return datetime.now(timezone.utc).date()


__all__ = [
    "engine",
    "SessionLocal",
    "get_db",
    "commit_or_rollback",
    "utc_today",
]
