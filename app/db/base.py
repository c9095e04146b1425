"""
Database session and base configuration.
"""
import logging
from typing import List

from sqlalchemy import create_engine
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

from app.core.config import settings
from app.core.exceptions import PersistenceError

logger = logging.getLogger(__name__)

if settings.DATABASE_URL.startswith("sqlite"):
    # SQLite: one shared connection so in-memory databases survive across sessions
    engine = create_engine(
        settings.DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
elif settings.ENV == "production":
    # Production: no connection pooling for serverless
    engine = create_engine(
        settings.DATABASE_URL,
        poolclass=NullPool,
        pool_pre_ping=True,
        connect_args={
            "options": "-c statement_timeout=30000"  # 30s timeout
        }
    )
else:
    # Development: Use small pool
    engine = create_engine(
        settings.DATABASE_URL,
        pool_size=5,
        max_overflow=0,
        pool_pre_ping=True,
        pool_recycle=3600
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def commit(db: Session, action: str) -> None:
    """
    Commit the session's pending changes as one transaction.

    Raises:
        PersistenceError: If the database rejects the commit; the session is rolled back
    """
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to {action}: {e}")
        raise PersistenceError() from e


def upsert(db: Session, model, conflict_columns: List[str], values: dict, update_values: dict) -> None:
    """
    Insert a row or, when ``conflict_columns`` already match one, update it in place.

    Runs as a single ``INSERT ... ON CONFLICT DO UPDATE`` so two first writes for
    the same key both succeed. Part of the session's transaction; call ``commit``.
    """
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = postgresql.insert(model).values(**values)
    elif dialect == "sqlite":
        stmt = sqlite.insert(model).values(**values)
    else:
        raise NotImplementedError(f"Upsert is not supported for {dialect}")
    try:
        db.execute(stmt.on_conflict_do_update(index_elements=conflict_columns, set_=update_values))
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to upsert {model.__tablename__}: {e}")
        raise PersistenceError() from e
