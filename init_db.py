"""
Script to initialize the database with tables and seed data.
"""
import logging

from app.db.base import Base, engine, SessionLocal
from app.db.init_db import init_db
import app.models  # noqa: F401  (registers tables on Base.metadata)

logging.basicConfig(level=logging.INFO, format='%(levelname)s:\t%(name)s\t%(message)s')
logger = logging.getLogger("init_db")


def init() -> None:
    """Initialize database."""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")

    logger.info("Seeding initial data...")
    db = SessionLocal()
    try:
        init_db(db)
        logger.info("Initial data seeded")
    finally:
        db.close()

    logger.info("Database initialization complete!")


if __name__ == "__main__":
    init()
