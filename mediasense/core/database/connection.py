# File: mediasense/core/database/connection.py

import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from mediasense.core.config.settings import settings
from .base import Base

logger = logging.getLogger(__name__)

# SQLite only: sessions are opened from worker threads.
connect_args = {"check_same_thread": False} if "sqlite" in settings.DATABASE_URL else {}

engine = create_engine(
    settings.DATABASE_URL,
    echo=False,
    pool_pre_ping=True,
    connect_args=connect_args
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Dependency for obtaining a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Registers all models and creates missing tables."""
    import mediasense.core.jobs.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info(f"Database schema ensured at {engine.url.render_as_string(hide_password=True)}")
