"""Database connection and session management."""

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional
import uuid

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base

from .config import get_settings, PROJECT_ROOT


Base = declarative_base()

SessionFactory = Callable[[], Session]


def new_id() -> str:
    """Primary keys are UUID strings."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_engine(database_url: Optional[str] = None) -> Engine:
    """Create database engine."""
    db_url = database_url or get_settings().database_url

    # Handle relative SQLite paths
    if db_url.startswith("sqlite:///") and not db_url.startswith("sqlite:////"):
        db_path = db_url.replace("sqlite:///", "")
        full_path = PROJECT_ROOT / db_path
        full_path.parent.mkdir(parents=True, exist_ok=True)
        db_url = f"sqlite:///{full_path}"

    return create_engine(
        db_url,
        echo=False,
        connect_args={"check_same_thread": False} if db_url.startswith("sqlite") else {}
    )


def get_session_factory(engine: Optional[Engine] = None) -> SessionFactory:
    """Create session factory."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine or get_engine())


@contextmanager
def get_db_session(session_factory: Optional[SessionFactory] = None) -> Iterator[Session]:
    """Context manager for database sessions: one unit of work per block."""
    factory = session_factory or get_session_factory()
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def _register_models():
    # Import models so they are registered with Base
    from . import models  # noqa: F401


def init_db(engine: Optional[Engine] = None) -> Engine:
    """Initialize the database (create all tables)."""
    _register_models()
    engine = engine or get_engine()
    Base.metadata.create_all(bind=engine)
    logger.info("Database initialized at {}", engine.url)
    return engine


def reset_db(engine: Optional[Engine] = None) -> Engine:
    """Reset the database (drop and recreate all tables)."""
    _register_models()
    engine = engine or get_engine()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    logger.warning("Database reset at {}", engine.url)
    return engine
