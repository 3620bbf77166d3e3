"""
Database configuration and base model.

Uses SQLAlchemy 2.0 declarative style with SQLite.
"""

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from config import PATHS

IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def create_db_engine(url: Optional[str] = None) -> Engine:
    """
    Create an engine for the given URL (default: the per-user database).

    In-memory SQLite URLs share one connection so every session sees
    the same tables.
    """
    url = url or PATHS.database_url

    if url in IN_MEMORY_URLS:
        return create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        url,
        echo=False,
        connect_args={"check_same_thread": False},
    )


def make_session_factory(db_engine: Engine) -> sessionmaker:
    """Session factory bound to an engine."""
    return sessionmaker(bind=db_engine, autocommit=False, autoflush=False)


@contextmanager
def get_session(factory: sessionmaker) -> Generator[Session, None, None]:
    """Context manager for database sessions."""
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(db_engine: Engine) -> None:
    """Initialize the database, creating all tables."""
    # Register models on the metadata
    import models.kv_entry  # noqa: F401

    Base.metadata.create_all(bind=db_engine)
