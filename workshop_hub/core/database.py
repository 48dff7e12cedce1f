"""Database engine and session management."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator
from urllib.parse import urlparse

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from workshop_hub.core.config import get_settings


def _ensure_sqlite_directory(database_url: str) -> None:
    """Create the parent directory for a file-backed SQLite database."""

    parsed = urlparse(database_url)
    if parsed.scheme != "sqlite":
        return
    if parsed.path in ("", ":memory:", "/:memory:"):
        return

    # SQLAlchemy drops the leading slash: sqlite:///./data/x.db -> ./data/x.db
    Path(parsed.path[1:]).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)


def _create_engine() -> Engine:
    settings = get_settings()
    url = settings.database_url
    if not url.startswith("sqlite"):
        return create_engine(url, future=True, echo=settings.sql_echo, pool_pre_ping=True)

    _ensure_sqlite_directory(url)
    engine_kwargs: dict[str, object] = {
        "future": True,
        "echo": settings.sql_echo,
        "connect_args": {"check_same_thread": False},
    }
    if url.endswith(":memory:") or url == "sqlite://":
        engine_kwargs["poolclass"] = StaticPool
    return create_engine(url, **engine_kwargs)


engine: Engine = _create_engine()

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
    future=True,
    class_=Session,
)


def create_schema() -> None:
    """Create all tables known to the ORM metadata."""

    from workshop_hub.models import Base

    Base.metadata.create_all(bind=engine)


def get_session() -> Iterator[Session]:
    """FastAPI dependency for acquiring a database session."""

    session: Session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Provide a transactional scope for scripts and background jobs."""

    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
