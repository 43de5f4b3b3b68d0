from __future__ import annotations

import logging
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from webcalc.core.config import get_settings
from webcalc.db.base import Base

logger = logging.getLogger("webcalc.db")

_engine: Engine | None = None
_SessionLocal: sessionmaker[Session] | None = None


def ensure_sqlite_directory(db_url: str) -> None:
    url = make_url(db_url)
    if url.get_backend_name() != "sqlite" or not url.database or url.database == ":memory:":
        return
    Path(url.database).expanduser().parent.mkdir(parents=True, exist_ok=True)


def _get_engine() -> Engine:
    global _engine
    if _engine is None:
        db_url = get_settings().database_url
        kwargs: dict[str, object] = {}
        if db_url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
        _engine = create_engine(db_url, **kwargs)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(bind=_get_engine(), autoflush=False, autocommit=False, expire_on_commit=False)
    return _SessionLocal


def get_session() -> Generator[Session, None, None]:
    session_factory = get_session_factory()
    with session_factory() as session:
        yield session


def init_db(engine: Engine | None = None) -> Engine:
    """Create the calculations schema if it does not exist yet."""
    if engine is None:
        ensure_sqlite_directory(get_settings().database_url)
        engine = _get_engine()
    Base.metadata.create_all(engine)
    logger.info("db.schema_ready", extra={"backend": engine.url.get_backend_name()})
    return engine
