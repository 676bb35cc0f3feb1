# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from math import ceil

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, scoped_session, sessionmaker

from wellnest.shared.config import load_config
from wellnest.shared.config.settings import DatabaseConfig
from wellnest.shared.logging import logger

_config = load_config()


class Base(DeclarativeBase):
    pass


def _connect_args(backend: str, database: DatabaseConfig) -> dict[str, object]:
    timeout = database.query_timeout
    if backend == "sqlite":
        return {"check_same_thread": False, "timeout": timeout}
    if backend == "postgresql":
        return {
            "connect_timeout": ceil(timeout),
            "options": f"-c statement_timeout={int(timeout * 1000)}",
        }
    if backend in {"mysql", "mariadb"}:
        seconds = ceil(timeout)
        return {"connect_timeout": seconds, "read_timeout": seconds, "write_timeout": seconds}
    return {}


def _engine_kwargs(database: DatabaseConfig) -> dict[str, object]:
    """Pool settings plus driver arguments that bound connect and statement time."""
    backend = make_url(database.url).get_backend_name()
    kwargs: dict[str, object] = {"connect_args": _connect_args(backend, database)}
    if backend != "sqlite":
        kwargs.update(
            pool_size=database.pool_size,
            max_overflow=database.max_overflow,
            pool_timeout=database.pool_timeout,
        )
    return kwargs


ENGINE: Engine = create_engine(
    _config.database.url,
    echo=False,
    pool_pre_ping=True,
    **_engine_kwargs(_config.database),
)


SessionLocal = scoped_session(
    sessionmaker(bind=ENGINE, autoflush=False, autocommit=False, expire_on_commit=False)
)


@contextmanager
def session_scope() -> Iterator[Session]:
    session = SessionLocal()
    logger.debug("db.session: opened scoped session")
    try:
        yield session
        session.commit()
        logger.debug("db.session: committed scoped session")
    except Exception:
        logger.exception("db.session: error, rolling back")
        session.rollback()
        raise
    finally:
        session.close()
        SessionLocal.remove()
        logger.debug("db.session: closed scoped session")


def init_db() -> None:
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=ENGINE)
    logger.info("Database schema ensured")
