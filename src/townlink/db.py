from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from .config import load_config
from .errors import StoreError


class Base(DeclarativeBase):
    pass


def engine_options(database_url: str, pool_timeout: int = 30, pool_recycle: int = 3600) -> dict:
    options: dict = {"pool_pre_ping": True}
    if database_url.startswith("sqlite"):
        # Handlers run in the FastAPI thread pool, so connections cross threads.
        options["connect_args"] = {"check_same_thread": False}
        if database_url in {"sqlite://", "sqlite:///:memory:"}:
            return options
    options["pool_recycle"] = pool_recycle  # Recycle connections after this many seconds
    options["pool_timeout"] = pool_timeout  # Give up waiting for a pooled connection after this many seconds
    return options


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection.
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


_config = load_config()
_engine = create_engine(
    _config.database_url,
    **engine_options(_config.database_url, _config.db_pool_timeout, _config.db_pool_recycle),
)
SessionLocal = sessionmaker(bind=_engine, expire_on_commit=False)


def get_engine() -> Engine:
    return _engine


@contextmanager
def session_scope():
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        raise StoreError("Directory store operation failed", cause=exc) from exc
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
