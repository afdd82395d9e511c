"""SQLAlchemy engine factory and session class.

This module provides:

* ``create_migration_engine``   -- Create a SA engine from a URL.
* ``MigrationSession``          -- A pre-configured ``Session`` subclass.
* ``migration_session_factory`` -- ``sessionmaker`` producing ``MigrationSession``.

The engine is owned by the caller; the migration runner only borrows
connections from it, one transaction per migration and one short-lived
session per bookkeeping write.

Tags:
    schemashift, orm, sqlalchemy, session, engine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine as _sa_create_engine
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker


def create_migration_engine(
    url: str = "sqlite:///schemashift.db",
    *,
    echo: bool = False,
    pool_size: int | None = None,
    **kwargs: Any,
) -> Engine:
    """Create a SQLAlchemy engine suitable for running migrations.

    Parameters
    ----------
    url:
        Database URL (``sqlite:///…``, ``postgresql://…``, etc.)
    echo:
        If ``True``, log all SQL to stdout.
    pool_size:
        Connection pool size (ignored for SQLite).
    **kwargs:
        Extra arguments forwarded to ``sqlalchemy.create_engine``.
    """
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        engine = _sa_create_engine(url, echo=echo, **kwargs)

        # pysqlite commits implicitly before DDL; take over BEGIN so that
        # CREATE/ALTER/DROP roll back with the rest of a failed migration.
        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection: Any, _rec: Any) -> None:
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _emit_begin(conn: Any) -> None:
            conn.exec_driver_sql("BEGIN")

        return engine

    if pool_size is not None:
        kwargs["pool_size"] = pool_size
    return _sa_create_engine(url, echo=echo, **kwargs)


class MigrationSession(Session):
    """Pre-configured session with ``expire_on_commit=False``.

    Records fetched in one session are mutated and saved from another one
    after the migration transaction finishes, so attributes must stay loaded
    after commit.
    """

    def __init__(self, bind: Engine | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("expire_on_commit", False)
        super().__init__(bind=bind, **kwargs)


def migration_session_factory(engine: Engine) -> sessionmaker[MigrationSession]:
    """Return a ``sessionmaker`` bound to *engine* that produces ``MigrationSession`` instances."""
    return sessionmaker(bind=engine, class_=MigrationSession, expire_on_commit=False)
