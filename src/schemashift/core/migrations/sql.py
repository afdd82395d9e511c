"""Annotated SQL migration files.

A migration file has an Up section and an optional Down section::

    -- +migrate Up
    CREATE TABLE users (id INTEGER PRIMARY KEY);

    -- +migrate Down
    DROP TABLE users;

Each section is split on ``;`` and the statements run in file order inside
the migration's transaction.
"""

from __future__ import annotations

from sqlalchemy.engine import Connection
from sqlalchemy.exc import DBAPIError

from schemashift.core.errors import MigrationError
from schemashift.core.migrations.definition import MigrationFunc

UP_MARKER = "-- +migrate Up"
DOWN_MARKER = "-- +migrate Down"


def extract_up_sql(content: str) -> str:
    """Return the trimmed lines between the Up marker and the Down marker."""
    lines: list[str] = []
    in_up = False
    for raw in content.splitlines():
        line = raw.strip()
        if line == UP_MARKER:
            in_up = True
            continue
        if line == DOWN_MARKER:
            break
        if in_up:
            lines.append(line)
    return "\n".join(lines).strip()


def extract_down_sql(content: str) -> str:
    """Return the trimmed lines after the Down marker."""
    lines: list[str] = []
    in_down = False
    for raw in content.splitlines():
        line = raw.strip()
        if line == DOWN_MARKER:
            in_down = True
            continue
        if in_down:
            lines.append(line)
    return "\n".join(lines).strip()


def _is_comment_only(statement: str) -> bool:
    return all(line.startswith("--") for line in statement.splitlines() if line.strip())


def split_statements(sql: str) -> list[str]:
    """Split on ``;`` into trimmed, non-empty statements.

    Pieces made only of ``--`` comment lines are dropped; they would be
    no-ops and some drivers reject an empty statement.
    """
    statements = []
    for piece in sql.split(";"):
        stmt = piece.strip()
        if stmt and not _is_comment_only(stmt):
            statements.append(stmt)
    return statements


def make_sql_migration(content: str, *, up: bool) -> MigrationFunc:
    """Build the forward (``up=True``) or reverse step for a file's content.

    An empty Up section fails when executed; an empty Down section is a
    successful no-op.
    """
    sql = extract_up_sql(content) if up else extract_down_sql(content)

    def run(conn: Connection) -> None:
        if not sql:
            if up:
                raise MigrationError("no UP SQL found in migration")
            return
        for stmt in split_statements(sql):
            try:
                conn.exec_driver_sql(stmt)
            except DBAPIError as exc:
                raise MigrationError(
                    f"failed to execute SQL statement: {exc.orig}", cause=exc
                ) from exc

    return run


__all__ = [
    "UP_MARKER",
    "DOWN_MARKER",
    "extract_up_sql",
    "extract_down_sql",
    "split_statements",
    "make_sql_migration",
]
