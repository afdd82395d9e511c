"""Discover SQL migration files on disk.

Migrations are ``.sql`` files anywhere below the migrations directory,
named ``YYYYMMDDHHMMSS_snake_case_name.sql``:

- 20240101120000_create_users.sql
- 20240102093000_add_email_index.sql

The 14-digit prefix is the version (and the sort key); the rest, with
underscores turned into spaces, is the name. A file that does not follow
this pattern fails the whole load rather than being skipped.
Files are read as UTF-8; undecodable bytes (a latin-1 comment, say) are
replaced rather than rejected.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from schemashift.core.errors import ConfigError, InvalidFilenameError, StorageError
from schemashift.core.logging import get_logger
from schemashift.core.migrations.definition import MigrationDefinition
from schemashift.core.migrations.sql import make_sql_migration

logger = get_logger(__name__)

FILENAME_PATTERN = re.compile(r"^(\d{14})_(.+)\.sql$")


def parse_migration_filename(filename: str) -> tuple[str, str]:
    """Split ``20240101120000_create_users.sql`` into ``("20240101120000", "create users")``."""
    match = FILENAME_PATTERN.match(filename)
    if match is None:
        raise InvalidFilenameError(
            f"invalid migration filename format: {filename}",
            field="filename",
            value=filename,
        )
    return match.group(1), match.group(2).replace("_", " ")


def parse_migration_file(path: Path) -> MigrationDefinition:
    """Build a file-backed definition from one annotated SQL file."""
    version, name = parse_migration_filename(path.name)
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise StorageError(
            f"failed to read migration file: {path}", cause=exc
        ).with_context(path=str(path))

    return MigrationDefinition(
        version=version,
        name=name,
        forward=make_sql_migration(content, up=True),
        reverse=make_sql_migration(content, up=False),
        source_path=path,
    )


def discover_migration_files(directory: Path) -> list[Path]:
    """Return every regular ``.sql`` file below ``directory``, in path order."""
    return sorted(p for p in directory.rglob("*.sql") if p.is_file())


def load_migrations(directory: Path | str | None, *, log: Any = None) -> list[MigrationDefinition]:
    """Load all migration files below ``directory``, sorted by version.

    A directory that does not exist yields no migrations (with a warning);
    any unparsable or unreadable file raises.
    """
    log = log or logger
    if directory is None or str(directory) == "":
        raise ConfigError("migrations directory not set")

    directory = Path(directory)
    if not directory.exists():
        log.warning("loader.directory_missing", directory=str(directory))
        return []

    log.info("loader.scanning", directory=str(directory))
    definitions = []
    for path in discover_migration_files(directory):
        try:
            definition = parse_migration_file(path)
        except InvalidFilenameError as exc:
            log.error("loader.parse_failed", path=str(path), error=str(exc))
            raise exc.with_context(path=str(path))
        definitions.append(definition)
        log.debug("loader.loaded", version=definition.version, name=definition.name)

    definitions.sort(key=lambda d: d.version)
    log.info("loader.completed", directory=str(directory), count=len(definitions))
    return definitions


__all__ = [
    "FILENAME_PATTERN",
    "parse_migration_filename",
    "parse_migration_file",
    "discover_migration_files",
    "load_migrations",
]
