"""Generate new, empty migration files."""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path
from typing import Any

from schemashift.core.errors import ConfigError, StorageError, ValidationError
from schemashift.core.logging import get_logger
from schemashift.core.timestamps import DISPLAY_FORMAT, version_stamp

logger = get_logger(__name__)

_UNSAFE = re.compile(r"[^a-z0-9_]")

TEMPLATE = """\
-- +migrate Up
-- {name}
-- Created: {created}

-- Add your UP migration SQL here


-- +migrate Down
-- Rollback for: {name}

-- Add your DOWN migration SQL here (optional)

"""


def slugify(name: str) -> str:
    """``"Add user table"`` → ``"add_user_table"``."""
    return _UNSAFE.sub("", name.lower().replace(" ", "_"))


def create_migration_file(
    directory: Path | str | None,
    name: str,
    *,
    now: datetime | None = None,
    log: Any = None,
) -> Path:
    """Write ``<YYYYMMDDHHMMSS>_<slug>.sql`` with empty Up/Down sections.

    The directory is created if needed. An existing file is never
    overwritten.
    """
    log = log or logger
    if directory is None or str(directory) == "":
        raise ConfigError("migrations directory not set")

    slug = slugify(name)
    if not slug:
        raise ValidationError(
            "migration name must contain at least one letter or digit",
            field="name",
            value=name,
        )

    now = now or datetime.now()
    directory = Path(directory)
    path = directory / f"{version_stamp(now)}_{slug}.sql"

    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StorageError(
            "failed to create migrations directory", cause=exc
        ).with_context(path=str(directory))

    content = TEMPLATE.format(name=name, created=now.strftime(DISPLAY_FORMAT))
    try:
        with path.open("x", encoding="utf-8") as fh:
            fh.write(content)
    except OSError as exc:
        raise StorageError(
            "failed to create migration file", cause=exc
        ).with_context(path=str(path))

    log.info("migration.created", path=str(path))
    return path


__all__ = ["TEMPLATE", "slugify", "create_migration_file"]
