"""In-memory description of one schema change."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy.engine import Connection

MigrationFunc = Callable[[Connection], None]
"""Forward or reverse step. Receives the migration's transactional
connection; raising an exception marks the step as failed."""


@dataclass
class MigrationDefinition:
    """A single migration, registered programmatically or loaded from a file.

    ``version`` is compared as a string, so every definition in one registry
    should use the same fixed-width format (``YYYYMMDDHHMMSS``). Only the
    file loader enforces that.
    """

    version: str
    name: str
    forward: MigrationFunc
    reverse: MigrationFunc | None = None
    description: str = ""
    source_path: Path | None = None

    @property
    def is_file_backed(self) -> bool:
        return self.source_path is not None
