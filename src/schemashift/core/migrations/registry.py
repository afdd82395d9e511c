"""Ordered, validated collection of migration definitions."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from schemashift.core.errors import ValidationError
from schemashift.core.migrations.definition import MigrationDefinition
from schemashift.core.migrations.loader import load_migrations


class MigrationRegistry:
    """Holds every known migration for the lifetime of a runner.

    Versions are unique. ``sort()`` orders definitions by comparing version
    strings, which is only meaningful when all of them share one
    fixed-width format; file-loaded definitions always do, programmatic
    ones are trusted.
    """

    def __init__(self) -> None:
        self._definitions: list[MigrationDefinition] = []

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, definition: MigrationDefinition) -> None:
        """Validate ``definition`` and append it."""
        self._validate(definition, self.versions)
        self._definitions.append(definition)

    def register_all(self, definitions: Iterable[MigrationDefinition]) -> None:
        """Register several definitions, all or nothing."""
        pending = list(definitions)
        seen = set(self.versions)
        for definition in pending:
            self._validate(definition, seen)
            seen.add(definition.version)
        self._definitions.extend(pending)

    def load_directory(self, directory: Path | str | None, *, log: Any = None) -> int:
        """Load and register every migration file below ``directory``.

        Returns the number of definitions added.
        """
        definitions = load_migrations(directory, log=log)
        self.register_all(definitions)
        self.sort()
        return len(definitions)

    def sort(self) -> None:
        """Order definitions ascending by version."""
        self._definitions.sort(key=lambda d: d.version)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @property
    def definitions(self) -> list[MigrationDefinition]:
        return list(self._definitions)

    @property
    def versions(self) -> set[str]:
        return {d.version for d in self._definitions}

    def get(self, version: str) -> MigrationDefinition | None:
        for definition in self._definitions:
            if definition.version == version:
                return definition
        return None

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self) -> Iterator[MigrationDefinition]:
        return iter(list(self._definitions))

    def __contains__(self, version: object) -> bool:
        return version in self.versions

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(definition: MigrationDefinition, existing: set[str]) -> None:
        if not definition.version:
            raise ValidationError("migration version cannot be empty", field="version")
        if not definition.name:
            raise ValidationError(
                "migration name cannot be empty", field="name"
            ).with_context(version=definition.version)
        if not callable(definition.forward):
            raise ValidationError(
                "migration forward function is required", field="forward"
            ).with_context(version=definition.version)
        if definition.version in existing:
            raise ValidationError(
                f"migration with version {definition.version} already exists",
                field="version",
                value=definition.version,
            ).with_context(version=definition.version)
