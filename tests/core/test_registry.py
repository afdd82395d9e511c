"""Tests for MigrationRegistry validation, ordering and directory loads."""

from __future__ import annotations

import pytest

from schemashift.core.errors import InvalidFilenameError, ValidationError
from schemashift.core.migrations import MigrationDefinition, MigrationRegistry


def _noop(conn) -> None:
    pass


def _definition(version: str, name: str = "step") -> MigrationDefinition:
    return MigrationDefinition(version=version, name=name, forward=_noop)


@pytest.fixture()
def registry() -> MigrationRegistry:
    return MigrationRegistry()


class TestRegister:
    def test_register_and_lookup(self, registry):
        d = _definition("20240101000000")
        registry.register(d)
        assert len(registry) == 1
        assert "20240101000000" in registry
        assert registry.get("20240101000000") is d
        assert registry.get("20990101000000") is None

    def test_empty_version_rejected(self, registry):
        with pytest.raises(ValidationError, match="version cannot be empty"):
            registry.register(_definition(""))

    def test_empty_name_rejected(self, registry):
        with pytest.raises(ValidationError, match="name cannot be empty"):
            registry.register(_definition("20240101000000", name=""))

    def test_missing_forward_rejected(self, registry):
        d = MigrationDefinition(version="20240101000000", name="x", forward=None)  # type: ignore[arg-type]
        with pytest.raises(ValidationError, match="forward function is required"):
            registry.register(d)

    def test_duplicate_rejected(self, registry):
        registry.register(_definition("20240101000000"))
        with pytest.raises(ValidationError, match="already exists"):
            registry.register(_definition("20240101000000", name="other"))
        assert len(registry) == 1


class TestRegisterAll:
    def test_atomic_on_internal_duplicate(self, registry):
        batch = [_definition("20240101000000"), _definition("20240102000000"), _definition("20240101000000")]
        with pytest.raises(ValidationError, match="already exists"):
            registry.register_all(batch)
        assert len(registry) == 0

    def test_atomic_on_invalid_member(self, registry):
        with pytest.raises(ValidationError):
            registry.register_all([_definition("20240101000000"), _definition("")])
        assert len(registry) == 0


class TestSort:
    def test_ascending_by_version(self, registry):
        for version in ("20240103000000", "20240101000000", "20240102000000"):
            registry.register(_definition(version))
        registry.sort()
        assert [d.version for d in registry] == [
            "20240101000000",
            "20240102000000",
            "20240103000000",
        ]


class TestLoadDirectory:
    def test_loads_and_sorts(self, registry, write_migration, migrations_dir):
        write_migration("20240102000000", "second", up="SELECT 2;")
        write_migration("20240101000000", "first", up="SELECT 1;")
        registry.register(_definition("20240101500000", name="code"))

        assert registry.load_directory(migrations_dir) == 2
        assert [d.version for d in registry.definitions] == [
            "20240101000000",
            "20240101500000",
            "20240102000000",
        ]

    def test_file_duplicating_programmatic_version_rejected(
        self, registry, write_migration, migrations_dir
    ):
        registry.register(_definition("20240101000000"))
        write_migration("20240101000000", "clash", up="SELECT 1;")
        with pytest.raises(ValidationError, match="already exists"):
            registry.load_directory(migrations_dir)
        assert len(registry) == 1

    def test_programmatic_duplicating_file_version_rejected(
        self, registry, write_migration, migrations_dir
    ):
        write_migration("20240101000000", "from file", up="SELECT 1;")
        registry.load_directory(migrations_dir)
        with pytest.raises(ValidationError, match="already exists"):
            registry.register(_definition("20240101000000"))

    def test_duplicate_versions_in_directory_register_nothing(
        self, registry, write_migration, migrations_dir
    ):
        write_migration("20240101000000", "one", up="SELECT 1;")
        write_migration("20240101000000", "two", up="SELECT 2;", subdir="nested")
        write_migration("20240102000000", "three", up="SELECT 3;")
        with pytest.raises(ValidationError, match="already exists"):
            registry.load_directory(migrations_dir)
        assert len(registry) == 0

    def test_bad_file_registers_nothing(self, registry, write_migration, migrations_dir):
        write_migration("20240101000000", "good", up="SELECT 1;")
        (migrations_dir / "bad.sql").write_text("SELECT 1;")
        with pytest.raises(InvalidFilenameError):
            registry.load_directory(migrations_dir)
        assert len(registry) == 0
