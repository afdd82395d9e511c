"""
Shared pytest fixtures for schemashift tests.

This module provides:
- A file-backed SQLite engine per test (under ``tmp_path``)
- A migrations directory and a factory for writing migration files
- A ``MigrationRunner`` wired to both
- Helpers for programmatic migrations that record their calls

Usage:
    def test_something(runner, write_migration):
        write_migration("20240101000000", "create users", up="CREATE TABLE users (id INTEGER)")
        runner.load()
        runner.up()
"""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from sqlalchemy.engine import Engine

# Ensure schemashift package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from schemashift.core.migrations import MigrationDefinition, MigrationRunner
from schemashift.core.orm.session import create_migration_engine
from schemashift.core.settings import clear_settings_cache


# =============================================================================
# Settings isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Run every test from an empty directory with no SCHEMASHIFT_* overrides."""
    for key in list(os.environ):
        if key.startswith("SCHEMASHIFT_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Database
# =============================================================================


@pytest.fixture()
def db_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'test.db'}"


@pytest.fixture()
def db_engine(db_url: str) -> Iterator[Engine]:
    """SQLite engine with transactional DDL enabled."""
    engine = create_migration_engine(db_url)
    yield engine
    engine.dispose()


# =============================================================================
# Migrations
# =============================================================================


@pytest.fixture()
def migrations_dir(tmp_path: Path) -> Path:
    d = tmp_path / "migrations"
    d.mkdir()
    return d


@pytest.fixture()
def write_migration(migrations_dir: Path) -> Callable[..., Path]:
    """Factory writing ``<version>_<name>.sql`` with Up/Down sections."""

    def _write(
        version: str,
        name: str,
        up: str | None = None,
        down: str | None = None,
        *,
        subdir: str | None = None,
    ) -> Path:
        directory = migrations_dir / subdir if subdir else migrations_dir
        directory.mkdir(parents=True, exist_ok=True)
        parts = []
        if up is not None:
            parts.append(f"-- +migrate Up\n{up}\n")
        if down is not None:
            parts.append(f"-- +migrate Down\n{down}\n")
        path = directory / f"{version}_{name.replace(' ', '_')}.sql"
        path.write_text("\n".join(parts), encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def runner(db_engine: Engine, migrations_dir: Path) -> MigrationRunner:
    """Runner on an empty database; migrations are not loaded yet."""
    return MigrationRunner(db_engine, migrations_dir)


class CallLog:
    """Records the order in which programmatic migrations run."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def step(self, label: str, *, fail: bool = False) -> Callable:
        def _run(conn) -> None:
            self.calls.append(label)
            if fail:
                raise RuntimeError(f"{label} exploded")

        return _run

    def definition(
        self,
        version: str,
        *,
        fail_up: bool = False,
        fail_down: bool = False,
        reversible: bool = True,
    ) -> MigrationDefinition:
        return MigrationDefinition(
            version=version,
            name=f"migration {version}",
            forward=self.step(f"up:{version}", fail=fail_up),
            reverse=self.step(f"down:{version}", fail=fail_down) if reversible else None,
        )


@pytest.fixture()
def call_log() -> CallLog:
    return CallLog()
