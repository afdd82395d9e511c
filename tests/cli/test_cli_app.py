"""Tests for the schemashift CLI via CliRunner against a real SQLite file."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from schemashift import __version__
from schemashift.cli.app import app

runner = CliRunner()

V1, V2 = "20240101000000", "20240102000000"


@pytest.fixture()
def invoke(db_url, migrations_dir):
    """Run a command with --database/--migrations pointing at the test fixtures."""

    def _invoke(*args: str):
        return runner.invoke(app, [*args, "-d", db_url, "-m", str(migrations_dir)])

    return _invoke


@pytest.fixture()
def two_migrations(write_migration):
    write_migration(V1, "create users", up="CREATE TABLE users (id INTEGER);", down="DROP TABLE users;")
    write_migration(V2, "create posts", up="CREATE TABLE posts (id INTEGER);", down="DROP TABLE posts;")


# ─── Root app ────────────────────────────────────────────────────────────


class TestRoot:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.output.startswith("schemashift ")

    def test_version_flag_falls_back_to_package_version(self, monkeypatch):
        from importlib import metadata

        def _missing(name):
            raise metadata.PackageNotFoundError(name)

        monkeypatch.setattr(metadata, "version", _missing)
        result = runner.invoke(app, ["-V"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("up", "down", "status", "create", "reset", "refresh", "version"):
            assert command in result.output


# ─── up / down ───────────────────────────────────────────────────────────


class TestUpDown:
    @pytest.mark.usefixtures("two_migrations")
    def test_up_then_version(self, invoke):
        result = invoke("up")
        assert result.exit_code == 0, result.output
        assert "Migrations completed successfully" in result.output

        result = invoke("version")
        assert result.exit_code == 0
        assert f"Current version: {V2}" in result.output

    def test_up_nothing_pending(self, invoke):
        result = invoke("up")
        assert result.exit_code == 0
        assert "No pending migrations" in result.output

    @pytest.mark.usefixtures("two_migrations")
    def test_up_with_target(self, invoke):
        result = invoke("up", "--target", V1)
        assert result.exit_code == 0
        assert f"Current version: {V1}" in invoke("version").output

    def test_up_failure_exits_1(self, invoke, write_migration):
        write_migration(V1, "broken", up="INSERT INTO nowhere VALUES (1);")
        result = invoke("up")
        assert result.exit_code == 1
        assert "migration batch completed with 1 failures out of 1 migrations" in result.output

    @pytest.mark.usefixtures("two_migrations")
    def test_down_with_target(self, invoke):
        invoke("up")
        result = invoke("down", "-t", V1)
        assert result.exit_code == 0
        assert "Rollback completed successfully (1 rolled back)" in result.output
        assert f"Current version: {V1}" in invoke("version").output

    def test_down_failure_exits_1(self, invoke, write_migration):
        write_migration(V1, "irreversible", up="SELECT 1;", down="DROP TABLE nowhere;")
        invoke("up")
        result = invoke("down")
        assert result.exit_code == 1
        assert f"rollback failed at migration {V1}" in result.output

    @pytest.mark.usefixtures("two_migrations")
    def test_reset_and_refresh(self, invoke):
        invoke("up")

        result = invoke("reset")
        assert result.exit_code == 0
        assert "Database reset completed successfully" in result.output
        assert "No migrations applied" in invoke("version").output

        result = invoke("refresh")
        assert result.exit_code == 0
        assert "Database refresh completed successfully" in result.output
        assert f"Current version: {V2}" in invoke("version").output

    def test_invalid_file_exits_1(self, invoke, migrations_dir):
        (migrations_dir / "bad.sql").write_text("SELECT 1;")
        result = invoke("up")
        assert result.exit_code == 1
        assert "invalid migration filename format: bad.sql" in result.output


# ─── status / pending / batches ──────────────────────────────────────────


class TestReporting:
    def test_status_empty(self, invoke):
        result = invoke("status")
        assert result.exit_code == 0
        assert "No migrations found" in result.output

    @pytest.mark.usefixtures("two_migrations")
    def test_status_table(self, invoke):
        invoke("up")
        result = invoke("status")
        assert result.exit_code == 0
        assert "VERSION" in result.output
        assert V1 in result.output
        assert V2 in result.output
        assert "applied" in result.output

    def test_status_shows_error_line(self, invoke, write_migration):
        write_migration(V1, "broken", up="INSERT INTO nowhere VALUES (1);")
        invoke("up")
        result = invoke("status")
        assert "failed" in result.output
        assert f"{V1} Error:" in result.output

    @pytest.mark.usefixtures("two_migrations")
    def test_status_json(self, invoke):
        invoke("up", "-t", V1)
        result = invoke("status", "--json")
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [(r["version"], r["status"]) for r in data] == [(V1, "applied")]

    @pytest.mark.usefixtures("two_migrations")
    def test_pending(self, invoke):
        invoke("up", "-t", V1)
        result = invoke("pending", "--json")
        assert result.exit_code == 0
        assert [d["version"] for d in json.loads(result.stdout)] == [V2]

        result = invoke("pending")
        assert f"{V2}  create posts" in result.output

    @pytest.mark.usefixtures("two_migrations")
    def test_batches_json(self, invoke):
        invoke("up", "-t", V1)
        invoke("up")
        result = invoke("batches", "--json")
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [b["batch_number"] for b in data] == [1, 2]
        assert all(b["status"] == "completed" for b in data)

    def test_batches_empty(self, invoke):
        result = invoke("batches")
        assert "No migration batches recorded" in result.output


# ─── create ──────────────────────────────────────────────────────────────


class TestCreate:
    def test_creates_file(self, invoke, migrations_dir):
        result = invoke("create", "Add user table")
        assert result.exit_code == 0, result.output
        assert "Created migration:" in result.output
        (path,) = migrations_dir.glob("*_add_user_table.sql")
        assert path.read_text().startswith("-- +migrate Up\n-- Add user table\n")

    def test_invalid_name_exits_1(self, invoke, migrations_dir):
        result = invoke("create", "???")
        assert result.exit_code == 1
        assert list(migrations_dir.iterdir()) == []

    def test_settings_supply_defaults(self, monkeypatch, db_url, tmp_path):
        target = tmp_path / "from_env"
        monkeypatch.setenv("SCHEMASHIFT_DATABASE_URL", db_url)
        monkeypatch.setenv("SCHEMASHIFT_MIGRATIONS_DIR", str(target))
        result = runner.invoke(app, ["create", "first"])
        assert result.exit_code == 0, result.output
        assert len(list(target.glob("*_first.sql"))) == 1
