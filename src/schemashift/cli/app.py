"""
Root Typer application for the schemashift CLI.

Every command accepts ``--database/-d`` and ``--migrations/-m``; anything
not given on the command line comes from ``SCHEMASHIFT_*`` settings.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.markup import escape
from typer import Typer

from schemashift.cli.utils import console, open_runner, print_batches, print_json, print_status

app = Typer(
    name="schemashift",
    help="schemashift — versioned schema migrations.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

DatabaseOption = typer.Option(None, "--database", "-d", help="Database URL")
MigrationsOption = typer.Option(None, "--migrations", "-m", help="Migrations directory")
TargetOption = typer.Option("", "--target", "-t", help="Target migration version")
JsonOption = typer.Option(False, "--json", help="JSON output")


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("schemashift")
        except PackageNotFoundError:
            from schemashift import __version__ as v
        typer.echo(f"schemashift {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """schemashift CLI — apply, roll back and inspect schema migrations."""


# ── Migration commands ───────────────────────────────────────────────────


@app.command()
def up(
    target: str = TargetOption,
    database: str | None = DatabaseOption,
    migrations: Path | None = MigrationsOption,
) -> None:
    """Run pending migrations."""
    with open_runner(database, migrations) as runner:
        batch = runner.up(target)
    if batch is None:
        console.print("No pending migrations")
    else:
        console.print(
            f"Migrations completed successfully ({batch.success_count} applied, batch {batch.batch_number})"
        )


@app.command()
def down(
    target: str = TargetOption,
    database: str | None = DatabaseOption,
    migrations: Path | None = MigrationsOption,
) -> None:
    """Roll back migrations newer than --target (all of them by default)."""
    with open_runner(database, migrations) as runner:
        rolled_back = runner.down(target)
    if not rolled_back:
        console.print("No migrations to roll back")
    else:
        console.print(f"Rollback completed successfully ({len(rolled_back)} rolled back)")


@app.command()
def status(
    database: str | None = DatabaseOption,
    migrations: Path | None = MigrationsOption,
    json_out: bool = JsonOption,
) -> None:
    """Show migration status."""
    with open_runner(database, migrations) as runner:
        records = runner.status()
    print_status(records, as_json=json_out)


@app.command()
def pending(
    database: str | None = DatabaseOption,
    migrations: Path | None = MigrationsOption,
    json_out: bool = JsonOption,
) -> None:
    """List registered migrations that have not been applied."""
    with open_runner(database, migrations) as runner:
        definitions = runner.pending()

    if json_out:
        print_json(
            [
                {
                    "version": d.version,
                    "name": d.name,
                    "source_path": str(d.source_path) if d.source_path else None,
                }
                for d in definitions
            ]
        )
        return
    if not definitions:
        console.print("No pending migrations")
        return
    for d in definitions:
        console.print(f"{d.version}  {escape(d.name)}")


@app.command()
def batches(
    database: str | None = DatabaseOption,
    migrations: Path | None = MigrationsOption,
    json_out: bool = JsonOption,
) -> None:
    """Show the history of `up` batches."""
    with open_runner(database, migrations) as runner:
        history = runner.batches()
    print_batches(history, as_json=json_out)


@app.command()
def create(
    name: str = typer.Argument(..., help="Migration name, e.g. 'add user table'"),
    database: str | None = DatabaseOption,
    migrations: Path | None = MigrationsOption,
) -> None:
    """Create a new, empty migration file."""
    with open_runner(database, migrations, load=False) as runner:
        path = runner.create_migration(name)
    console.print(f"Created migration: {path}", soft_wrap=True)


@app.command()
def reset(
    database: str | None = DatabaseOption,
    migrations: Path | None = MigrationsOption,
) -> None:
    """Reset database (roll back all migrations)."""
    with open_runner(database, migrations) as runner:
        runner.reset()
    console.print("Database reset completed successfully")


@app.command()
def refresh(
    database: str | None = DatabaseOption,
    migrations: Path | None = MigrationsOption,
) -> None:
    """Reset and rerun all migrations."""
    with open_runner(database, migrations) as runner:
        runner.refresh()
    console.print("Database refresh completed successfully")


@app.command("version")
def current_version(
    database: str | None = DatabaseOption,
    migrations: Path | None = MigrationsOption,
) -> None:
    """Show current migration version."""
    with open_runner(database, migrations) as runner:
        current = runner.get_version()
    if current:
        console.print(f"Current version: {current}")
    else:
        console.print("No migrations applied")
