"""
CLI utility helpers — runner construction and output formatting.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from schemashift.core.errors import SchemashiftError
from schemashift.core.logging import configure_logging
from schemashift.core.migrations import MigrationBatch, MigrationRecord, MigrationRunner
from schemashift.core.orm.session import create_migration_engine
from schemashift.core.settings import get_settings
from schemashift.core.timestamps import format_display

console = Console()
err_console = Console(stderr=True)

NAME_WIDTH = 30


# ── Runner helper ────────────────────────────────────────────────────────


@contextmanager
def open_runner(
    database: str | None = None,
    migrations: Path | None = None,
    *,
    load: bool = True,
) -> Iterator[MigrationRunner]:
    """Build a ``MigrationRunner`` from settings and CLI overrides.

    The engine is disposed when the block exits. Any ``SchemashiftError``
    raised inside the block is printed and turned into exit code 1.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.json_logs)

    engine = create_migration_engine(
        database or settings.database_url,
        echo=settings.database_echo,
        pool_size=settings.database_pool_size,
    )
    try:
        runner = MigrationRunner(engine, migrations or settings.migrations_dir)
        if load:
            runner.load()
        yield runner
    except SchemashiftError as exc:
        fail(exc)
    finally:
        engine.dispose()


def fail(exc: SchemashiftError) -> NoReturn:
    """Print ``exc`` to stderr and exit with code 1."""
    err_console.print(
        f"[bold red]Error[/bold red] ({exc.category.value}): {escape(str(exc))}",
        soft_wrap=True,
    )
    raise typer.Exit(code=1)


# ── Output helpers ───────────────────────────────────────────────────────


def print_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def truncate_name(name: str, width: int = NAME_WIDTH) -> str:
    """Shorten ``name`` to ``width`` characters, ending in ``...``."""
    if len(name) > width:
        return name[: width - 3] + "..."
    return name


def format_execution_time(ms: int) -> str:
    return f"{ms}ms" if ms > 0 else "-"


def print_status(records: list[MigrationRecord], *, as_json: bool = False) -> None:
    """Render migration records as a table, with error lines for failures."""
    if as_json:
        print_json([r.to_dict() for r in records])
        return

    if not records:
        console.print("No migrations found")
        return

    table = Table(show_lines=False, pad_edge=False, box=None)
    table.add_column("VERSION", no_wrap=True)
    table.add_column("STATUS", no_wrap=True)
    table.add_column("NAME", overflow="fold")
    table.add_column("APPLIED AT", no_wrap=True)
    table.add_column("EXECUTION TIME", no_wrap=True)

    for record in records:
        table.add_row(
            record.version,
            record.status.value,
            escape(truncate_name(record.name)),
            format_display(record.applied_at),
            format_execution_time(record.execution_time_ms),
        )
    console.print(table)

    for record in records:
        if record.error_message:
            console.print(f"    {record.version} Error: {escape(record.error_message)}", soft_wrap=True)


def print_batches(batches: list[MigrationBatch], *, as_json: bool = False) -> None:
    if as_json:
        print_json([b.to_dict() for b in batches])
        return

    if not batches:
        console.print("No migration batches recorded")
        return

    table = Table(pad_edge=False, box=None)
    for col in ("BATCH", "STATUS", "TOTAL", "SUCCEEDED", "FAILED", "STARTED AT", "COMPLETED AT"):
        table.add_column(col, no_wrap=True)
    for batch in batches:
        table.add_row(
            str(batch.batch_number),
            batch.status.value,
            str(batch.total_count),
            str(batch.success_count),
            str(batch.failure_count),
            format_display(batch.started_at),
            format_display(batch.completed_at),
        )
    console.print(table)
