"""Migration runner.

Applies pending migrations in version order and rolls applied ones back,
recording every attempt in the ``schema_migrations`` table and every
``up`` invocation in ``migration_batches``.

Each migration runs in its own transaction on the caller's engine. The
record for that migration is written afterwards in a separate short-lived
session, so a failed migration still leaves a ``failed`` record behind.

``up`` keeps going after a failure and reports all of them at the end;
``down`` stops at the first failure.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from schemashift.core.enums import Direction, MigrationStatus
from schemashift.core.errors import (
    BatchError,
    DatabaseError,
    MigrationError,
    RollbackError,
    SchemashiftError,
)
from schemashift.core.hashing import migration_checksum
from schemashift.core.logging import LogContext, get_logger
from schemashift.core.migrations.batch import BatchTracker
from schemashift.core.migrations.definition import MigrationDefinition
from schemashift.core.migrations.models import MigrationBatch, MigrationRecord
from schemashift.core.migrations.registry import MigrationRegistry
from schemashift.core.migrations.reporter import MigrationReporter
from schemashift.core.migrations.scaffold import create_migration_file
from schemashift.core.orm.base import SchemashiftBase
from schemashift.core.orm.session import migration_session_factory
from schemashift.core.orm.tables import BOOKKEEPING_TABLES, MigrationRecordTable


class MigrationRunner:
    """Applies and rolls back migrations against one database.

    Parameters
    ----------
    engine
        SQLAlchemy engine of the database being migrated. The runner
        borrows connections from it and never disposes it.
    migrations_dir
        Directory of ``YYYYMMDDHHMMSS_name.sql`` files, used by ``load()``
        and ``create_migration()``.
    registry
        Pre-populated registry; a new empty one by default.
    logger
        structlog-style logger; ``schemashift.core.migrations.runner`` by default.

    Example::

        from schemashift.core.orm import create_migration_engine
        from schemashift.core.migrations import MigrationRunner

        engine = create_migration_engine("sqlite:///app.db")
        runner = MigrationRunner(engine, "migrations")
        runner.load()
        batch = runner.up()
        print(runner.get_version())
    """

    def __init__(
        self,
        engine: Engine,
        migrations_dir: Path | str | None = None,
        *,
        registry: MigrationRegistry | None = None,
        logger: Any = None,
    ) -> None:
        self._engine = engine
        self._migrations_dir = Path(migrations_dir) if migrations_dir else None
        self._registry = registry if registry is not None else MigrationRegistry()
        self._log = logger if logger is not None else get_logger(__name__)
        self._sessions = migration_session_factory(engine)
        self._reporter = MigrationReporter(self._sessions)
        self.initialize()

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def registry(self) -> MigrationRegistry:
        return self._registry

    @property
    def migrations_dir(self) -> Path | None:
        return self._migrations_dir

    def initialize(self) -> None:
        """Create the bookkeeping tables if they do not exist."""
        try:
            SchemashiftBase.metadata.create_all(self._engine, tables=list(BOOKKEEPING_TABLES))
        except SQLAlchemyError as exc:
            raise DatabaseError("failed to create migration tables", cause=exc) from exc

    def register(self, definition: MigrationDefinition) -> None:
        """Register a programmatic migration."""
        self._registry.register(definition)

    def load(self) -> int:
        """Load every migration file from ``migrations_dir``.

        Returns the number of migrations added to the registry.
        """
        return self._registry.load_directory(self._migrations_dir, log=self._log)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def up(self, target_version: str = "") -> MigrationBatch | None:
        """Apply pending migrations up to and including ``target_version``.

        Every pending migration is attempted even if an earlier one fails.
        Returns the completed batch, or ``None`` when nothing was pending.

        Raises:
            BatchError: one or more migrations failed (the batch is still
                recorded as completed).
            DatabaseError: the batch could not be created; nothing ran.
        """
        pending = self.pending(target_version)
        if not pending:
            self._log.info("migration.none_pending", target_version=target_version or None)
            return None

        tracker = BatchTracker(self._sessions, len(pending), log=self._log)
        with LogContext(batch_number=tracker.batch_number):
            self._log.info("batch.started", total=len(pending))
            for definition in pending:
                try:
                    self._run_migration(definition, Direction.UP)
                except SchemashiftError as exc:
                    tracker.record_failure()
                    self._log.error(
                        "migration.failed",
                        version=definition.version,
                        name=definition.name,
                        error=str(exc),
                    )
                    continue
                tracker.record_success()

            batch = tracker.complete()
            self._log.info(
                "batch.completed",
                total=batch.total_count,
                succeeded=batch.success_count,
                failed=batch.failure_count,
            )

        if batch.failure_count:
            raise BatchError(
                f"migration batch completed with {batch.failure_count} failures "
                f"out of {batch.total_count} migrations",
                total=batch.total_count,
                failures=batch.failure_count,
            ).with_context(batch_number=batch.batch_number)
        return batch

    def down(self, target_version: str = "") -> list[str]:
        """Roll back applied migrations newer than ``target_version``.

        An empty target rolls back everything. Migrations are reversed
        newest first and the run stops at the first failure.

        Returns the versions that were rolled back.

        Raises:
            RollbackError: a reverse step failed; older migrations were
                left applied.
        """
        to_rollback: list[MigrationDefinition] = []
        for record in self._reporter.applied_records(after=target_version, descending=True):
            definition = self._registry.get(record.version)
            if definition is None:
                self._log.warning("migration.definition_missing", version=record.version)
                continue
            to_rollback.append(definition)

        if not to_rollback:
            self._log.info("migration.none_to_rollback", target_version=target_version or None)
            return []

        rolled_back: list[str] = []
        for definition in to_rollback:
            try:
                self._run_migration(definition, Direction.DOWN)
            except SchemashiftError as exc:
                raise RollbackError(
                    f"rollback failed at migration {definition.version}: {exc}",
                    version=definition.version,
                    cause=exc,
                ) from exc
            rolled_back.append(definition.version)

        self._log.info("migration.rollback_completed", count=len(rolled_back))
        return rolled_back

    def status(self) -> list[MigrationRecord]:
        """Every migration record, ascending by version."""
        return self._reporter.status()

    def get_version(self) -> str:
        """Highest applied version, or ``""``."""
        return self._reporter.get_version()

    def pending(self, target_version: str = "") -> list[MigrationDefinition]:
        """Registered migrations not yet applied, ascending by version."""
        return self._reporter.pending(self._registry.definitions, target_version)

    def batches(self) -> list[MigrationBatch]:
        return self._reporter.batches()

    def create_migration(self, name: str) -> Path:
        """Write an empty, timestamped migration file into ``migrations_dir``."""
        return create_migration_file(self._migrations_dir, name, log=self._log)

    def reset(self) -> list[str]:
        """Roll back every applied migration."""
        if not self.get_version():
            self._log.info("migration.nothing_to_reset")
            return []
        return self.down("")

    def refresh(self) -> MigrationBatch | None:
        """Roll everything back, then apply everything again."""
        self.reset()
        return self.up("")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _run_migration(self, definition: MigrationDefinition, direction: Direction) -> None:
        """Execute one side of ``definition`` and record the outcome."""
        record = self._get_or_create_record(definition)

        if direction is Direction.UP:
            func = definition.forward
            if func is None:
                raise MigrationError("migration function not found", version=definition.version)
        else:
            func = definition.reverse

        self._log.info(
            "migration.running",
            version=definition.version,
            name=definition.name,
            direction=direction.value,
        )

        start = time.perf_counter()
        error: Exception | None = None
        try:
            if func is not None:
                with self._engine.begin() as conn:
                    func(conn)
        except Exception as exc:  # forward/reverse are user code
            error = exc
        elapsed_ms = int((time.perf_counter() - start) * 1000)

        if error is not None:
            record.mark_failed(str(error))
        elif direction is Direction.UP:
            record.mark_applied(elapsed_ms)
        else:
            record.mark_rolled_back()
        self._save_record(record)

        if error is not None:
            if isinstance(error, MigrationError) and error.version:
                raise error
            raise MigrationError(str(error), version=definition.version, cause=error) from error

        event = "migration.applied" if direction is Direction.UP else "migration.rolled_back"
        self._log.info(
            event,
            version=definition.version,
            name=definition.name,
            execution_time_ms=elapsed_ms,
        )

    def _get_or_create_record(self, definition: MigrationDefinition) -> MigrationRecordTable:
        stmt = select(MigrationRecordTable).where(
            MigrationRecordTable.version == definition.version
        )
        try:
            with self._sessions() as session, session.begin():
                record = session.scalar(stmt)
                if record is None:
                    record = MigrationRecordTable(
                        version=definition.version,
                        name=definition.name,
                        description=definition.description,
                        checksum=migration_checksum(
                            definition.version,
                            definition.name,
                            definition.description,
                            definition.source_path,
                        ),
                        status=MigrationStatus.PENDING.value,
                        execution_time_ms=0,
                    )
                    session.add(record)
        except SQLAlchemyError as exc:
            raise DatabaseError(
                "failed to get migration record", cause=exc
            ).with_context(version=definition.version) from exc
        return record

    def _save_record(self, record: MigrationRecordTable) -> None:
        try:
            with self._sessions() as session, session.begin():
                session.merge(record)
        except SQLAlchemyError as exc:
            self._log.error(
                "migration.record_save_failed",
                version=record.version,
                error=str(exc),
            )


__all__ = ["MigrationRunner"]
