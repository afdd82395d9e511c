"""Audit accounting for one ``up`` invocation.

A batch row is created before the first pending migration runs, its
counters are persisted as each migration finishes, and it is marked
``completed`` after the last one, whether or not any failed.

Batch numbers are ``max(batch_number) + 1`` without any reservation; the
runner assumes a single writer per database.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from schemashift.core.enums import BatchStatus
from schemashift.core.errors import DatabaseError
from schemashift.core.logging import get_logger
from schemashift.core.migrations.models import MigrationBatch
from schemashift.core.orm.tables import MigrationBatchTable

logger = get_logger(__name__)


class BatchTracker:
    """Creates and updates one ``migration_batches`` row.

    Raises ``DatabaseError`` from the constructor if the row cannot be
    created; later save failures are logged and do not interrupt the batch.
    """

    def __init__(self, sessions: sessionmaker[Session], total: int, *, log: Any = None) -> None:
        self._sessions = sessions
        self._log = log or logger
        self._row = self._create(total)

    @property
    def batch_number(self) -> int:
        return self._row.batch_number

    @property
    def total_count(self) -> int:
        return self._row.total_count

    @property
    def success_count(self) -> int:
        return self._row.success_count

    @property
    def failure_count(self) -> int:
        return self._row.failure_count

    def record_success(self) -> None:
        self._row.success_count += 1
        self._save()

    def record_failure(self) -> None:
        self._row.failure_count += 1
        self._save()

    def complete(self) -> MigrationBatch:
        """Mark the batch completed and return a snapshot of it."""
        self._row.mark_completed()
        self._save()
        return MigrationBatch.from_row(self._row)

    def snapshot(self) -> MigrationBatch:
        return MigrationBatch.from_row(self._row)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _create(self, total: int) -> MigrationBatchTable:
        try:
            with self._sessions() as session, session.begin():
                last = session.scalar(select(func.max(MigrationBatchTable.batch_number)))
                row = MigrationBatchTable(
                    batch_number=(last or 0) + 1,
                    status=BatchStatus.RUNNING.value,
                    total_count=total,
                    success_count=0,
                    failure_count=0,
                )
                session.add(row)
        except SQLAlchemyError as exc:
            raise DatabaseError("failed to create migration batch", cause=exc) from exc
        return row

    def _save(self) -> None:
        try:
            with self._sessions() as session, session.begin():
                session.merge(self._row)
        except SQLAlchemyError as exc:
            self._log.error(
                "batch.save_failed",
                batch_number=self._row.batch_number,
                error=str(exc),
            )


__all__ = ["BatchTracker"]
