"""Read-only queries over the bookkeeping tables.

Answers "what has been applied", "what is pending" and "what is the
current version". Nothing found is never an error: empty lists and an empty
version string come back instead.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from schemashift.core.enums import MigrationStatus
from schemashift.core.errors import DatabaseError
from schemashift.core.migrations.definition import MigrationDefinition
from schemashift.core.migrations.models import MigrationBatch, MigrationRecord
from schemashift.core.orm.tables import MigrationBatchTable, MigrationRecordTable


class MigrationReporter:
    """Status and version queries, each in its own short-lived session."""

    def __init__(self, sessions: sessionmaker[Session]) -> None:
        self._sessions = sessions

    def status(self) -> list[MigrationRecord]:
        """All migration records, ascending by version."""
        stmt = select(MigrationRecordTable).order_by(MigrationRecordTable.version.asc())
        try:
            with self._sessions() as session:
                return [MigrationRecord.from_row(row) for row in session.scalars(stmt)]
        except SQLAlchemyError as exc:
            raise DatabaseError("failed to read migration status", cause=exc) from exc

    def get_version(self) -> str:
        """Highest applied version, ``""`` when nothing is applied."""
        stmt = (
            select(MigrationRecordTable.version)
            .where(MigrationRecordTable.status == MigrationStatus.APPLIED.value)
            .order_by(MigrationRecordTable.version.desc())
            .limit(1)
        )
        try:
            with self._sessions() as session:
                return session.scalar(stmt) or ""
        except SQLAlchemyError as exc:
            raise DatabaseError("failed to read current version", cause=exc) from exc

    def applied_records(
        self, *, after: str = "", descending: bool = False
    ) -> list[MigrationRecord]:
        """Records with status ``applied``, optionally only versions ``> after``."""
        order = MigrationRecordTable.version.desc() if descending else MigrationRecordTable.version.asc()
        stmt = select(MigrationRecordTable).where(
            MigrationRecordTable.status == MigrationStatus.APPLIED.value
        )
        if after:
            stmt = stmt.where(MigrationRecordTable.version > after)
        stmt = stmt.order_by(order)
        try:
            with self._sessions() as session:
                return [MigrationRecord.from_row(row) for row in session.scalars(stmt)]
        except SQLAlchemyError as exc:
            raise DatabaseError("failed to read applied migrations", cause=exc) from exc

    def applied_versions(self) -> set[str]:
        return {record.version for record in self.applied_records()}

    def pending(
        self, definitions: Iterable[MigrationDefinition], target_version: str = ""
    ) -> list[MigrationDefinition]:
        """Definitions with no applied record, ascending, capped at ``target_version``."""
        applied = self.applied_versions()
        return [
            d
            for d in sorted(definitions, key=lambda d: d.version)
            if d.version not in applied and (not target_version or d.version <= target_version)
        ]

    def batches(self) -> list[MigrationBatch]:
        """Batch history, oldest first."""
        stmt = select(MigrationBatchTable).order_by(MigrationBatchTable.batch_number.asc())
        try:
            with self._sessions() as session:
                return [MigrationBatch.from_row(row) for row in session.scalars(stmt)]
        except SQLAlchemyError as exc:
            raise DatabaseError("failed to read migration batches", cause=exc) from exc


__all__ = ["MigrationReporter"]
