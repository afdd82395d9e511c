"""Bookkeeping table definitions — ``schema_migrations`` and ``migration_batches``.

Rows carry their own lifecycle transitions so the runner reads as a
sequence of ``mark_*`` calls rather than field assignments.

Tags:
    schemashift, orm, sqlalchemy, tables

Doc-Types:
    api-reference, data-model
"""

from __future__ import annotations

import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from schemashift.core.enums import BatchStatus, MigrationStatus
from schemashift.core.orm.base import SchemashiftBase, TimestampMixin
from schemashift.core.timestamps import utc_now


class MigrationRecordTable(TimestampMixin, SchemashiftBase):
    __tablename__ = "schema_migrations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    version: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    checksum: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=MigrationStatus.PENDING.value, nullable=False
    )
    applied_at: Mapped[datetime.datetime | None] = mapped_column(DateTime)
    rolled_back_at: Mapped[datetime.datetime | None] = mapped_column(DateTime)
    execution_time_ms: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    error_message: Mapped[str | None] = mapped_column(Text)

    def mark_applied(self, execution_time_ms: int) -> None:
        self.status = MigrationStatus.APPLIED.value
        self.applied_at = utc_now()
        self.execution_time_ms = max(execution_time_ms, 0)
        self.error_message = None

    def mark_failed(self, error_message: str) -> None:
        self.status = MigrationStatus.FAILED.value
        self.error_message = error_message
        self.applied_at = None

    def mark_rolled_back(self) -> None:
        self.status = MigrationStatus.ROLLED_BACK.value
        self.rolled_back_at = utc_now()
        self.applied_at = None
        self.error_message = None


class MigrationBatchTable(SchemashiftBase):
    __tablename__ = "migration_batches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    batch_number: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    started_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, nullable=False, default=utc_now
    )
    completed_at: Mapped[datetime.datetime | None] = mapped_column(DateTime)
    status: Mapped[str] = mapped_column(
        String(20), default=BatchStatus.RUNNING.value, nullable=False
    )
    total_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    success_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    failure_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def mark_completed(self) -> None:
        # completed regardless of failures; failure_count tells the rest
        self.status = BatchStatus.COMPLETED.value
        self.completed_at = utc_now()


BOOKKEEPING_TABLES = (MigrationRecordTable.__table__, MigrationBatchTable.__table__)

__all__ = ["MigrationRecordTable", "MigrationBatchTable", "BOOKKEEPING_TABLES"]
