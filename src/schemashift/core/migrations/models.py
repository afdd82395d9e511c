"""Read-side snapshots of the bookkeeping tables.

``MigrationRecord`` and ``MigrationBatch`` are detached, plain copies of the
``schema_migrations`` / ``migration_batches`` rows. They are what the
reporter hands back to callers, so nothing outside the runner ever holds a
live ORM object.
"""

from __future__ import annotations

import datetime
from dataclasses import asdict, dataclass
from typing import Any

from schemashift.core.enums import BatchStatus, Direction, MigrationStatus


@dataclass(frozen=True)
class MigrationRecord:
    """What happened to one migration version."""

    version: str
    name: str
    description: str
    checksum: str
    status: MigrationStatus
    applied_at: datetime.datetime | None = None
    rolled_back_at: datetime.datetime | None = None
    execution_time_ms: int = 0
    error_message: str | None = None

    @classmethod
    def from_row(cls, row: Any) -> MigrationRecord:
        return cls(
            version=row.version,
            name=row.name,
            description=row.description or "",
            checksum=row.checksum,
            status=MigrationStatus(row.status),
            applied_at=row.applied_at,
            rolled_back_at=row.rolled_back_at,
            execution_time_ms=row.execution_time_ms or 0,
            error_message=row.error_message,
        )

    @property
    def is_applied(self) -> bool:
        return self.status is MigrationStatus.APPLIED

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass(frozen=True)
class MigrationBatch:
    """Audit record of one ``up`` invocation."""

    batch_number: int
    status: BatchStatus
    total_count: int
    success_count: int
    failure_count: int
    started_at: datetime.datetime | None = None
    completed_at: datetime.datetime | None = None

    @classmethod
    def from_row(cls, row: Any) -> MigrationBatch:
        return cls(
            batch_number=row.batch_number,
            status=BatchStatus(row.status),
            total_count=row.total_count,
            success_count=row.success_count,
            failure_count=row.failure_count,
            started_at=row.started_at,
            completed_at=row.completed_at,
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


__all__ = [
    "MigrationStatus",
    "BatchStatus",
    "Direction",
    "MigrationRecord",
    "MigrationBatch",
]
