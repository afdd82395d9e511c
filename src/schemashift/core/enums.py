"""
Shared enums for migration bookkeeping.

Used by both the ORM tables and the read-side snapshots, so they live
outside either package.

STDLIB ONLY - NO PYDANTIC.
"""

from enum import Enum


class MigrationStatus(str, Enum):
    """
    Lifecycle of a ``schema_migrations`` row.

    pending → applied | failed; applied → rolled_back; failed → applied
    on a later retry.
    """

    PENDING = "pending"
    APPLIED = "applied"
    FAILED = "failed"
    ROLLED_BACK = "rolled_back"


class BatchStatus(str, Enum):
    """Lifecycle of a ``migration_batches`` row."""

    RUNNING = "running"
    COMPLETED = "completed"


class Direction(str, Enum):
    """Which side of a migration is being executed."""

    UP = "up"
    DOWN = "down"


__all__ = ["MigrationStatus", "BatchStatus", "Direction"]
