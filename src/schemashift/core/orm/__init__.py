"""SQLAlchemy 2.0 ORM layer for the migration bookkeeping tables.

Modules
-------
base        SchemashiftBase (declarative base) + TimestampMixin
session     Engine factory, MigrationSession, session factory
tables      MigrationRecordTable, MigrationBatchTable

Tags:
    schemashift, orm, sqlalchemy, declarative

Doc-Types:
    package-overview, module-index
"""

from __future__ import annotations

from schemashift.core.orm.base import SchemashiftBase, TimestampMixin
from schemashift.core.orm.session import (
    MigrationSession,
    create_migration_engine,
    migration_session_factory,
)
from schemashift.core.orm.tables import (
    BOOKKEEPING_TABLES,
    MigrationBatchTable,
    MigrationRecordTable,
)

__all__ = [
    "SchemashiftBase",
    "TimestampMixin",
    "create_migration_engine",
    "MigrationSession",
    "migration_session_factory",
    "MigrationRecordTable",
    "MigrationBatchTable",
    "BOOKKEEPING_TABLES",
]
