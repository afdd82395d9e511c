"""Versioned schema migrations.

Manifesto:
    Schema changes are discrete, ordered, reversible units. Each one is
    applied in its own transaction and its outcome is recorded durably,
    so the database itself always answers "what version am I at?".

Modules
-------
definition  MigrationDefinition, the in-memory unit of change
sql         Up/Down section extraction and statement splitting
loader      Discovery of ``YYYYMMDDHHMMSS_name.sql`` files
registry    MigrationRegistry, validated and ordered definitions
batch       BatchTracker, audit row for one ``up`` invocation
reporter    MigrationReporter, status / version / pending queries
scaffold    create_migration_file, new empty migration files
runner      MigrationRunner with up() / down() / reset() / refresh()

Tags:
    schemashift, migrations, schema, database, DDL

Doc-Types:
    package-overview
"""

from schemashift.core.migrations.batch import BatchTracker
from schemashift.core.migrations.definition import MigrationDefinition, MigrationFunc
from schemashift.core.migrations.loader import load_migrations, parse_migration_filename
from schemashift.core.migrations.models import (
    BatchStatus,
    Direction,
    MigrationBatch,
    MigrationRecord,
    MigrationStatus,
)
from schemashift.core.migrations.registry import MigrationRegistry
from schemashift.core.migrations.reporter import MigrationReporter
from schemashift.core.migrations.runner import MigrationRunner
from schemashift.core.migrations.scaffold import create_migration_file

__all__ = [
    "BatchStatus",
    "BatchTracker",
    "Direction",
    "MigrationBatch",
    "MigrationDefinition",
    "MigrationFunc",
    "MigrationRecord",
    "MigrationRegistry",
    "MigrationReporter",
    "MigrationRunner",
    "MigrationStatus",
    "create_migration_file",
    "load_migrations",
    "parse_migration_filename",
]
