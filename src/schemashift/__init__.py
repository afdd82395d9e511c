"""
schemashift - versioned schema migrations for SQLAlchemy databases.

Example::

    from schemashift import MigrationRunner, create_migration_engine

    engine = create_migration_engine("sqlite:///app.db")
    runner = MigrationRunner(engine, "migrations")
    runner.load()
    runner.up()
"""

__version__ = "0.1.0"

from schemashift.core.errors import SchemashiftError
from schemashift.core.migrations import MigrationDefinition, MigrationRunner
from schemashift.core.orm.session import create_migration_engine

__all__ = [
    "__version__",
    "MigrationDefinition",
    "MigrationRunner",
    "SchemashiftError",
    "create_migration_engine",
]
