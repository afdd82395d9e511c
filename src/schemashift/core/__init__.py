"""Core primitives for schemashift: errors, logging, settings, ORM and migrations."""
