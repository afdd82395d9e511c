"""
Structured error types for schemashift.

Every failure the migration engine can surface is a ``SchemashiftError``
subclass carrying a category, optional structured context and an optional
chained cause. Callers (the CLI, tests, embedding applications) can branch
on the type, log ``to_dict()`` output, or inspect ``cause`` for the
underlying driver or filesystem exception.

Manifesto:
    - **Typed hierarchy:** Validation, configuration, storage, database and
      migration failures are distinct types, never bare ``Exception``.
    - **Rich context:** Errors carry the migration version, file path or
      batch number they concern.
    - **Error chaining:** The original exception is preserved as ``cause``.

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────┐
        │                    SchemashiftError                       │
        │             (category, context, cause)                    │
        ├──────────────────────────────────────────────────────────┤
        │  ValidationError     ConfigError      StorageError       │
        │  (VALIDATION)        (CONFIG)         (STORAGE)          │
        │       │                                                   │
        │  InvalidFilenameError                                     │
        │                                                           │
        │  DatabaseError       MigrationError                       │
        │  (DATABASE)          (MIGRATION)                          │
        │                           │                               │
        │                    BatchError   RollbackError             │
        └──────────────────────────────────────────────────────────┘

Examples:
    >>> error = MigrationError("no UP SQL found in migration", version="20240101000000")
    >>> error.version
    '20240101000000'
    >>> error.to_dict()["category"]
    'MIGRATION'

Tags:
    error-handling, exception-hierarchy, error-context, schemashift

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and reporting."""

    VALIDATION = "VALIDATION"     # Bad definitions, malformed file names
    CONFIG = "CONFIG"             # Missing or invalid settings
    STORAGE = "STORAGE"           # Filesystem reads and writes
    DATABASE = "DATABASE"         # Bookkeeping queries
    MIGRATION = "MIGRATION"       # Forward/reverse execution failures
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        version: Migration version the error concerns
        path: Filesystem path involved (migration file or directory)
        batch_number: Batch in which the error happened
        metadata: Additional key-value pairs
    """

    version: str | None = None
    path: str | None = None
    batch_number: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for key in ("version", "path", "batch_number"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class SchemashiftError(Exception):
    """
    Base exception for all schemashift errors.

    Subclasses set ``default_category`` so that every raised error is
    classified without the caller having to pass a category.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SchemashiftError:
        """
        Add context to this error (fluent API).

        Usage:
            raise StorageError("write failed").with_context(path=str(path))
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(SchemashiftError):
    """
    A migration definition or source file is invalid.

    Raised before anything is registered or executed; registration and
    directory loads never partially apply.
    """

    default_category = ErrorCategory.VALIDATION

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.value is not None:
            result["value"] = repr(self.value)
        return result


class InvalidFilenameError(ValidationError):
    """Migration file name does not match ``YYYYMMDDHHMMSS_name.sql``."""

    pass


# =============================================================================
# CONFIG / STORAGE / DATABASE ERRORS
# =============================================================================


class ConfigError(SchemashiftError):
    """Missing or invalid configuration."""

    default_category = ErrorCategory.CONFIG


class StorageError(SchemashiftError):
    """Reading or writing migration files failed."""

    default_category = ErrorCategory.STORAGE


class DatabaseError(SchemashiftError):
    """Bookkeeping query or table creation failed."""

    default_category = ErrorCategory.DATABASE


# =============================================================================
# MIGRATION ERRORS
# =============================================================================


class MigrationError(SchemashiftError):
    """A single migration's forward or reverse step failed."""

    default_category = ErrorCategory.MIGRATION

    def __init__(self, message: str, *, version: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.version = version
        if version is not None and self.context.version is None:
            self.context.version = version


class BatchError(MigrationError):
    """One or more migrations in an ``up`` batch failed."""

    def __init__(self, message: str, *, total: int, failures: int, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.total = total
        self.failures = failures

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["total"] = self.total
        result["failures"] = self.failures
        return result


class RollbackError(MigrationError):
    """A reverse step failed; later rollbacks were not attempted."""

    pass


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "SchemashiftError",
    "ValidationError",
    "InvalidFilenameError",
    "ConfigError",
    "StorageError",
    "DatabaseError",
    "MigrationError",
    "BatchError",
    "RollbackError",
]
