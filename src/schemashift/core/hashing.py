"""
Content fingerprints for migrations.

A migration's checksum identifies *what* ran: its version, name and
description plus, for file-backed migrations, the raw bytes of the source
file. It is stored on the migration record the first time the version
executes.

Manifesto:
    Hashing must be:
    - **Deterministic:** Same inputs → same output, always
    - **Byte-exact:** File content is hashed as read from disk, no decoding
    - **Forgiving:** An unreadable source file falls back to the identity part

Examples:
    >>> migration_checksum("20240101120000", "create users", "")
    '...'  # 32-char hex
    >>> migration_checksum("a", "b", "c") == migration_checksum("a", "b", "c")
    True

Tags:
    hashing, checksum, md5, migrations, schemashift

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import hashlib
from pathlib import Path


def migration_checksum(
    version: str,
    name: str,
    description: str,
    source_path: Path | str | None = None,
) -> str:
    """
    Compute the checksum recorded for a migration.

    The digest covers ``"{version}:{name}:{description}"`` followed by the
    source file's bytes when ``source_path`` is set and readable.

    Args:
        version: Migration version
        name: Human-readable name
        description: Free-form description (may be empty)
        source_path: File the migration was loaded from, if any

    Returns:
        32-char MD5 hex digest
    """
    content = f"{version}:{name}:{description}".encode()
    if source_path:
        try:
            content += Path(source_path).read_bytes()
        except OSError:
            pass  # identity-only checksum
    return hashlib.md5(content).hexdigest()


__all__ = ["migration_checksum"]
