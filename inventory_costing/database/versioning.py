"""
Schema version stamp for the costing database.

A fresh file is stamped with SCHEMA_VERSION. A file stamped by a different
major version was laid out by an incompatible build and is refused instead
of being read with the wrong column meanings.
"""

import sqlite3

from ..constants import SCHEMA_VERSION, TABLE_SCHEMA_VERSION


class SchemaVersionError(RuntimeError):
    pass


def _major(version: str) -> str:
    return str(version).split(".", 1)[0]


def get_current_version(conn: sqlite3.Connection) -> str | None:
    conn.execute(
        f"CREATE TABLE IF NOT EXISTS {TABLE_SCHEMA_VERSION}("
        "id INTEGER PRIMARY KEY CHECK (id=1), version TEXT NOT NULL)"
    )
    row = conn.execute(f"SELECT version FROM {TABLE_SCHEMA_VERSION} WHERE id=1").fetchone()
    return row[0] if row else None


def set_current_version(conn: sqlite3.Connection, version: str) -> None:
    get_current_version(conn)
    conn.execute(
        f"INSERT INTO {TABLE_SCHEMA_VERSION}(id, version) VALUES (1, ?) "
        "ON CONFLICT(id) DO UPDATE SET version = excluded.version",
        (version,),
    )
    conn.commit()


def ensure_version(conn: sqlite3.Connection, expected: str = SCHEMA_VERSION) -> str:
    """Stamp a fresh DB; raise SchemaVersionError on a different major version."""
    current = get_current_version(conn)
    if current is None:
        set_current_version(conn, expected)
        return expected
    if _major(current) != _major(expected):
        raise SchemaVersionError(
            f"Database schema {current} is not compatible with {expected}."
        )
    return current
