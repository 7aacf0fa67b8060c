# database/__init__.py
from __future__ import annotations

from functools import partial
from pathlib import Path
import sqlite3
from typing import Callable

from ..config import DB_PATH
from . import schema as schema_module
from .versioning import ensure_version

ConnectionFactory = Callable[[], sqlite3.Connection]


def get_connection(db_path: Path | str | None = None) -> sqlite3.Connection:
    """
    Returns a sqlite3.Connection with:
      - WAL mode
      - foreign_keys ON
      - row_factory = sqlite3.Row (so rows behave like dicts and tuples)
    Ensures the schema and version stamp are applied idempotently.
    """
    path = Path(db_path) if db_path is not None else DB_PATH
    path.parent.mkdir(parents=True, exist_ok=True)

    # Always apply the schema (idempotent: uses CREATE IF NOT EXISTS)
    schema_module.init_schema(path)

    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    conn.execute("PRAGMA journal_mode = WAL;")

    ensure_version(conn)

    conn.commit()
    return conn


def connection_factory(db_path: Path | str | None = None) -> ConnectionFactory:
    """
    Zero-argument callable opening a fresh connection per call.

    sqlite3 connections belong to the thread that opened them, so worker
    threads must each get their own.
    """
    return partial(get_connection, db_path)


__all__ = [
    "ConnectionFactory",
    "connection_factory",
    "get_connection",
]
