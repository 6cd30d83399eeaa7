"""SQLite connections for the fleetwatch notification and compliance store."""

from __future__ import annotations

import sqlite3
from pathlib import Path


def get_connection(db_path: str) -> sqlite3.Connection:
    # Transactions are opened explicitly by the application facade.
    conn = sqlite3.connect(db_path, isolation_level=None)
    conn.row_factory = sqlite3.Row
    return conn


def get_readonly_connection(db_path: str) -> sqlite3.Connection:
    """Open an existing store for listings and audits; never creates the file."""
    if not Path(db_path).is_file():
        raise ValueError(f"Database not found: {db_path}")
    conn = sqlite3.connect(f"file:{db_path}?mode=ro", uri=True)
    conn.row_factory = sqlite3.Row
    return conn
