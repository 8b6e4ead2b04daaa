"""
Database connection management.

Provides SQLite connections for the history ledger.
"""

import sqlite3
from pathlib import Path

DEFAULT_DB_PATH = "ai_codegen.db"


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Create and return a SQLite connection for the history ledger.

    The parent directory is created if missing. Connections are not shared
    between threads; callers open one per operation.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLite connection with a busy timeout for concurrent writers
    """
    path = Path(db_path)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path), timeout=5.0)
    conn.execute("PRAGMA foreign_keys = ON")
    return conn
