"""Database schema and connection management for SQLite."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, Union

from common.exceptions import CorruptionError, StorageError

DatabasePath = Union[str, Path]


def init_database(db_path: DatabasePath) -> None:
    """
    Initialize database and create tables if they don't exist.

    Args:
        db_path: Location of the SQLite file

    Raises:
        StorageError: If the schema cannot be created
    """
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    try:
        with get_db_connection(db_path) as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS directories (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    parent_id TEXT,
                    path TEXT NOT NULL UNIQUE,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    FOREIGN KEY(parent_id) REFERENCES directories(id) ON DELETE CASCADE
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS files (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    original_name TEXT NOT NULL,
                    directory_id TEXT NOT NULL,
                    file_path TEXT NOT NULL UNIQUE,
                    file_size INTEGER NOT NULL,
                    mime_type TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    FOREIGN KEY(directory_id) REFERENCES directories(id) ON DELETE CASCADE
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_directories_parent_id ON directories(parent_id)
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_files_directory_id ON files(directory_id)
            """)

            cursor.execute("""
                CREATE UNIQUE INDEX IF NOT EXISTS idx_directories_path ON directories(path)
            """)

            conn.commit()
    except sqlite3.Error as e:
        raise StorageError(f"Failed to initialize database at {db_path}: {e}") from e


@contextmanager
def get_db_connection(db_path: DatabasePath) -> Generator[sqlite3.Connection, None, None]:
    """
    Context manager for database connections.

    Foreign keys are switched on for every connection; directory and file
    cascades depend on it.
    """
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    try:
        yield conn
    finally:
        conn.close()


def escape_like(value: str) -> str:
    """
    Escape LIKE wildcards so value matches literally under ESCAPE '\\'.
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def require_column(row: sqlite3.Row, column: str) -> Any:
    """
    Read a NOT NULL column, treating a missing or NULL value as corruption.

    Raises:
        CorruptionError: If the column is absent from the row or NULL
    """
    if column not in row.keys():
        raise CorruptionError(f"Row is missing column {column!r}")

    value = row[column]
    if value is None:
        raise CorruptionError(f"Column {column!r} is unexpectedly NULL")
    return value
