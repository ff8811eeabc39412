"""Directory repository for database operations."""

import sqlite3
from typing import List, Optional

from common.exceptions import ConflictError, NotFoundError, StorageError
from common.logging_config import get_logger
from common.types import Directory
from vault.database import DatabasePath, escape_like, get_db_connection, require_column
from vault.utils import format_timestamp, generate_uuid, now_local, parse_timestamp

logger = get_logger(__name__)

DIRECTORY_COLUMNS = "id, name, parent_id, path, created_at, updated_at"


def row_to_directory(row: sqlite3.Row) -> Directory:
    """
    Build a Directory from a row, raising CorruptionError on malformed data.
    """
    return Directory(
        id=require_column(row, "id"),
        name=require_column(row, "name"),
        parent_id=row["parent_id"],
        path=require_column(row, "path"),
        created_at=parse_timestamp(require_column(row, "created_at"), "created_at"),
        updated_at=parse_timestamp(require_column(row, "updated_at"), "updated_at"),
    )


class DirectoryRepository:
    def __init__(self, db_path: DatabasePath):
        self.db_path = db_path

    def create_directory(self, name: str, parent_id: Optional[str], path: str) -> Directory:
        """
        Insert a directory row.

        Args:
            name: Directory name
            parent_id: Owning directory, None for a top-level directory
            path: Materialized path, unique across the store

        Returns:
            The created Directory

        Raises:
            ConflictError: If path already exists
            NotFoundError: If parent_id is given but absent
            StorageError: On any other database failure
        """
        directory_id = generate_uuid()
        now = now_local()

        try:
            with get_db_connection(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    INSERT INTO directories (id, name, parent_id, path, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (directory_id, name, parent_id, path, format_timestamp(now), format_timestamp(now))
                )
                conn.commit()
        except sqlite3.IntegrityError as e:
            message = str(e)
            if "UNIQUE" in message:
                raise ConflictError(f"Directory path already exists: {path}") from e
            if "FOREIGN KEY" in message:
                raise NotFoundError(f"Parent directory not found: {parent_id}") from e
            raise StorageError(f"Failed to create directory {path}: {e}") from e
        except sqlite3.Error as e:
            raise StorageError(f"Failed to create directory {path}: {e}") from e

        logger.debug(f"Created directory row [id={directory_id}] [path={path}]")

        return Directory(
            id=directory_id,
            name=name,
            parent_id=parent_id,
            path=path,
            created_at=now,
            updated_at=now,
        )

    def get_by_id(self, directory_id: str) -> Optional[Directory]:
        row = self._fetch_one(
            f"SELECT {DIRECTORY_COLUMNS} FROM directories WHERE id = ?",
            (directory_id,)
        )
        return row_to_directory(row) if row is not None else None

    def get_by_path(self, path: str) -> Optional[Directory]:
        row = self._fetch_one(
            f"SELECT {DIRECTORY_COLUMNS} FROM directories WHERE path = ?",
            (path,)
        )
        return row_to_directory(row) if row is not None else None

    def list_children(self, parent_id: Optional[str]) -> List[Directory]:
        """
        Direct children of a directory ordered by name; None selects top-level directories.
        """
        return self._fetch_all(
            f"SELECT {DIRECTORY_COLUMNS} FROM directories WHERE parent_id IS ? ORDER BY name",
            (parent_id,)
        )

    def list_all(self) -> List[Directory]:
        """
        Every directory ordered by path, which lists parents before their children.
        """
        return self._fetch_all(
            f"SELECT {DIRECTORY_COLUMNS} FROM directories ORDER BY path",
            ()
        )

    def list_subtree(self, path: str) -> List[Directory]:
        """
        The directory at path and all of its descendants, ordered by path.
        """
        prefix = path.rstrip('/') + '/'
        return self._fetch_all(
            f"""
            SELECT {DIRECTORY_COLUMNS} FROM directories
            WHERE path = ? OR path LIKE ? ESCAPE '\\'
            ORDER BY path
            """,
            (path, escape_like(prefix) + '%')
        )

    def path_exists(self, path: str) -> bool:
        row = self._fetch_one(
            "SELECT COUNT(*) AS total FROM directories WHERE path = ?",
            (path,)
        )
        return row["total"] > 0

    def delete_directory(self, directory_id: str) -> bool:
        """
        Delete a directory row; the schema cascades to descendants and their files.

        Returns:
            True if a row was deleted, False if none matched
        """
        logger.debug(f"Deleting directory row [id={directory_id}]")
        try:
            with get_db_connection(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute("DELETE FROM directories WHERE id = ?", (directory_id,))
                conn.commit()
                return cursor.rowcount > 0
        except sqlite3.Error as e:
            raise StorageError(f"Failed to delete directory {directory_id}: {e}") from e

    def _fetch_one(self, query: str, params: tuple) -> Optional[sqlite3.Row]:
        try:
            with get_db_connection(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(query, params)
                return cursor.fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Directory query failed: {e}") from e

    def _fetch_all(self, query: str, params: tuple) -> List[Directory]:
        try:
            with get_db_connection(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(query, params)
                rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Directory query failed: {e}") from e

        return [row_to_directory(row) for row in rows]
