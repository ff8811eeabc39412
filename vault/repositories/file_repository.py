"""File repository for database operations."""

import sqlite3
from typing import List, Optional

from common.exceptions import ConflictError, NotFoundError, StorageError
from common.logging_config import get_logger
from common.types import StoredFile
from vault.database import DatabasePath, escape_like, get_db_connection, require_column
from vault.utils import format_timestamp, generate_uuid, now_local, parse_timestamp

logger = get_logger(__name__)

FILE_COLUMNS = (
    "id, name, original_name, directory_id, file_path, file_size, mime_type, created_at, updated_at"
)


def row_to_file(row: sqlite3.Row) -> StoredFile:
    """
    Build a StoredFile from a row, raising CorruptionError on malformed data.
    """
    return StoredFile(
        id=require_column(row, "id"),
        name=require_column(row, "name"),
        original_name=require_column(row, "original_name"),
        directory_id=require_column(row, "directory_id"),
        file_path=require_column(row, "file_path"),
        file_size=require_column(row, "file_size"),
        mime_type=require_column(row, "mime_type"),
        created_at=parse_timestamp(require_column(row, "created_at"), "created_at"),
        updated_at=parse_timestamp(require_column(row, "updated_at"), "updated_at"),
    )


class FileRepository:
    def __init__(self, db_path: DatabasePath):
        self.db_path = db_path

    def create_file(
        self,
        name: str,
        original_name: str,
        directory_id: str,
        file_path: str,
        file_size: int,
        mime_type: str,
    ) -> StoredFile:
        """
        Insert a file row.

        Args:
            name: Stored (content-store generated) name
            original_name: User-supplied file name
            directory_id: Owning directory
            file_path: Absolute on-disk path
            file_size: Size in bytes
            mime_type: Detected MIME type

        Returns:
            The created StoredFile

        Raises:
            NotFoundError: If directory_id is absent
            ConflictError: If file_path is already recorded
            StorageError: On any other database failure
        """
        file_id = generate_uuid()
        now = now_local()

        try:
            with get_db_connection(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    INSERT INTO files (id, name, original_name, directory_id, file_path,
                                       file_size, mime_type, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        file_id,
                        name,
                        original_name,
                        directory_id,
                        file_path,
                        file_size,
                        mime_type,
                        format_timestamp(now),
                        format_timestamp(now),
                    )
                )
                conn.commit()
        except sqlite3.IntegrityError as e:
            message = str(e)
            if "FOREIGN KEY" in message:
                raise NotFoundError(f"Directory not found: {directory_id}") from e
            if "UNIQUE" in message:
                raise ConflictError(f"File path already recorded: {file_path}") from e
            raise StorageError(f"Failed to create file record for {original_name}: {e}") from e
        except sqlite3.Error as e:
            raise StorageError(f"Failed to create file record for {original_name}: {e}") from e

        logger.debug(f"Created file row [id={file_id}] [directory_id={directory_id}]")

        return StoredFile(
            id=file_id,
            name=name,
            original_name=original_name,
            directory_id=directory_id,
            file_path=file_path,
            file_size=file_size,
            mime_type=mime_type,
            created_at=now,
            updated_at=now,
        )

    def get_by_id(self, file_id: str) -> Optional[StoredFile]:
        try:
            with get_db_connection(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(f"SELECT {FILE_COLUMNS} FROM files WHERE id = ?", (file_id,))
                row = cursor.fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to load file {file_id}: {e}") from e

        if row is None:
            return None

        return row_to_file(row)

    def list_in_directory(self, directory_id: str) -> List[StoredFile]:
        """
        Files owned by one directory ordered by stored name.
        """
        try:
            with get_db_connection(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"SELECT {FILE_COLUMNS} FROM files WHERE directory_id = ? ORDER BY name",
                    (directory_id,)
                )
                rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list files in directory {directory_id}: {e}") from e

        return [row_to_file(row) for row in rows]

    def list_in_subtree(self, path: str) -> List[StoredFile]:
        """
        Files owned by the directory at path or by any of its descendants.
        """
        prefix = path.rstrip('/') + '/'
        columns = ", ".join(f"f.{column.strip()}" for column in FILE_COLUMNS.split(","))
        try:
            with get_db_connection(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"""
                    SELECT {columns} FROM files f
                    JOIN directories d ON d.id = f.directory_id
                    WHERE d.path = ? OR d.path LIKE ? ESCAPE '\\'
                    ORDER BY f.name
                    """,
                    (path, escape_like(prefix) + '%')
                )
                rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list files under {path}: {e}") from e

        return [row_to_file(row) for row in rows]

    def delete_file(self, file_id: str) -> bool:
        """
        Delete a file row.

        Returns:
            True if a row was deleted, False if none matched
        """
        logger.debug(f"Deleting file row [id={file_id}]")
        try:
            with get_db_connection(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute("DELETE FROM files WHERE id = ?", (file_id,))
                conn.commit()
                return cursor.rowcount > 0
        except sqlite3.Error as e:
            raise StorageError(f"Failed to delete file {file_id}: {e}") from e
