"""Schema validation tests to prevent SQL query mismatches."""

import sqlite3
from pathlib import Path

import pytest

from vault.database import init_database
from vault.repositories.directory_repository import DIRECTORY_COLUMNS
from vault.repositories.file_repository import FILE_COLUMNS


@pytest.fixture
def test_db(tmp_path):
    """
    Create a temporary test database with schema.
    """
    db_path = tmp_path / "test.db"
    init_database(db_path)
    return db_path


def get_table_columns(db_path: Path, table_name: str) -> set:
    """
    Get all column names for a table from the database schema.
    """
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()
    cursor.execute(f"PRAGMA table_info({table_name})")
    columns = {row[1] for row in cursor.fetchall()}
    conn.close()
    return columns


def get_index_names(db_path: Path, table_name: str) -> set:
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()
    cursor.execute(
        "SELECT name FROM sqlite_master WHERE type='index' AND tbl_name = ?",
        (table_name,)
    )
    names = {row[0] for row in cursor.fetchall()}
    conn.close()
    return names


def split_columns(column_list: str) -> set:
    return {col.strip() for col in column_list.split(",") if col.strip()}


class TestDirectoriesSchema:
    """Validate the directories table against DirectoryRepository queries."""

    def test_table_columns(self, test_db):
        columns = get_table_columns(test_db, "directories")
        assert columns == {"id", "name", "parent_id", "path", "created_at", "updated_at"}

    def test_repository_columns_exist(self, test_db):
        columns = get_table_columns(test_db, "directories")
        assert split_columns(DIRECTORY_COLUMNS) <= columns

    def test_indexes(self, test_db):
        indexes = get_index_names(test_db, "directories")
        assert {"idx_directories_parent_id", "idx_directories_path"} <= indexes

    def test_parent_foreign_key_cascades(self, test_db):
        conn = sqlite3.connect(test_db)
        keys = conn.execute("PRAGMA foreign_key_list(directories)").fetchall()
        conn.close()

        assert len(keys) == 1
        # (id, seq, table, from, to, on_update, on_delete, match)
        assert keys[0][2] == "directories"
        assert keys[0][3] == "parent_id"
        assert keys[0][6] == "CASCADE"


class TestFilesSchema:
    """Validate the files table against FileRepository queries."""

    def test_table_columns(self, test_db):
        columns = get_table_columns(test_db, "files")
        assert columns == {
            "id",
            "name",
            "original_name",
            "directory_id",
            "file_path",
            "file_size",
            "mime_type",
            "created_at",
            "updated_at",
        }

    def test_repository_columns_exist(self, test_db):
        columns = get_table_columns(test_db, "files")
        assert split_columns(FILE_COLUMNS) <= columns

    def test_indexes(self, test_db):
        assert "idx_files_directory_id" in get_index_names(test_db, "files")

    def test_directory_foreign_key_cascades(self, test_db):
        conn = sqlite3.connect(test_db)
        keys = conn.execute("PRAGMA foreign_key_list(files)").fetchall()
        conn.close()

        assert len(keys) == 1
        assert keys[0][2] == "directories"
        assert keys[0][3] == "directory_id"
        assert keys[0][6] == "CASCADE"


def test_init_database_is_idempotent(test_db):
    init_database(test_db)
    assert get_table_columns(test_db, "files")
