"""Shared pytest fixtures for all tests."""

import pytest

from blobstore.content_store import ContentStore
from vault.commands import FileManagerCommands
from vault.config import FileManagerConfig
from vault.database import init_database
from vault.repositories import DirectoryRepository, FileRepository
from vault.services import FileManagerService


@pytest.fixture
def config(tmp_path):
    """
    Isolated configuration with its own database and storage root.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        FileManagerConfig pointing into tmp_path
    """
    cfg = FileManagerConfig(
        app_data_dir=tmp_path,
        database_path=tmp_path / "file_manager.db",
        storage_path=tmp_path / "files",
    )
    cfg.ensure_directories()
    init_database(cfg.database_path)
    return cfg


@pytest.fixture
def directory_repo(config):
    return DirectoryRepository(config.database_path)


@pytest.fixture
def file_repo(config):
    return FileRepository(config.database_path)


@pytest.fixture
def content_store(config):
    return ContentStore(config.storage_path)


@pytest.fixture
def service(config, directory_repo, file_repo, content_store):
    return FileManagerService(
        config=config,
        directory_repo=directory_repo,
        file_repo=file_repo,
        content_store=content_store,
    )


@pytest.fixture
def commands(service):
    return FileManagerCommands(service)


class ChunkedAsyncReader:
    """
    Async reader that hands out at most max_piece bytes per read call.
    """

    def __init__(self, data: bytes, max_piece: int = 1024):
        self._data = data
        self._offset = 0
        self._max_piece = max_piece

    async def read(self, size: int = -1) -> bytes:
        if size < 0:
            size = len(self._data)
        size = min(size, self._max_piece)
        piece = self._data[self._offset:self._offset + size]
        self._offset += len(piece)
        return piece


@pytest.fixture
def async_reader_factory():
    """
    Factory for ChunkedAsyncReader instances.
    """
    return ChunkedAsyncReader
