"""Repository layer for data access."""

from vault.repositories.directory_repository import DirectoryRepository
from vault.repositories.file_repository import FileRepository

__all__ = [
    "DirectoryRepository",
    "FileRepository",
]
