"""Service layer for business logic."""

from vault.services.directory_tree import build_directory_tree
from vault.services.file_manager_service import FileManagerService

__all__ = [
    "FileManagerService",
    "build_directory_tree",
]
