"""Configuration settings for the file manager."""

import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from common.constants import DEFAULT_MAX_FILE_SIZE_BYTES, DEFAULT_SUPPORTED_FILE_TYPES
from common.exceptions import StorageError


VAULT_HOST = os.environ.get("FILEVAULT_HOST", "127.0.0.1")

VAULT_PORT = int(os.environ.get("FILEVAULT_PORT", "8000"))


def _default_app_data_dir() -> Path:
    data_dir = os.environ.get("FILEVAULT_DATA_DIR")
    if data_dir:
        return Path(data_dir)
    return Path.cwd() / "data"


def _parse_supported_types(raw: Optional[str]) -> List[str]:
    if not raw:
        return list(DEFAULT_SUPPORTED_FILE_TYPES)
    return [ext.strip().lower().lstrip('.') for ext in raw.split(',') if ext.strip()]


@dataclass
class FileManagerConfig:
    """
    Settings consumed by the file manager service.

    Always constructed by the caller and injected; the service never builds
    a default one for itself.
    """
    app_data_dir: Path
    database_path: Path
    storage_path: Path
    max_file_size: int = DEFAULT_MAX_FILE_SIZE_BYTES
    supported_file_types: List[str] = field(
        default_factory=lambda: list(DEFAULT_SUPPORTED_FILE_TYPES)
    )

    @classmethod
    def from_env(cls) -> "FileManagerConfig":
        """
        Build configuration from FILEVAULT_* environment variables.

        Returns:
            FileManagerConfig with defaults for anything unset
        """
        app_data_dir = _default_app_data_dir()
        database_path = Path(
            os.environ.get("FILEVAULT_DATABASE_PATH", str(app_data_dir / "file_manager.db"))
        )
        storage_path = Path(
            os.environ.get("FILEVAULT_STORAGE_PATH", str(app_data_dir / "files"))
        )
        max_file_size = int(
            os.environ.get("FILEVAULT_MAX_FILE_SIZE", str(DEFAULT_MAX_FILE_SIZE_BYTES))
        )

        return cls(
            app_data_dir=app_data_dir,
            database_path=database_path,
            storage_path=storage_path,
            max_file_size=max_file_size,
            supported_file_types=_parse_supported_types(
                os.environ.get("FILEVAULT_SUPPORTED_TYPES")
            ),
        )

    def ensure_directories(self) -> None:
        """
        Create the app data, database parent and storage directories.

        Raises:
            StorageError: If a directory cannot be created
        """
        for directory in (self.app_data_dir, self.database_path.parent, self.storage_path):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageError(f"Failed to create directory {directory}: {e}") from e

    def is_file_type_supported(self, filename: str) -> bool:
        extension = Path(filename).suffix
        if not extension:
            return False
        return extension[1:].lower() in self.supported_file_types

    def is_file_size_valid(self, size: int) -> bool:
        return size <= self.max_file_size

    def get_storage_subdir(self, now: Optional[datetime] = None) -> Path:
        """
        Date-sharded upload directory relative to the storage root (YYYY/MM/DD).

        Args:
            now: Reference time, defaults to the current local time

        Returns:
            Relative Path such as 2024/03/07
        """
        now = now or datetime.now()
        return Path(f"{now.year:04d}") / f"{now.month:02d}" / f"{now.day:02d}"
