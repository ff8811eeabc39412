"""File manager service: composes the metadata store and the content store."""

import asyncio
from typing import Any, Awaitable, Callable, List, Optional, Set

from blobstore.content_store import ContentStore
from common.constants import (
    DIRECTORY_MIRROR_SUBDIR,
    ROOT_DIRECTORY_NAME,
    ROOT_DIRECTORY_PATH,
)
from common.exceptions import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    SizeExceededError,
    UnsupportedFileTypeError,
)
from common.logging_config import get_logger
from common.types import (
    Directory,
    DirectorySummary,
    ProgressCallback,
    SaveResult,
    StorageStats,
    StoredFile,
)
from vault.config import FileManagerConfig
from vault.repositories.directory_repository import DirectoryRepository
from vault.repositories.file_repository import FileRepository
from vault.utils import build_directory_path, mirror_relative_path

logger = get_logger(__name__)


class FileManagerService:
    """
    Upload, directory and query operations over both stores.

    File-touching operations always run the physical step first and the
    metadata step second. When the metadata step fails after the physical
    one succeeded, the physical artifact is removed by a background task that
    is dispatched and logged but never awaited or retried. A crash between
    the two steps can therefore leave an orphaned physical file (upload,
    create) or a dangling metadata row (delete); nothing reconciles these.
    """

    def __init__(
        self,
        config: FileManagerConfig,
        directory_repo: DirectoryRepository,
        file_repo: FileRepository,
        content_store: ContentStore,
    ):
        if config is None:
            raise ValueError("FileManagerService requires a FileManagerConfig")

        self.config = config
        self.directory_repo = directory_repo
        self.file_repo = file_repo
        self.content_store = content_store
        self._background_tasks: Set[asyncio.Task] = set()

    async def upload_file(
        self,
        file_data: bytes,
        original_name: str,
        directory_id: Optional[str] = None,
    ) -> StoredFile:
        """
        Validate, write the bytes, then record them.

        Raises:
            SizeExceededError: If the payload is larger than max_file_size
            UnsupportedFileTypeError: If the extension is not allow-listed
            NotFoundError: If directory_id is given but absent
        """
        self._validate_upload(original_name, len(file_data))
        directory = await self._resolve_target_directory(directory_id)

        save_result = await self.content_store.save(
            file_data,
            original_name,
            self.config.get_storage_subdir(),
        )

        return self._record_upload(save_result, original_name, directory)

    async def upload_file_streaming(
        self,
        reader: Any,
        original_name: str,
        expected_size: int,
        directory_id: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> StoredFile:
        """
        Same as upload_file, but the payload is read from reader in chunks.

        Raises:
            SizeExceededError: If expected_size, or the bytes actually read, exceed max_file_size
            UnsupportedFileTypeError: If the extension is not allow-listed
            NotFoundError: If directory_id is given but absent
        """
        if expected_size < 0:
            raise InvalidInputError(f"Expected size cannot be negative: {expected_size}")

        self._validate_upload(original_name, expected_size)
        directory = await self._resolve_target_directory(directory_id)

        save_result = await self.content_store.save_streaming(
            reader,
            original_name,
            self.config.get_storage_subdir(),
            expected_size,
            on_progress,
            max_bytes=self.config.max_file_size,
        )

        return self._record_upload(save_result, original_name, directory)

    async def create_directory(self, name: str, parent_id: Optional[str] = None) -> Directory:
        """
        Create the physical mirror, then the directory row.

        Without parent_id the directory is placed under the Root directory,
        which is bootstrapped on first use.

        Raises:
            InvalidInputError: If name is blank or not a single path segment
            NotFoundError: If parent_id is given but absent
            ConflictError: If the computed path already exists
        """
        self._validate_directory_name(name)

        if parent_id is not None:
            parent = self.directory_repo.get_by_id(parent_id)
            if parent is None:
                raise NotFoundError(f"Directory not found: {parent_id}")
        else:
            parent = await self._ensure_root_directory()

        path = build_directory_path(name, parent.path)

        if self.directory_repo.path_exists(path):
            raise ConflictError(f"Directory path already exists: {path}")

        physical_path = mirror_relative_path(path, DIRECTORY_MIRROR_SUBDIR)
        await self.content_store.create_directory(physical_path)

        try:
            directory = self.directory_repo.create_directory(name, parent.id, path)
        except Exception as e:
            logger.error(f"Recording directory {path} failed, rolling back {physical_path}: {e}")
            self._schedule_compensation(
                lambda: self.content_store.delete_directory_recursive(physical_path),
                f"remove directory mirror {physical_path}",
            )
            raise

        logger.info(f"Created directory {path} [id={directory.id}]")
        return directory

    async def delete_file(self, file_id: str) -> None:
        """
        Delete the physical file, then its row.

        Raises:
            NotFoundError: If the file record or its physical object is absent
        """
        record = self.file_repo.get_by_id(file_id)
        if record is None:
            raise NotFoundError(f"File not found: {file_id}")

        await self.content_store.delete(record.file_path)
        self.file_repo.delete_file(file_id)

        logger.info(f"Deleted file {record.original_name} [id={file_id}]")

    async def delete_directory(self, directory_id: str) -> None:
        """
        Delete a directory with every descendant directory and file.

        The physical mirror subtree and the bytes of every file owned by the
        subtree are removed first; deleting the row then cascades through the
        metadata.

        Raises:
            NotFoundError: If the directory record or its physical mirror is absent
        """
        directory = self.directory_repo.get_by_id(directory_id)
        if directory is None:
            raise NotFoundError(f"Directory not found: {directory_id}")

        subtree = self.directory_repo.list_subtree(directory.path)
        owned_files = self.file_repo.list_in_subtree(directory.path)

        await self.content_store.delete_directory_recursive(
            mirror_relative_path(directory.path, DIRECTORY_MIRROR_SUBDIR)
        )

        for record in owned_files:
            try:
                await self.content_store.delete(record.file_path)
            except NotFoundError:
                logger.warning(f"Content for file {record.id} already missing: {record.file_path}")

        self.directory_repo.delete_directory(directory_id)

        logger.info(
            f"Deleted directory {directory.path} [id={directory_id}] "
            f"with {len(subtree) - 1} subdirectories and {len(owned_files)} files"
        )

    async def get_directory_tree(self) -> List[DirectorySummary]:
        """
        Flat list of every directory ordered by path, each with its direct file count.

        Nesting is left to the caller (see build_directory_tree).
        """
        summaries = []
        for directory in self.directory_repo.list_all():
            file_count = len(self.file_repo.list_in_directory(directory.id))
            summaries.append(
                DirectorySummary(
                    id=directory.id,
                    name=directory.name,
                    parent_id=directory.parent_id,
                    path=directory.path,
                    file_count=file_count,
                    created_at=directory.created_at,
                    updated_at=directory.updated_at,
                )
            )
        return summaries

    async def list_directory_files(self, directory_id: str) -> List[StoredFile]:
        if self.directory_repo.get_by_id(directory_id) is None:
            raise NotFoundError(f"Directory not found: {directory_id}")
        return self.file_repo.list_in_directory(directory_id)

    async def get_file_info(self, file_id: str) -> Optional[StoredFile]:
        return self.file_repo.get_by_id(file_id)

    async def read_file_content(self, file_id: str) -> bytes:
        record = self.file_repo.get_by_id(file_id)
        if record is None:
            raise NotFoundError(f"File not found: {file_id}")
        return await self.content_store.read(record.file_path)

    async def search_files(self, query: str, directory_id: Optional[str] = None) -> List[StoredFile]:
        """
        Case-insensitive substring match on stored and original names.

        Scans one directory, or every directory when directory_id is None.
        No index backs this; it reads each candidate directory's file list.
        """
        if directory_id is not None:
            candidates = await self.list_directory_files(directory_id)
        else:
            candidates = []
            for directory in self.directory_repo.list_all():
                candidates.extend(self.file_repo.list_in_directory(directory.id))

        needle = query.lower()
        return [
            record for record in candidates
            if needle in record.name.lower() or needle in record.original_name.lower()
        ]

    async def get_storage_stats(self) -> StorageStats:
        """
        Totals computed by scanning every directory's file list on each call.
        """
        directories = self.directory_repo.list_all()

        total_files = 0
        total_size = 0
        largest_file_size = 0
        most_recent_upload = None

        for directory in directories:
            for record in self.file_repo.list_in_directory(directory.id):
                total_files += 1
                total_size += record.file_size
                largest_file_size = max(largest_file_size, record.file_size)
                if most_recent_upload is None or record.created_at > most_recent_upload:
                    most_recent_upload = record.created_at

        return StorageStats(
            total_files=total_files,
            total_directories=len(directories),
            total_size=total_size,
            largest_file_size=largest_file_size,
            most_recent_upload=most_recent_upload,
        )

    def is_file_type_supported(self, filename: str) -> bool:
        return self.config.is_file_type_supported(filename)

    async def wait_for_background_tasks(self) -> None:
        """
        Let pending compensation tasks finish. Used on shutdown.
        """
        if self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    def _validate_upload(self, original_name: str, size: int) -> None:
        if "\x00" in original_name:
            raise InvalidInputError("File name contains a null byte")

        if not self.config.is_file_size_valid(size):
            raise SizeExceededError(size, self.config.max_file_size)

        if not self.config.is_file_type_supported(original_name):
            extension = original_name.rsplit('.', 1)[-1] if '.' in original_name else "unknown"
            raise UnsupportedFileTypeError(extension)

    @staticmethod
    def _validate_directory_name(name: str) -> None:
        if not name or not name.strip():
            raise InvalidInputError("Directory name cannot be empty")
        if name in (".", "..") or any(char in name for char in ("/", "\\", "\x00")):
            raise InvalidInputError(f"Directory name must be a single path segment: {name!r}")

    async def _resolve_target_directory(self, directory_id: Optional[str]) -> Directory:
        if directory_id is None:
            return await self._ensure_root_directory()

        directory = self.directory_repo.get_by_id(directory_id)
        if directory is None:
            raise NotFoundError(f"Directory not found: {directory_id}")
        return directory

    async def _ensure_root_directory(self) -> Directory:
        """
        First top-level directory, creating "Root" at "/" when none exists.
        """
        top_level = self.directory_repo.list_children(None)
        if top_level:
            return top_level[0]

        await self.content_store.create_directory(
            mirror_relative_path(ROOT_DIRECTORY_PATH, DIRECTORY_MIRROR_SUBDIR)
        )

        try:
            root = self.directory_repo.create_directory(ROOT_DIRECTORY_NAME, None, ROOT_DIRECTORY_PATH)
        except ConflictError:
            existing = self.directory_repo.get_by_path(ROOT_DIRECTORY_PATH)
            if existing is None:
                raise
            return existing

        logger.info(f"Bootstrapped root directory [id={root.id}]")
        return root

    def _record_upload(
        self,
        save_result: SaveResult,
        original_name: str,
        directory: Directory,
    ) -> StoredFile:
        try:
            record = self.file_repo.create_file(
                name=save_result.unique_name,
                original_name=original_name,
                directory_id=directory.id,
                file_path=save_result.full_path,
                file_size=save_result.size_bytes,
                mime_type=save_result.mime_type,
            )
        except Exception as e:
            logger.error(
                f"Recording upload {original_name} failed, removing {save_result.full_path}: {e}"
            )
            self._schedule_compensation(
                lambda: self.content_store.delete(save_result.full_path),
                f"remove orphaned file {save_result.full_path}",
            )
            raise

        logger.info(
            f"Uploaded {original_name} [id={record.id}] [directory={directory.path}] "
            f"({record.file_size} bytes)"
        )
        return record

    def _schedule_compensation(
        self,
        action: Callable[[], Awaitable[None]],
        description: str,
    ) -> None:
        """
        Fire-and-forget cleanup; the outcome is only logged.
        """
        async def run() -> None:
            try:
                await action()
                logger.info(f"Compensation succeeded: {description}")
            except Exception as e:
                logger.error(f"Compensation failed: {description}: {e}")

        try:
            task = asyncio.get_running_loop().create_task(run())
        except RuntimeError as e:
            logger.error(f"Could not dispatch compensation ({description}): {e}")
            return

        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        logger.info(f"Dispatched compensation: {description}")
