"""Boundary commands: validate input, serialize access, wrap results in CommandResponse."""

import asyncio
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from common.constants import (
    INVALID_DIRECTORY_NAME_CHARS,
    MAX_BATCH_UPLOAD_FILES,
    MIN_SEARCH_QUERY_LENGTH,
)
from common.exceptions import FileManagerException
from common.logging_config import get_logger
from common.types import ProgressCallback
from vault.schemas.common import CommandResponse
from vault.schemas.directories import (
    CreateDirectoryCommand,
    CreateDirectoryResponse,
    DeleteDirectoryCommand,
    DirectoryTreeNode,
    GetDirectoryFilesCommand,
    NestedDirectoryNode,
)
from vault.schemas.files import (
    DeleteFileCommand,
    FileInfoResponse,
    GetFileInfoCommand,
    ReadFileContentCommand,
    SearchFilesCommand,
    UploadFileCommand,
    UploadResponse,
    ValidateFileTypeCommand,
)
from vault.schemas.stats import StorageStatsResponse
from vault.services.directory_tree import build_directory_tree
from vault.services.file_manager_service import FileManagerService

logger = get_logger(__name__)

T = TypeVar("T")

INVALID_INPUT = "INVALID_INPUT"
PARTIAL_FAILURE = "PARTIAL_FAILURE"
INTERNAL_ERROR = "INTERNAL_ERROR"


class FileManagerCommands:
    """
    Entry points exposed to callers outside the service.

    Every command holds one shared lock for its entire duration, so commands
    never interleave. Domain errors become failed responses carrying the
    exception's code; anything unexpected is logged and reported as
    INTERNAL_ERROR.
    """

    def __init__(self, service: FileManagerService):
        self.service = service
        self._lock = asyncio.Lock()

    async def upload_file(self, command: UploadFileCommand) -> CommandResponse[UploadResponse]:
        if not command.file_data:
            return CommandResponse.fail("File data is empty", INVALID_INPUT)
        if not command.original_name.strip():
            return CommandResponse.fail("File name cannot be empty", INVALID_INPUT)

        async def run() -> UploadResponse:
            record = await self.service.upload_file(
                command.file_data,
                command.original_name,
                command.directory_id,
            )
            return UploadResponse.from_stored_file(record)

        return await self._execute("upload_file", run)

    async def upload_file_stream(
        self,
        reader: Any,
        original_name: str,
        expected_size: int,
        directory_id: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> CommandResponse[UploadResponse]:
        if not original_name or not original_name.strip():
            return CommandResponse.fail("File name cannot be empty", INVALID_INPUT)

        async def run() -> UploadResponse:
            record = await self.service.upload_file_streaming(
                reader,
                original_name,
                expected_size,
                directory_id,
                on_progress,
            )
            return UploadResponse.from_stored_file(record)

        return await self._execute("upload_file_stream", run)

    async def upload_multiple_files(
        self,
        commands: List[UploadFileCommand],
    ) -> CommandResponse[List[UploadResponse]]:
        """
        Upload a batch one item at a time.

        Items that pass are persisted even when others fail; any failure
        turns the whole response into one error naming each failing index.
        """
        if not commands:
            return CommandResponse.fail("No files to upload", INVALID_INPUT)
        if len(commands) > MAX_BATCH_UPLOAD_FILES:
            return CommandResponse.fail(
                f"Too many files, maximum {MAX_BATCH_UPLOAD_FILES} files per batch",
                INVALID_INPUT,
            )

        results: List[UploadResponse] = []
        errors: List[str] = []

        async with self._lock:
            for index, command in enumerate(commands):
                if not command.file_data:
                    errors.append(f"File {index} has empty data")
                    continue
                if not command.original_name.strip():
                    errors.append(f"File {index} has empty name")
                    continue

                try:
                    record = await self.service.upload_file(
                        command.file_data,
                        command.original_name,
                        command.directory_id,
                    )
                except FileManagerException as e:
                    errors.append(f"File {index}: {e}")
                    continue
                except Exception as e:
                    logger.error(f"Unexpected error uploading batch item {index}: {e}", exc_info=True)
                    errors.append(f"File {index}: {e}")
                    continue

                results.append(UploadResponse.from_stored_file(record))

        if errors:
            logger.warning(
                f"Batch upload: {len(results)} succeeded, {len(errors)} failed"
            )
            return CommandResponse.fail(
                f"Some files failed to upload: {', '.join(errors)}",
                PARTIAL_FAILURE,
            )

        return CommandResponse.ok(results)

    async def create_directory(
        self,
        command: CreateDirectoryCommand,
    ) -> CommandResponse[CreateDirectoryResponse]:
        if not command.name.strip():
            return CommandResponse.fail("Directory name cannot be empty", INVALID_INPUT)
        if any(char in command.name for char in INVALID_DIRECTORY_NAME_CHARS):
            return CommandResponse.fail("Directory name contains invalid characters", INVALID_INPUT)

        async def run() -> CreateDirectoryResponse:
            directory = await self.service.create_directory(command.name, command.parent_id)
            return CreateDirectoryResponse.from_directory(directory)

        return await self._execute("create_directory", run)

    async def delete_file(self, command: DeleteFileCommand) -> CommandResponse:
        if not command.file_id.strip():
            return CommandResponse.fail("File ID cannot be empty", INVALID_INPUT)
        return await self._execute("delete_file", lambda: self.service.delete_file(command.file_id))

    async def delete_directory(self, command: DeleteDirectoryCommand) -> CommandResponse:
        if not command.directory_id.strip():
            return CommandResponse.fail("Directory ID cannot be empty", INVALID_INPUT)
        return await self._execute(
            "delete_directory",
            lambda: self.service.delete_directory(command.directory_id),
        )

    async def get_directory_tree(self) -> CommandResponse[List[DirectoryTreeNode]]:
        async def run() -> List[DirectoryTreeNode]:
            summaries = await self.service.get_directory_tree()
            return [DirectoryTreeNode.from_summary(summary) for summary in summaries]

        return await self._execute("get_directory_tree", run)

    async def get_nested_directory_tree(self) -> CommandResponse[List[NestedDirectoryNode]]:
        async def run() -> List[NestedDirectoryNode]:
            summaries = await self.service.get_directory_tree()
            return [NestedDirectoryNode.from_node(node) for node in build_directory_tree(summaries)]

        return await self._execute("get_nested_directory_tree", run)

    async def get_directory_files(
        self,
        command: GetDirectoryFilesCommand,
    ) -> CommandResponse[List[FileInfoResponse]]:
        if not command.directory_id.strip():
            return CommandResponse.fail("Directory ID cannot be empty", INVALID_INPUT)

        async def run() -> List[FileInfoResponse]:
            records = await self.service.list_directory_files(command.directory_id)
            return [FileInfoResponse.from_stored_file(record) for record in records]

        return await self._execute("get_directory_files", run)

    async def get_file_info(
        self,
        command: GetFileInfoCommand,
    ) -> CommandResponse[Optional[FileInfoResponse]]:
        if not command.file_id.strip():
            return CommandResponse.fail("File ID cannot be empty", INVALID_INPUT)

        async def run() -> Optional[FileInfoResponse]:
            record = await self.service.get_file_info(command.file_id)
            if record is None:
                return None
            return FileInfoResponse.from_stored_file(record)

        return await self._execute("get_file_info", run)

    async def read_file_content(self, command: ReadFileContentCommand) -> CommandResponse[bytes]:
        if not command.file_id.strip():
            return CommandResponse.fail("File ID cannot be empty", INVALID_INPUT)
        return await self._execute(
            "read_file_content",
            lambda: self.service.read_file_content(command.file_id),
        )

    async def search_files(
        self,
        command: SearchFilesCommand,
    ) -> CommandResponse[List[FileInfoResponse]]:
        query = command.query.strip()
        if not query:
            return CommandResponse.fail("Search query cannot be empty", INVALID_INPUT)
        if len(query) < MIN_SEARCH_QUERY_LENGTH:
            return CommandResponse.fail(
                f"Search query must be at least {MIN_SEARCH_QUERY_LENGTH} characters",
                INVALID_INPUT,
            )

        async def run() -> List[FileInfoResponse]:
            records = await self.service.search_files(query, command.directory_id)
            return [FileInfoResponse.from_stored_file(record) for record in records]

        return await self._execute("search_files", run)

    async def get_storage_stats(self) -> CommandResponse[StorageStatsResponse]:
        async def run() -> StorageStatsResponse:
            return StorageStatsResponse.from_stats(await self.service.get_storage_stats())

        return await self._execute("get_storage_stats", run)

    async def validate_file_type(self, command: ValidateFileTypeCommand) -> CommandResponse[bool]:
        async with self._lock:
            return CommandResponse.ok(self.service.is_file_type_supported(command.filename))

    async def _execute(
        self,
        operation: str,
        action: Callable[[], Awaitable[T]],
    ) -> CommandResponse[T]:
        async with self._lock:
            try:
                result = await action()
            except FileManagerException as e:
                logger.warning(f"{operation} failed: {e} [code={e.code}]")
                return CommandResponse.fail(str(e), e.code)
            except Exception as e:
                logger.error(f"Unexpected error in {operation}: {e}", exc_info=True)
                return CommandResponse.fail(f"Internal error: {e}", INTERNAL_ERROR)

        return CommandResponse.ok(result)
