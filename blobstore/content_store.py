"""Manages physical file content on disk: save, streamed save, read, delete, move, copy."""

import asyncio
import functools
import inspect
import os
import shutil
import uuid
from pathlib import Path
from typing import Any, Callable, List, Optional, Union

import aiofiles

from blobstore.mime_detection import detect_mime_type
from common.constants import STREAM_CHUNK_SIZE_BYTES
from common.exceptions import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    SizeExceededError,
    StorageError,
)
from common.logging_config import get_logger
from common.types import ProgressCallback, SaveResult

logger = get_logger(__name__)

PathLike = Union[str, Path]

PARTIAL_SUFFIX = ".part"


def generate_unique_filename(original_name: str) -> str:
    """
    Storage key for an upload: a random UUID4 plus the original extension.

    Args:
        original_name: User-supplied file name (may be empty or unsafe)

    Returns:
        e.g. '1b4e28ba-2fa1-11d2-883f-0016d3cca427.jpg', or the bare UUID
        when the original has no extension
    """
    extension = Path(original_name).suffix
    return f"{uuid.uuid4()}{extension}"


async def _read_piece(reader: Any, size: int) -> bytes:
    """Read up to size bytes from a sync or async reader."""
    piece = reader.read(size)
    if inspect.isawaitable(piece):
        piece = await piece
    return piece or b""


class ContentStore:
    """
    Physical byte storage rooted at one directory.

    Relative paths resolve under the storage root; absolute paths must
    already lie inside it.
    """

    def __init__(self, storage_root: PathLike, chunk_size: int = STREAM_CHUNK_SIZE_BYTES):
        """
        Args:
            storage_root: Root directory for all stored content
            chunk_size: Piece size for streamed ingestion (default 64KB)
        """
        self.storage_root = Path(storage_root)
        self.chunk_size = chunk_size

    def resolve(self, path: PathLike) -> Path:
        """
        Absolute location of path inside the storage root.

        Raises:
            InvalidInputError: If path escapes the storage root
        """
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.storage_root / candidate

        root = self.storage_root.resolve()
        resolved = candidate.resolve()
        if resolved != root and root not in resolved.parents:
            raise InvalidInputError(f"Path escapes storage root: {path}")
        return resolved

    async def save(self, data: bytes, original_name: str, target_dir: PathLike) -> SaveResult:
        """
        Write a complete payload under a freshly generated unique name.

        Args:
            data: Raw file content
            original_name: User-supplied file name, used for the extension and MIME lookup
            target_dir: Directory (relative to the storage root) to place the file in

        Returns:
            SaveResult with the generated name, size, MIME type and absolute path

        Raises:
            InvalidInputError: If data is empty
            ConflictError: If the generated name already exists
            StorageError: If the write fails
        """
        if not data:
            raise InvalidInputError("File data is empty")

        mime_type = detect_mime_type(original_name, data[:self.chunk_size])
        unique_name = generate_unique_filename(original_name)
        directory = self.resolve(target_dir)
        file_path = directory / unique_name

        await self._run_blocking(self._ensure_directory, directory)

        if file_path.exists():
            raise ConflictError(f"File already exists: {file_path}")

        partial_path = file_path.with_name(file_path.name + PARTIAL_SUFFIX)
        try:
            async with aiofiles.open(partial_path, "wb") as f:
                await f.write(data)
                await f.flush()
                await self._run_blocking(os.fsync, f.fileno())
            await self._run_blocking(os.replace, partial_path, file_path)
        except OSError as e:
            await self._discard_partial(partial_path)
            raise StorageError(f"Failed to write {file_path}: {e}") from e

        logger.info(f"Saved {original_name} as {file_path} ({len(data)} bytes, {mime_type})")

        return SaveResult(
            unique_name=unique_name,
            size_bytes=len(data),
            mime_type=mime_type,
            full_path=str(file_path),
        )

    async def save_streaming(
        self,
        reader: Any,
        original_name: str,
        target_dir: PathLike,
        expected_size: int,
        on_progress: Optional[ProgressCallback] = None,
        max_bytes: Optional[int] = None,
    ) -> SaveResult:
        """
        Stream a payload to disk chunk by chunk without buffering it whole.

        Only the first chunk is retained, for MIME sniffing. on_progress is
        called with (bytes_written_so_far, expected_size) after every chunk,
        on the event loop running this coroutine.

        Args:
            reader: Object with read(n) returning bytes or an awaitable of bytes
            original_name: User-supplied file name
            target_dir: Directory (relative to the storage root) to place the file in
            expected_size: Size announced by the caller, passed through to on_progress
            on_progress: Optional progress sink
            max_bytes: Abort once more than this many bytes have arrived

        Returns:
            SaveResult with the number of bytes actually written

        Raises:
            InvalidInputError: If the stream yields no data
            SizeExceededError: If more than max_bytes arrive
            ConflictError: If the generated name already exists
            StorageError: If reading or writing fails
        """
        unique_name = generate_unique_filename(original_name)
        directory = self.resolve(target_dir)
        file_path = directory / unique_name
        partial_path = file_path.with_name(file_path.name + PARTIAL_SUFFIX)

        await self._run_blocking(self._ensure_directory, directory)

        if file_path.exists():
            raise ConflictError(f"File already exists: {file_path}")

        total_written = 0
        first_chunk = b""

        try:
            async with aiofiles.open(partial_path, "wb") as f:
                while True:
                    chunk = await _read_piece(reader, self.chunk_size)
                    if not chunk:
                        break

                    if not first_chunk:
                        first_chunk = bytes(chunk)

                    if max_bytes is not None and total_written + len(chunk) > max_bytes:
                        raise SizeExceededError(total_written + len(chunk), max_bytes)

                    await f.write(chunk)
                    total_written += len(chunk)

                    if on_progress is not None:
                        on_progress(total_written, expected_size)

                await f.flush()
                await self._run_blocking(os.fsync, f.fileno())

            if total_written == 0:
                raise InvalidInputError("File data is empty")

            await self._run_blocking(os.replace, partial_path, file_path)
        except OSError as e:
            await self._discard_partial(partial_path)
            raise StorageError(f"Failed to stream {original_name} to {file_path}: {e}") from e
        except BaseException:
            await self._discard_partial(partial_path)
            raise

        if total_written != expected_size:
            logger.warning(
                f"Streamed {original_name}: expected {expected_size} bytes, wrote {total_written}"
            )

        mime_type = detect_mime_type(original_name, first_chunk)
        logger.info(f"Streamed {original_name} to {file_path} ({total_written} bytes, {mime_type})")

        return SaveResult(
            unique_name=unique_name,
            size_bytes=total_written,
            mime_type=mime_type,
            full_path=str(file_path),
        )

    async def delete(self, path: PathLike) -> None:
        """
        Delete one stored file.

        Raises:
            NotFoundError: If the file does not exist
        """
        file_path = self.resolve(path)
        if not file_path.is_file():
            raise NotFoundError(f"File not found: {file_path}")

        try:
            await self._run_blocking(file_path.unlink)
        except FileNotFoundError as e:
            raise NotFoundError(f"File not found: {file_path}") from e
        except OSError as e:
            raise StorageError(f"Failed to delete {file_path}: {e}") from e

        logger.debug(f"Deleted {file_path}")

    async def create_directory(self, path: PathLike) -> Path:
        directory = self.resolve(path)
        await self._run_blocking(self._ensure_directory, directory)
        return directory

    async def delete_directory_recursive(self, path: PathLike) -> None:
        """
        Remove a directory and everything below it.

        Raises:
            NotFoundError: If the directory does not exist
        """
        directory = self.resolve(path)
        if not directory.is_dir():
            raise NotFoundError(f"Directory not found: {directory}")

        try:
            await self._run_blocking(shutil.rmtree, directory)
        except OSError as e:
            raise StorageError(f"Failed to delete directory {directory}: {e}") from e

        logger.debug(f"Deleted directory tree {directory}")

    async def cleanup_directory(self, path: PathLike) -> None:
        """
        Remove a scratch directory if present; absence is not an error.
        """
        directory = self.resolve(path)
        if not directory.exists():
            return
        try:
            await self._run_blocking(shutil.rmtree, directory)
        except OSError as e:
            raise StorageError(f"Failed to clean up {directory}: {e}") from e

    async def exists(self, path: PathLike) -> bool:
        return self.resolve(path).exists()

    async def size(self, path: PathLike) -> int:
        file_path = self.resolve(path)
        try:
            stat_result = await self._run_blocking(file_path.stat)
        except FileNotFoundError as e:
            raise NotFoundError(f"File not found: {file_path}") from e
        except OSError as e:
            raise StorageError(f"Failed to stat {file_path}: {e}") from e
        return stat_result.st_size

    async def move(self, source: PathLike, destination: PathLike) -> None:
        await self._transfer(shutil.move, source, destination)

    async def copy(self, source: PathLike, destination: PathLike) -> None:
        await self._transfer(shutil.copy2, source, destination)

    async def read(self, path: PathLike) -> bytes:
        """
        Read a whole stored file.

        Raises:
            NotFoundError: If the file does not exist
        """
        file_path = self.resolve(path)
        try:
            async with aiofiles.open(file_path, "rb") as f:
                return await f.read()
        except FileNotFoundError as e:
            raise NotFoundError(f"File not found: {file_path}") from e
        except OSError as e:
            raise StorageError(f"Failed to read {file_path}: {e}") from e

    async def list_files(self, path: PathLike) -> List[str]:
        """
        Regular files directly inside a directory, sorted.

        Raises:
            NotFoundError: If the directory does not exist
        """
        directory = self.resolve(path)
        if not directory.is_dir():
            raise NotFoundError(f"Directory not found: {directory}")

        entries = await self._run_blocking(lambda: sorted(directory.iterdir()))
        return [str(entry) for entry in entries if entry.is_file()]

    async def _transfer(self, operation: Callable, source: PathLike, destination: PathLike) -> None:
        source_path = self.resolve(source)
        destination_path = self.resolve(destination)

        if not source_path.is_file():
            raise NotFoundError(f"File not found: {source_path}")

        try:
            await self._run_blocking(self._ensure_directory, destination_path.parent)
            await self._run_blocking(operation, source_path, destination_path)
        except OSError as e:
            raise StorageError(f"Failed to transfer {source_path} to {destination_path}: {e}") from e

    async def _discard_partial(self, partial_path: Path) -> None:
        try:
            await self._run_blocking(functools.partial(partial_path.unlink, missing_ok=True))
        except OSError as e:
            logger.error(f"Failed to remove partial file {partial_path}: {e}")

    @staticmethod
    def _ensure_directory(directory: Path) -> None:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to create directory {directory}: {e}") from e

    @staticmethod
    async def _run_blocking(func: Callable, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args))
