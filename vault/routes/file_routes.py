"""File operation API routes."""

from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status

from common.logging_config import get_logger
from vault.commands import FileManagerCommands
from vault.routes.dependencies import CommandFailedError, get_commands, unwrap
from vault.schemas.files import (
    BatchUploadItem,
    DeleteFileCommand,
    FileInfoResponse,
    GetFileInfoCommand,
    ReadFileContentCommand,
    SearchFilesCommand,
    UploadResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/files", tags=["Files"])


def content_disposition(filename: str) -> str:
    """
    Attachment header with an ASCII fallback name and an RFC 5987 UTF-8 name.
    """
    fallback = filename.encode("ascii", "replace").decode("ascii")
    fallback = "".join("_" if char in '"\\' or ord(char) < 32 else char for char in fallback)
    encoded = quote(filename, safe="")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{encoded}"


@router.post("", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: UploadFile = File(...),
    directory_id: Optional[str] = Form(None),
    commands: FileManagerCommands = Depends(get_commands),
):
    """
    Upload one file, streamed to disk in chunks.

    Parameters:
        - file: File to upload (multipart/form-data)
        - directory_id: Target directory (defaults to the root directory)

    Returns:
        - Stored file metadata

    Raises:
        - 400: Empty file or name
        - 404: Directory not found
        - 413: File too large
        - 415: Unsupported file type
    """
    expected_size = file.size or 0
    file_name = file.filename or ""

    def log_progress(written: int, expected: int) -> None:
        logger.debug(f"Upload progress {file_name}: {written}/{expected} bytes")

    response = await commands.upload_file_stream(
        file,
        file_name,
        expected_size,
        directory_id,
        log_progress,
    )
    return unwrap(response)


@router.post("/batch", response_model=List[UploadResponse], status_code=status.HTTP_201_CREATED)
async def upload_multiple_files(
    items: List[BatchUploadItem],
    commands: FileManagerCommands = Depends(get_commands),
):
    """
    Upload up to 50 base64-encoded files in one request.

    Items that succeed stay stored even if the request fails overall.

    Raises:
        - 400: Empty batch, too many files, or any item failed
    """
    response = await commands.upload_multiple_files([item.to_command() for item in items])
    return unwrap(response)


@router.get("/search", response_model=List[FileInfoResponse])
async def search_files(
    query: str = Query(..., description="Case-insensitive name fragment"),
    directory_id: Optional[str] = Query(None),
    commands: FileManagerCommands = Depends(get_commands),
):
    response = await commands.search_files(
        SearchFilesCommand(query=query, directory_id=directory_id)
    )
    return unwrap(response)


@router.get("/{file_id}", response_model=FileInfoResponse)
async def get_file_info(
    file_id: str,
    commands: FileManagerCommands = Depends(get_commands),
):
    info = unwrap(await commands.get_file_info(GetFileInfoCommand(file_id=file_id)))
    if info is None:
        raise CommandFailedError(f"File not found: {file_id}", "NOT_FOUND")
    return info


@router.get("/{file_id}/content")
async def read_file_content(
    file_id: str,
    commands: FileManagerCommands = Depends(get_commands),
):
    """
    Return the stored bytes with the recorded MIME type.

    Raises:
        - 404: File record or content missing
    """
    info = unwrap(await commands.get_file_info(GetFileInfoCommand(file_id=file_id)))
    if info is None:
        raise CommandFailedError(f"File not found: {file_id}", "NOT_FOUND")

    content = unwrap(await commands.read_file_content(ReadFileContentCommand(file_id=file_id)))

    return Response(
        content=content,
        media_type=info.mime_type,
        headers={"Content-Disposition": content_disposition(info.original_name)},
    )


@router.delete("/{file_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_file(
    file_id: str,
    commands: FileManagerCommands = Depends(get_commands),
):
    unwrap(await commands.delete_file(DeleteFileCommand(file_id=file_id)))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
