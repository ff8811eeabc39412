"""Pydantic schemas for commands, API requests and responses."""

from vault.schemas.common import CommandResponse, ErrorResponse
from vault.schemas.directories import (
    CreateDirectoryCommand,
    CreateDirectoryResponse,
    DeleteDirectoryCommand,
    DirectoryTreeNode,
    GetDirectoryFilesCommand,
    NestedDirectoryNode,
)
from vault.schemas.files import (
    BatchUploadItem,
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

__all__ = [
    "CommandResponse",
    "ErrorResponse",
    "CreateDirectoryCommand",
    "CreateDirectoryResponse",
    "DeleteDirectoryCommand",
    "DirectoryTreeNode",
    "GetDirectoryFilesCommand",
    "NestedDirectoryNode",
    "BatchUploadItem",
    "DeleteFileCommand",
    "FileInfoResponse",
    "GetFileInfoCommand",
    "ReadFileContentCommand",
    "SearchFilesCommand",
    "UploadFileCommand",
    "UploadResponse",
    "ValidateFileTypeCommand",
    "StorageStatsResponse",
]
