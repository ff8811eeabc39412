"""Pydantic schemas for file commands and endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import Base64Bytes, BaseModel

from common.types import StoredFile


class UploadFileCommand(BaseModel):
    """Request model for a single in-memory upload."""
    file_data: bytes
    original_name: str
    directory_id: Optional[str] = None


class BatchUploadItem(BaseModel):
    """Request model for one item of an HTTP batch upload (base64 payload)."""
    file_data: Base64Bytes
    original_name: str
    directory_id: Optional[str] = None

    def to_command(self) -> UploadFileCommand:
        return UploadFileCommand(
            file_data=self.file_data,
            original_name=self.original_name,
            directory_id=self.directory_id,
        )


class UploadResponse(BaseModel):
    """Response model for file upload."""
    file_id: str
    file_name: str
    original_name: str
    file_size: int
    mime_type: str
    directory_id: str
    created_at: datetime

    @classmethod
    def from_stored_file(cls, record: StoredFile) -> "UploadResponse":
        return cls(
            file_id=record.id,
            file_name=record.name,
            original_name=record.original_name,
            file_size=record.file_size,
            mime_type=record.mime_type,
            directory_id=record.directory_id,
            created_at=record.created_at,
        )


class FileInfoResponse(BaseModel):
    """Response model for file metadata."""
    id: str
    name: str
    original_name: str
    directory_id: str
    file_path: str
    file_size: int
    mime_type: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_stored_file(cls, record: StoredFile) -> "FileInfoResponse":
        return cls(
            id=record.id,
            name=record.name,
            original_name=record.original_name,
            directory_id=record.directory_id,
            file_path=record.file_path,
            file_size=record.file_size,
            mime_type=record.mime_type,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class DeleteFileCommand(BaseModel):
    """Request model for deleting one file."""
    file_id: str


class GetFileInfoCommand(BaseModel):
    """Request model for fetching file metadata."""
    file_id: str


class ReadFileContentCommand(BaseModel):
    """Request model for reading file bytes."""
    file_id: str


class SearchFilesCommand(BaseModel):
    """Request model for name search."""
    query: str
    directory_id: Optional[str] = None


class ValidateFileTypeCommand(BaseModel):
    """Request model for checking a file name against the allow-list."""
    filename: str
