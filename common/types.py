"""Shared data type definitions (SaveResult, Directory, StoredFile, DirectorySummary)."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional


ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class SaveResult:
    """
    Outcome of writing one payload to the content store.
    """
    unique_name: str
    size_bytes: int
    mime_type: str
    full_path: str


@dataclass(frozen=True)
class Directory:
    """
    A directory row from the metadata store.
    """
    id: str
    name: str
    parent_id: Optional[str]
    path: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class StoredFile:
    """
    A file row from the metadata store.
    """
    id: str
    name: str
    original_name: str
    directory_id: str
    file_path: str
    file_size: int
    mime_type: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class DirectorySummary:
    """
    Flat directory-tree entry: one directory plus its direct file count.
    """
    id: str
    name: str
    parent_id: Optional[str]
    path: str
    file_count: int
    created_at: datetime
    updated_at: datetime


@dataclass
class DirectoryNode:
    """Nested directory-tree node assembled from DirectorySummary entries."""
    summary: DirectorySummary
    children: List["DirectoryNode"] = field(default_factory=list)


@dataclass(frozen=True)
class StorageStats:
    """
    Aggregate figures computed by scanning every directory's files.
    """
    total_files: int
    total_directories: int
    total_size: int
    largest_file_size: int
    most_recent_upload: Optional[datetime]
