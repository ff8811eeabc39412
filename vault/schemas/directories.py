"""Pydantic schemas for directory commands and endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from common.types import Directory, DirectoryNode, DirectorySummary


class CreateDirectoryCommand(BaseModel):
    """Request model for directory creation."""
    name: str
    parent_id: Optional[str] = None


class CreateDirectoryResponse(BaseModel):
    """Response model for directory creation."""
    id: str
    name: str
    parent_id: Optional[str]
    path: str
    created_at: datetime

    @classmethod
    def from_directory(cls, directory: Directory) -> "CreateDirectoryResponse":
        return cls(
            id=directory.id,
            name=directory.name,
            parent_id=directory.parent_id,
            path=directory.path,
            created_at=directory.created_at,
        )


class DeleteDirectoryCommand(BaseModel):
    """Request model for deleting a directory subtree."""
    directory_id: str


class GetDirectoryFilesCommand(BaseModel):
    """Request model for listing a directory's files."""
    directory_id: str


class DirectoryTreeNode(BaseModel):
    """Flat directory-tree entry."""
    id: str
    name: str
    parent_id: Optional[str]
    path: str
    file_count: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_summary(cls, summary: DirectorySummary) -> "DirectoryTreeNode":
        return cls(
            id=summary.id,
            name=summary.name,
            parent_id=summary.parent_id,
            path=summary.path,
            file_count=summary.file_count,
            created_at=summary.created_at,
            updated_at=summary.updated_at,
        )


class NestedDirectoryNode(DirectoryTreeNode):
    """Directory-tree entry with its subdirectories attached."""
    children: List["NestedDirectoryNode"] = []

    @classmethod
    def from_node(cls, node: DirectoryNode) -> "NestedDirectoryNode":
        summary = node.summary
        return cls(
            id=summary.id,
            name=summary.name,
            parent_id=summary.parent_id,
            path=summary.path,
            file_count=summary.file_count,
            created_at=summary.created_at,
            updated_at=summary.updated_at,
            children=[cls.from_node(child) for child in node.children],
        )


NestedDirectoryNode.model_rebuild()
