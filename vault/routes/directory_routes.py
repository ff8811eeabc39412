"""Directory operation API routes."""

from typing import List

from fastapi import APIRouter, Depends, Query, Response, status

from vault.commands import FileManagerCommands
from vault.routes.dependencies import get_commands, unwrap
from vault.schemas.directories import (
    CreateDirectoryCommand,
    CreateDirectoryResponse,
    DeleteDirectoryCommand,
    GetDirectoryFilesCommand,
)
from vault.schemas.files import FileInfoResponse

router = APIRouter(prefix="/directories", tags=["Directories"])


@router.post("", response_model=CreateDirectoryResponse, status_code=status.HTTP_201_CREATED)
async def create_directory(
    request: CreateDirectoryCommand,
    commands: FileManagerCommands = Depends(get_commands),
):
    """
    Create a directory under parent_id, or under the root directory.

    Raises:
        - 400: Blank name or illegal characters
        - 404: Parent not found
        - 409: Path already exists
    """
    return unwrap(await commands.create_directory(request))


@router.get("")
async def get_directory_tree(
    nested: bool = Query(False, description="Return directories nested under their parents"),
    commands: FileManagerCommands = Depends(get_commands),
):
    """
    All directories with their direct file counts, flat and ordered by path
    unless nested=true.
    """
    if nested:
        return unwrap(await commands.get_nested_directory_tree())
    return unwrap(await commands.get_directory_tree())


@router.get("/{directory_id}/files", response_model=List[FileInfoResponse])
async def get_directory_files(
    directory_id: str,
    commands: FileManagerCommands = Depends(get_commands),
):
    return unwrap(
        await commands.get_directory_files(GetDirectoryFilesCommand(directory_id=directory_id))
    )


@router.delete("/{directory_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_directory(
    directory_id: str,
    commands: FileManagerCommands = Depends(get_commands),
):
    """
    Delete a directory with all subdirectories and files.

    Raises:
        - 404: Directory not found
    """
    unwrap(await commands.delete_directory(DeleteDirectoryCommand(directory_id=directory_id)))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
