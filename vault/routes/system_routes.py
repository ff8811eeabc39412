"""Storage statistics and file-type validation routes."""

from fastapi import APIRouter, Depends, Query

from vault.commands import FileManagerCommands
from vault.routes.dependencies import get_commands, unwrap
from vault.schemas.files import ValidateFileTypeCommand
from vault.schemas.stats import StorageStatsResponse

router = APIRouter(tags=["System"])


@router.get("/stats", response_model=StorageStatsResponse)
async def get_storage_stats(commands: FileManagerCommands = Depends(get_commands)):
    return unwrap(await commands.get_storage_stats())


@router.get("/file-types/validate")
async def validate_file_type(
    filename: str = Query(...),
    commands: FileManagerCommands = Depends(get_commands),
):
    supported = unwrap(await commands.validate_file_type(ValidateFileTypeCommand(filename=filename)))
    return {"filename": filename, "supported": supported}
