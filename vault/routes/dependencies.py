"""Shared route helpers: commands lookup and response unwrapping."""

from typing import Optional, TypeVar

from fastapi import Request, status

from vault.commands import FileManagerCommands
from vault.schemas.common import CommandResponse

T = TypeVar("T")

STATUS_BY_CODE = {
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "CONFLICT": status.HTTP_409_CONFLICT,
    "UNSUPPORTED_FILE_TYPE": status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    "SIZE_EXCEEDED": status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    "INVALID_INPUT": status.HTTP_400_BAD_REQUEST,
    "PARTIAL_FAILURE": status.HTTP_400_BAD_REQUEST,
    "STORAGE_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "CORRUPTION": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "INTERNAL_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class CommandFailedError(Exception):
    """
    Raised by routes when a command returns a failed response.
    """

    def __init__(self, detail: str, code: str):
        self.detail = detail
        self.code = code
        super().__init__(detail)

    @property
    def status_code(self) -> int:
        return STATUS_BY_CODE.get(self.code, status.HTTP_500_INTERNAL_SERVER_ERROR)


def get_commands(request: Request) -> FileManagerCommands:
    return request.app.state.commands


def unwrap(response: CommandResponse[T]) -> Optional[T]:
    """
    Return the payload of a successful response.

    Raises:
        CommandFailedError: If the command failed
    """
    if not response.success:
        raise CommandFailedError(response.error or "Unknown error", response.code or "INTERNAL_ERROR")
    return response.data
