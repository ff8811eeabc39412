"""Common schemas used across multiple commands and endpoints."""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ErrorResponse(BaseModel):
    """Response model for errors."""
    detail: str
    code: str


class CommandResponse(BaseModel, Generic[T]):
    """
    Uniform result of a boundary command.

    Exactly one of data/error is meaningful: success=True carries data
    (which may itself be None), success=False carries error and code.
    """
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    code: Optional[str] = None

    @classmethod
    def ok(cls, data: Optional[T] = None) -> "CommandResponse[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, code: str) -> "CommandResponse[T]":
        return cls(success=False, error=error, code=code)
