"""Exception hierarchy shared by the metadata store, content store and service."""


class FileManagerException(Exception):
    """
    Base exception class for all file-manager errors.
    """
    code = "INTERNAL_ERROR"


class NotFoundError(FileManagerException):
    """
    Raised when a file or directory id, or a physical path, does not exist.
    """
    code = "NOT_FOUND"


class ConflictError(FileManagerException):
    """
    Raised when a directory path or generated file name already exists.
    """
    code = "CONFLICT"


class UnsupportedFileTypeError(FileManagerException):
    """
    Raised when a file extension is not in the configured allow-list.
    """
    code = "UNSUPPORTED_FILE_TYPE"

    def __init__(self, file_type: str):
        self.file_type = file_type
        super().__init__(f"Unsupported file type: {file_type}")


class SizeExceededError(FileManagerException):
    """
    Raised when a payload is larger than the configured maximum file size.
    """
    code = "SIZE_EXCEEDED"

    def __init__(self, actual: int, limit: int):
        self.actual = actual
        self.limit = limit
        super().__init__(f"File size exceeds limit: {actual} bytes (max: {limit} bytes)")


class StorageError(FileManagerException):
    """
    Raised when the disk or the database layer fails.
    """
    code = "STORAGE_ERROR"


class InvalidInputError(FileManagerException):
    """
    Raised for empty names or ids, illegal characters, or empty payloads.
    """
    code = "INVALID_INPUT"


class CorruptionError(FileManagerException):
    """
    Raised when a persisted row or timestamp cannot be parsed.
    """
    code = "CORRUPTION"
