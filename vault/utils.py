"""Utility helper functions for the file manager."""

import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

from common.exceptions import CorruptionError


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def now_local() -> datetime:
    """
    Current local time with an explicit UTC offset.
    """
    return datetime.now().astimezone()


def format_timestamp(value: datetime) -> str:
    """
    Encode an aware datetime as ISO-8601 text with its UTC offset.

    Args:
        value: Timezone-aware datetime

    Returns:
        Text such as 2024-03-07T10:15:30.123456+01:00
    """
    if value.tzinfo is None:
        raise ValueError("Refusing to store a naive datetime")
    return value.isoformat()


def parse_timestamp(raw: str, column: str = "timestamp") -> datetime:
    """
    Decode a stored timestamp.

    Args:
        raw: Text previously produced by format_timestamp
        column: Column name used in the error message

    Returns:
        Timezone-aware datetime

    Raises:
        CorruptionError: If the text does not parse or lacks a UTC offset
    """
    try:
        value = datetime.fromisoformat(raw)
    except (TypeError, ValueError) as e:
        raise CorruptionError(f"Unparsable {column} value {raw!r}: {e}") from e

    if value.tzinfo is None:
        raise CorruptionError(f"Stored {column} value {raw!r} has no timezone offset")

    return value


def build_directory_path(name: str, parent_path: Optional[str]) -> str:
    """
    Materialized path for a directory.

    Args:
        name: Directory name
        parent_path: Parent's materialized path, or None for a top-level directory

    Returns:
        parent_path + "/" + name (one slash), or "/" + name without a parent
    """
    if parent_path is None:
        return f"/{name}"
    return f"{parent_path.rstrip('/')}/{name}"


def mirror_relative_path(logical_path: str, mirror_root: str) -> Path:
    """
    Physical location (relative to the storage root) mirroring a logical path.

    Args:
        logical_path: Materialized directory path such as /docs/reports
        mirror_root: Name of the mirror subtree under the storage root

    Returns:
        Relative Path such as directories/docs/reports
    """
    relative = logical_path.strip('/')
    if not relative:
        return Path(mirror_root)
    return Path(mirror_root) / relative
