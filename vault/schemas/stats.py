"""Pydantic schema for storage statistics."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from common.types import StorageStats


class StorageStatsResponse(BaseModel):
    """Response model for aggregate storage figures."""
    total_files: int
    total_directories: int
    total_size: int
    largest_file_size: int
    most_recent_upload: Optional[datetime] = None

    @classmethod
    def from_stats(cls, stats: StorageStats) -> "StorageStatsResponse":
        return cls(
            total_files=stats.total_files,
            total_directories=stats.total_directories,
            total_size=stats.total_size,
            largest_file_size=stats.largest_file_size,
            most_recent_upload=stats.most_recent_upload,
        )
