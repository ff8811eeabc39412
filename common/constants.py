"""Project-wide constants (chunk sizes, limits, storage layout)."""

STREAM_CHUNK_SIZE_BYTES: int = 64 * 1024  # 64 KiB read/write piece for streaming ingestion

DEFAULT_MAX_FILE_SIZE_BYTES: int = 100 * 1024 * 1024  # 100 MiB

DEFAULT_SUPPORTED_FILE_TYPES = (
    # images
    "jpg", "jpeg", "png", "gif", "bmp", "webp", "svg", "tiff", "tga",
    # documents
    "pdf", "txt", "md", "doc", "docx",
    # archives
    "zip", "rar", "7z",
)

DEFAULT_MIME_TYPE = "application/octet-stream"

ROOT_DIRECTORY_NAME = "Root"
ROOT_DIRECTORY_PATH = "/"

# Physical mirror of the logical directory tree, kept apart from the date shards.
DIRECTORY_MIRROR_SUBDIR = "directories"

MAX_BATCH_UPLOAD_FILES = 50
MIN_SEARCH_QUERY_LENGTH = 2

INVALID_DIRECTORY_NAME_CHARS = ('/', '\\', ':', '*', '?', '"', '<', '>', '|', '\x00')
