"""API routes package."""

from vault.routes.directory_routes import router as directory_router
from vault.routes.file_routes import router as file_router
from vault.routes.system_routes import router as system_router

__all__ = ["directory_router", "file_router", "system_router"]
