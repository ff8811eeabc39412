"""Entry point for the file manager HTTP service."""

import time
import uuid
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from blobstore.content_store import ContentStore
from common.logging_config import get_logger, setup_logging
from vault.commands import FileManagerCommands
from vault.config import VAULT_HOST, VAULT_PORT, FileManagerConfig
from vault.database import init_database
from vault.repositories import DirectoryRepository, FileRepository
from vault.routes import directory_router, file_router, system_router
from vault.routes.dependencies import CommandFailedError
from vault.schemas.common import ErrorResponse
from vault.services import FileManagerService

logger = get_logger("vault")


def build_service(config: FileManagerConfig) -> FileManagerService:
    """
    Prepare directories and schema, then wire the stores into a service.

    Raises:
        StorageError: If the data directories or the database cannot be initialized
    """
    config.ensure_directories()
    init_database(config.database_path)

    return FileManagerService(
        config=config,
        directory_repo=DirectoryRepository(config.database_path),
        file_repo=FileRepository(config.database_path),
        content_store=ContentStore(config.storage_path),
    )


def create_app(config: Optional[FileManagerConfig] = None) -> FastAPI:
    """
    Build the FastAPI application around one FileManagerCommands instance.

    Args:
        config: Settings to use; read from FILEVAULT_* variables when omitted
    """
    setup_logging('vault')
    setup_logging('blobstore')

    config = config or FileManagerConfig.from_env()
    service = build_service(config)

    app = FastAPI(
        title="FileVault",
        description="Hierarchical file manager backed by SQLite and local disk",
        version="1.0.0"
    )
    app.state.config = config
    app.state.commands = FileManagerCommands(service)

    logger.info(
        f"File manager ready: database={config.database_path} storage={config.storage_path}"
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """
        Middleware to log all HTTP requests and responses.
        """
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()

        logger.info(
            f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
        )

        response = await call_next(request)

        duration = time.time() - start_time

        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
        )

        response.headers["X-Request-ID"] = request_id

        return response

    @app.on_event("shutdown")
    async def shutdown_event():
        """
        Let outstanding compensation tasks finish before exiting.
        """
        logger.info("File manager shutting down...")
        await service.wait_for_background_tasks()
        logger.info("Background tasks drained")

    @app.exception_handler(CommandFailedError)
    async def command_failed_handler(request: Request, exc: CommandFailedError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        if exc.status_code >= 500:
            logger.error(
                f"Command failed: {exc} [code={exc.code}] [request_id={request_id}] path={request.url.path}"
            )
        else:
            logger.warning(
                f"Command failed: {exc} [code={exc.code}] [request_id={request_id}] path={request.url.path}"
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(detail=exc.detail, code=exc.code).model_dump()
        )

    app.include_router(file_router)
    app.include_router(directory_router)
    app.include_router(system_router)

    @app.get("/health")
    async def health_check():
        """
        Returns 200 if the service is alive.
        """
        return {"status": "healthy", "service": "vault"}

    return app


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "vault.main:create_app",
        factory=True,
        host=VAULT_HOST,
        port=VAULT_PORT,
    )


if __name__ == "__main__":
    main()
