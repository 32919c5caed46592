import logging
from contextlib import asynccontextmanager
from textwrap import dedent
from typing import Optional

import pydantic
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException

from file_manager.adapters.storage import BlobStore, S3BlobStore
from file_manager.config.settings import Settings, get_settings
from file_manager.errors import (
    FileManagerError,
    StorageBackendError,
    handle_broad_exceptions,
    handle_file_manager_errors,
    handle_http_exceptions,
    handle_pydantic_validation_errors,
    handle_request_validation_errors,
)
from file_manager.registry import FileRegistry
from file_manager.routers.files import router as files_router
from file_manager.routers.health import router as health_router
from file_manager.routers.pages import router as pages_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Make sure the bucket exists before serving; a failure here is logged, not fatal."""
    blob_store: BlobStore = app.state.blob_store
    try:
        blob_store.create_container_if_absent()
        logger.info(f"Bucket \"{app.state.settings.s3_bucket_name}\" is ready")
    except StorageBackendError as e:
        logger.error(f"Error initializing bucket: {e.message}")
    yield
    logger.info("Shutting down")


def create_app(settings: Optional[Settings] = None, blob_store: Optional[BlobStore] = None) -> FastAPI:
    """
    Create a FastAPI application.

    Raises:
        ConfigurationError: the storage credential is missing.
    """
    settings = settings or Settings()
    settings.require_storage_credentials()

    app = FastAPI(
        title="File Manager",
        summary="Upload, list, download and delete files in a private bucket",
        version="v1",
        description=dedent(
            """\
        | Endpoint | Notes |
        | --- | --- |
        | `POST /api/upload` | multipart field `file`; allowed: txt, pdf, png, jpg, jpeg, gif, doc, docx, xls, xlsx; max 10 MiB |
        | `GET /api/files` | every stored file, newest first |
        | `GET /api/download/{fileName}` | streams the file as an attachment |
        | `DELETE /api/files/{fileName}` | irreversible |
        """
        ),
        docs_url="/docs",
        generate_unique_id_function=custom_generate_unique_id,
        lifespan=lifespan,
    )

    blob_store = blob_store or S3BlobStore.from_settings(settings)
    app.state.settings = settings
    app.state.blob_store = blob_store
    app.state.registry = FileRegistry(blob_store)

    app.include_router(pages_router, tags=["pages"])
    app.include_router(files_router, prefix="/api", tags=["files"])
    app.include_router(health_router, tags=["health"])

    app.add_exception_handler(
        exc_class_or_status_code=FileManagerError,
        handler=handle_file_manager_errors,
    )
    app.add_exception_handler(
        exc_class_or_status_code=StarletteHTTPException,
        handler=handle_http_exceptions,
    )
    app.add_exception_handler(
        exc_class_or_status_code=RequestValidationError,
        handler=handle_request_validation_errors,
    )
    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.middleware("http")(handle_broad_exceptions)

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"


def create_app_from_env() -> FastAPI:
    """Factory for `uvicorn --factory`; settings come from the environment."""
    return create_app(get_settings())


if __name__ == "__main__":
    from file_manager.cli import cli

    cli(["serve"])
