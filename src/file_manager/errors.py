"""Error taxonomy for the File Manager and the handlers that render it as JSON."""

import logging
import traceback
from typing import Iterable, Optional

import pydantic
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class FileManagerError(Exception):
    """Base class for every error this application raises on purpose."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(FileManagerError):
    """Startup-time misconfiguration. Fatal; never rendered to clients."""


class FileValidationError(FileManagerError):
    """The upload candidate was rejected before anything was written."""

    status_code = status.HTTP_400_BAD_REQUEST


class NoFileUploadedError(FileValidationError):
    def __init__(self):
        super().__init__("No file uploaded")


class UnsupportedFileTypeError(FileValidationError):
    """The file extension is not on the allow-list."""

    def __init__(self, extension: str, allowed_extensions: Iterable[str]):
        self.extension = extension
        self.allowed_extensions = list(allowed_extensions)
        shown = f".{extension}" if extension else "(none)"
        allowed = ", ".join(f".{ext}" for ext in self.allowed_extensions)
        super().__init__(f"File type {shown} is not allowed. Allowed types: {allowed}")


class FileTooLargeError(FileValidationError):
    def __init__(self, size: int, max_size: int):
        self.size = size
        self.max_size = max_size
        super().__init__(f"File too large. Maximum size is {max_size // (1024 * 1024)}MB")


class StoredFileNotFoundError(FileManagerError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, key: str):
        self.key = key
        super().__init__("File not found")


class StorageBackendError(FileManagerError):
    """Any failure reported by the object store (network, auth, quota...)."""

    def __init__(self, operation: str, cause: Exception, key: Optional[str] = None):
        self.operation = operation
        self.key = key
        self.cause = cause
        target = f" for '{key}'" if key else ""
        super().__init__(f"{operation} failed{target}: {cause}")


def error_response(status_code: int, message: str) -> JSONResponse:
    """Every error leaves the API in the same `{success, error}` shape."""
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
    )


async def handle_file_manager_errors(request: Request, exc: FileManagerError) -> JSONResponse:
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
    return error_response(exc.status_code, exc.message)


async def handle_http_exceptions(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Framework errors (unknown path, wrong method) in the same shape as ours."""
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    response = error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def handle_request_validation_errors(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed requests (e.g. a non-file value in the `file` field) are a 400."""
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    logger.info(f"{request.method} {request.url.path} invalid request: {message}")
    return error_response(status.HTTP_400_BAD_REQUEST, message)


async def handle_pydantic_validation_errors(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    """Schema errors raised inside handlers are our bug, not the client's."""
    logger.error(f"Response validation failed for {request.url.path}: {exc}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


async def handle_broad_exceptions(request: Request, call_next):
    """Catch anything the exception handlers did not and return a JSON 500."""
    try:
        return await call_next(request)
    except Exception as e:
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {str(e)}")
        logger.error(f"Traceback: {traceback.format_exc()}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e) or "Internal server error")
