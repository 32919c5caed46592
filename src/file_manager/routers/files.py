import logging
import os
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Path, UploadFile, status
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from file_manager.dependencies import get_file_registry
from file_manager.errors import NoFileUploadedError
from file_manager.registry import FileRegistry
from file_manager.schemas import (
    DeleteFileResponse,
    ErrorResponse,
    FileMetadata,
    GetFilesResponse,
    UploadFileResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Route functions are plain `def`: boto3 blocks, so FastAPI runs them in its threadpool.


@router.post(
    "/upload",
    response_model=UploadFileResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {
            "model": ErrorResponse,
            "description": "No file, unsupported file type, or file too large.",
        },
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
def upload_file(
    file: Optional[UploadFile] = File(None, description="The file to upload"),
    registry: FileRegistry = Depends(get_file_registry),
) -> UploadFileResponse:
    """
    Upload a file.

    The file is validated against the extension allow-list and the 10 MiB cap
    before anything is written, then stored under `<epoch millis>-<name>`.
    """
    if file is None or not file.filename:
        raise NoFileUploadedError()

    size = _upload_size(file)
    logger.info(f"Upload received: '{file.filename}' ({size} bytes, {file.content_type})")

    registered = registry.register(
        original_name=file.filename,
        data=file.file,
        size=size,
        content_type=file.content_type,
    )
    return UploadFileResponse.from_registered(registered)


@router.get(
    "/files",
    response_model=GetFilesResponse,
    responses={status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse}},
)
def list_files(registry: FileRegistry = Depends(get_file_registry)) -> GetFilesResponse:
    """List every stored file, newest first."""
    files = registry.list_files()
    logger.info(f"Listed {len(files)} file(s)")
    return GetFilesResponse(files=[FileMetadata.from_stored(stored) for stored in files])


@router.get(
    "/download/{file_name}",
    response_class=StreamingResponse,
    responses={
        status.HTTP_404_NOT_FOUND: {
            "model": ErrorResponse,
            "description": "File not found for the given `file_name`.",
        },
        status.HTTP_200_OK: {
            "description": "The file content.",
            "content": {
                "application/octet-stream": {
                    "schema": {"type": "string", "format": "binary"},
                },
            },
        },
    },
)
def download_file(
    file_name: str = Path(..., description="The storage key of the file"),
    registry: FileRegistry = Depends(get_file_registry),
) -> StreamingResponse:
    """Stream a stored file back as an attachment."""
    download = registry.fetch(file_name)
    logger.info(f"Streaming '{file_name}' ({download.content_length} bytes)")
    return StreamingResponse(
        download.stream,
        media_type=download.content_type,
        headers={
            "Content-Disposition": content_disposition(file_name),
            "Content-Length": str(download.content_length),
        },
        # runs on completion and on client disconnect alike
        background=BackgroundTask(download.close),
    )


@router.delete(
    "/files/{file_name}",
    response_model=DeleteFileResponse,
    responses={
        status.HTTP_404_NOT_FOUND: {
            "model": ErrorResponse,
            "description": "File not found for the given `file_name`.",
        },
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
def delete_file(
    file_name: str = Path(..., description="The storage key of the file"),
    registry: FileRegistry = Depends(get_file_registry),
) -> DeleteFileResponse:
    """Delete a stored file. This cannot be undone."""
    registry.remove(file_name)
    return DeleteFileResponse()


def content_disposition(file_name: str) -> str:
    """
    `attachment; filename="<key>"`, plus an RFC 5987 `filename*` when the key
    is not plain ASCII (HTTP headers are latin-1 on the wire).
    """
    ascii_name = file_name.encode("ascii", "replace").decode("ascii").replace('"', "'")
    header = f'attachment; filename="{ascii_name}"'
    if ascii_name != file_name:
        header += f"; filename*=UTF-8''{quote(file_name, safe='')}"
    return header


def _upload_size(file: UploadFile) -> int:
    if file.size is not None:
        return file.size
    file.file.seek(0, os.SEEK_END)
    size = file.file.tell()
    file.file.seek(0)
    return size
