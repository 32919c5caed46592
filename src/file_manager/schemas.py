####################################
# --- Request/response schemas --- #
####################################

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from file_manager.registry import RegisteredFile, StoredFile


class ApiModel(BaseModel):
    """JSON keys go out in camelCase, the shape the browser client reads."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UploadFileResponse(ApiModel):
    """Response model for `POST /api/upload`."""
    success: bool = True
    message: str = "File uploaded successfully"
    file_name: str = Field(
        description="The storage key assigned to the file.",
        json_schema_extra={"example": "1700000000000-invoice.pdf"},
    )
    original_name: str = Field(description="The file name as uploaded.")
    size: int = Field(description="The size of the file in bytes.")
    content_type: str = Field(description="The MIME type declared by the uploader.")

    @classmethod
    def from_registered(cls, registered: RegisteredFile) -> "UploadFileResponse":
        return cls(
            file_name=registered.key,
            original_name=registered.original_name,
            size=registered.size,
            content_type=registered.content_type,
        )


class FileMetadata(ApiModel):
    """Metadata of a stored file."""
    name: str = Field(
        description="The storage key of the file.",
        json_schema_extra={"example": "1700000000000-invoice.pdf"},
    )
    original_name: str = Field(json_schema_extra={"example": "invoice.pdf"})
    size: int = Field(description="The size of the file in bytes.")
    content_type: str
    last_modified: datetime = Field(description="The last modified date of the file.")
    url: str = Field(description="Path the file can be downloaded from.")

    @classmethod
    def from_stored(cls, stored: StoredFile) -> "FileMetadata":
        return cls(
            name=stored.key,
            original_name=stored.original_name,
            size=stored.size,
            content_type=stored.content_type,
            last_modified=stored.last_modified,
            url=stored.url,
        )


class GetFilesResponse(ApiModel):
    """Response model for `GET /api/files`."""
    success: bool = True
    files: List[FileMetadata]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "files": [
                    {
                        "name": "1700000000000-invoice.pdf",
                        "originalName": "invoice.pdf",
                        "size": 512,
                        "contentType": "application/pdf",
                        "lastModified": "2024-01-01T00:00:00Z",
                        "url": "/api/download/1700000000000-invoice.pdf",
                    }
                ],
            }
        }
    )


class DeleteFileResponse(ApiModel):
    """Response model for `DELETE /api/files/:fileName`."""
    success: bool = True
    message: str = "File deleted successfully"


class ErrorResponse(ApiModel):
    """Shape of every error body."""
    success: bool = False
    error: str


class HealthResponse(ApiModel):
    status: str
    bucket: str
    components: dict
