"""
File registry: naming and validation rules layered over a blob store.

A stored file's key is ``<upload epoch millis>-<original name>``. The original
name is also kept as object metadata so listing does not have to guess it back
from the key; keys written without that metadata fall back to prefix stripping.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from urllib.parse import quote, unquote

from file_manager.adapters.storage import BlobData, BlobDownload, BlobMissingError, BlobStore
from file_manager.errors import (
    FileTooLargeError,
    StoredFileNotFoundError,
    UnsupportedFileTypeError,
)
from file_manager.utils.decorators import log_execution_time

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = ("txt", "pdf", "png", "jpg", "jpeg", "gif", "doc", "docx", "xls", "xlsx")
MAX_UPLOAD_SIZE_BYTES = 10 * 1024 * 1024

ORIGINAL_NAME_METADATA_KEY = "original-name"
DOWNLOAD_PATH_PREFIX = "/api/download/"


@dataclass(frozen=True)
class RegisteredFile:
    """Confirmation echoed back after a successful upload."""

    key: str
    original_name: str
    size: int
    content_type: str


@dataclass(frozen=True)
class StoredFile:
    key: str
    original_name: str
    size: int
    content_type: str
    last_modified: datetime

    @property
    def url(self) -> str:
        """API path the file can be downloaded from (the bucket itself is private)."""
        return download_path(self.key)


def download_path(key: str) -> str:
    return DOWNLOAD_PATH_PREFIX + quote(key, safe="")


def file_extension(name: str) -> str:
    """Lowercased text after the last dot, or "" when there is none."""
    _, dot, extension = name.rpartition(".")
    return extension.lower() if dot else ""


def client_file_name(name: str) -> str:
    """Drop any directory part a client sent along with the file name."""
    return name.replace("\\", "/").rsplit("/", 1)[-1]


def validate_candidate(name: str, declared_size: int) -> None:
    """
    Check an upload candidate against the allow-list and the size cap.

    Returns normally when the candidate is acceptable.

    Raises:
        FileTooLargeError: declared size exceeds MAX_UPLOAD_SIZE_BYTES, whatever the extension.
        UnsupportedFileTypeError: extension is not allow-listed.
    """
    if declared_size > MAX_UPLOAD_SIZE_BYTES:
        raise FileTooLargeError(declared_size, MAX_UPLOAD_SIZE_BYTES)
    extension = file_extension(name)
    if extension not in ALLOWED_EXTENSIONS:
        raise UnsupportedFileTypeError(extension, ALLOWED_EXTENSIONS)


def current_epoch_millis() -> int:
    return time.time_ns() // 1_000_000


def build_storage_key(original_name: str, now_ms: Optional[int] = None) -> str:
    """`<epoch millis>-<name>`; two uploads of one name in the same millisecond collide."""
    if now_ms is None:
        now_ms = current_epoch_millis()
    return f"{now_ms}-{client_file_name(original_name)}"


def original_name_from_key(key: str) -> str:
    """
    Recover the original file name by stripping the timestamp prefix.

    Keys without a numeric prefix are returned unchanged.
    """
    prefix, dash, rest = key.partition("-")
    if dash and prefix.isdigit():
        return rest
    return key


class FileRegistry:
    """Upload, list, fetch and remove files in a blob store."""

    def __init__(self, blob_store: BlobStore):
        self.blob_store = blob_store

    def register(
        self,
        original_name: str,
        data: BlobData,
        size: int,
        content_type: Optional[str] = None,
    ) -> RegisteredFile:
        """
        Validate and store an upload under a freshly built key.

        Validation happens before anything is written, so a rejected file
        leaves no trace in the store. Backend errors propagate unchanged.
        """
        original_name = client_file_name(original_name)
        validate_candidate(original_name, size)

        key = build_storage_key(original_name)
        content_type = content_type or "application/octet-stream"
        self.blob_store.put(
            key,
            data,
            content_type,
            metadata={ORIGINAL_NAME_METADATA_KEY: quote(original_name, safe="")},
        )
        logger.info(f"Registered '{original_name}' as '{key}' ({size} bytes, {content_type})")
        return RegisteredFile(key=key, original_name=original_name, size=size, content_type=content_type)

    @log_execution_time
    def list_files(self) -> List[StoredFile]:
        """
        Every stored file with backend-sourced size, type and timestamp.

        One enumeration plus one property fetch per key. Keys deleted while
        the listing runs are skipped; any other backend failure aborts it.
        Sorted newest first, then by key.
        """
        files = []
        for key in self.blob_store.list_keys():
            try:
                properties = self.blob_store.get_properties(key)
            except BlobMissingError:
                logger.debug(f"'{key}' disappeared during listing, skipping")
                continue

            stored_name = properties.metadata.get(ORIGINAL_NAME_METADATA_KEY)
            files.append(
                StoredFile(
                    key=key,
                    original_name=unquote(stored_name) if stored_name else original_name_from_key(key),
                    size=properties.size,
                    content_type=properties.content_type,
                    last_modified=properties.last_modified,
                )
            )

        files.sort(key=lambda f: f.key)
        files.sort(key=lambda f: f.last_modified, reverse=True)
        return files

    def fetch(self, key: str) -> BlobDownload:
        """
        Open a stored file for streaming.

        Raises:
            StoredFileNotFoundError: nothing is stored under `key`.
        """
        if not self.blob_store.exists(key):
            raise StoredFileNotFoundError(key)
        try:
            return self.blob_store.get(key)
        except BlobMissingError as e:
            raise StoredFileNotFoundError(key) from e

    def remove(self, key: str) -> None:
        """
        Delete a stored file irreversibly.

        Raises:
            StoredFileNotFoundError: nothing is stored under `key`.
        """
        if not self.blob_store.exists(key):
            raise StoredFileNotFoundError(key)
        self.blob_store.delete(key)
        logger.info(f"Removed '{key}'")
