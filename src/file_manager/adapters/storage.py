"""
Blob store adapter.

`BlobStore` is the narrow contract the file registry depends on; `S3BlobStore`
implements it on top of the boto3 helpers in `file_manager.s3`. One adapter is
built per process (see `file_manager.main`) and handed to the registry.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, BinaryIO, Dict, Iterator, Optional, Union

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError

from file_manager.errors import StorageBackendError
from file_manager.s3.buckets import bucket_exists, create_private_bucket_if_absent
from file_manager.s3.delete_objects import delete_s3_object
from file_manager.s3.read_objects import (
    fetch_s3_object,
    fetch_s3_object_metadata,
    is_missing_object_error,
    iter_s3_object_keys,
    object_exists_in_s3,
)
from file_manager.s3.write_objects import DEFAULT_CONTENT_TYPE, upload_s3_object

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

    from file_manager.config.settings import Settings

logger = logging.getLogger(__name__)

DOWNLOAD_CHUNK_SIZE = 64 * 1024

BlobData = Union[bytes, BinaryIO]


@dataclass(frozen=True)
class BlobProperties:
    """Backend-sourced facts about a stored object."""

    size: int
    content_type: str
    last_modified: datetime
    metadata: Dict[str, str] = field(default_factory=dict)


@dataclass
class BlobDownload:
    """An open object body plus the headers needed to relay it."""

    stream: Iterator[bytes]
    content_type: str
    content_length: int
    _body: Optional[object] = field(default=None, repr=False)

    def close(self) -> None:
        """Release the underlying connection; safe to call more than once."""
        if self._body is not None:
            self._body.close()


class BlobMissingError(Exception):
    """The key vanished between two backend calls."""

    def __init__(self, key: str):
        super().__init__(key)
        self.key = key


class BlobStore(ABC):
    """Storage primitives the file registry relies on."""

    @abstractmethod
    def create_container_if_absent(self) -> None:
        """Create the (private) container if it does not exist yet."""

    @abstractmethod
    def put(
        self,
        key: str,
        data: BlobData,
        content_type: Optional[str],
        metadata: Optional[Dict[str, str]] = None,
    ) -> None:
        """Write the full object under `key`, replacing any existing one."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Whether an object is stored under `key`."""

    @abstractmethod
    def get_properties(self, key: str) -> BlobProperties:
        """
        Size, content type and last-modified time of an object.

        Raises:
            BlobMissingError: if the key does not exist.
        """

    @abstractmethod
    def get(self, key: str) -> BlobDownload:
        """Open the object for streaming."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the object irreversibly."""

    @abstractmethod
    def list_keys(self) -> Iterator[str]:
        """Every key in the container, in backend order."""

    @abstractmethod
    def ping(self) -> bool:
        """Cheap reachability check for health reporting."""


class S3BlobStore(BlobStore):
    """BlobStore backed by one S3 bucket."""

    def __init__(self, bucket_name: str, s3_client: "S3Client", region: str = "us-east-1"):
        self.bucket_name = bucket_name
        self.region = region
        self._s3_client = s3_client

    @classmethod
    def from_settings(cls, settings: "Settings") -> "S3BlobStore":
        client_kwargs = {"region_name": settings.aws_region}
        if settings.aws_access_key_id:
            client_kwargs["aws_access_key_id"] = settings.aws_access_key_id
        if settings.aws_secret_access_key:
            client_kwargs["aws_secret_access_key"] = settings.aws_secret_access_key
        if settings.aws_endpoint_url:
            client_kwargs["endpoint_url"] = settings.aws_endpoint_url

        logger.info(f"Creating S3 client for bucket '{settings.s3_bucket_name}'")
        logger.info(f"  Region: {settings.aws_region}")
        logger.info(f"  Endpoint: {settings.aws_endpoint_url or 'default'}")
        s3_client = boto3.client("s3", **client_kwargs)
        return cls(settings.s3_bucket_name, s3_client, region=settings.aws_region)

    def create_container_if_absent(self) -> None:
        try:
            create_private_bucket_if_absent(self.bucket_name, self.region, s3_client=self._s3_client)
        except (BotoCoreError, ClientError) as e:
            raise StorageBackendError("Bucket initialization", e) from e

    def put(
        self,
        key: str,
        data: BlobData,
        content_type: Optional[str],
        metadata: Optional[Dict[str, str]] = None,
    ) -> None:
        try:
            upload_s3_object(
                bucket_name=self.bucket_name,
                object_key=key,
                file_content=data,
                content_type=content_type,
                metadata=metadata,
                s3_client=self._s3_client,
            )
        except (BotoCoreError, ClientError, S3UploadFailedError) as e:
            logger.error(f"Error uploading '{key}' to S3: {str(e)}")
            raise StorageBackendError("Upload", e, key=key) from e
        logger.debug(f"Uploaded '{key}' to bucket '{self.bucket_name}'")

    def exists(self, key: str) -> bool:
        try:
            return object_exists_in_s3(self.bucket_name, key, s3_client=self._s3_client)
        except (BotoCoreError, ClientError) as e:
            raise StorageBackendError("Existence check", e, key=key) from e

    def get_properties(self, key: str) -> BlobProperties:
        try:
            head = fetch_s3_object_metadata(self.bucket_name, key, s3_client=self._s3_client)
        except ClientError as e:
            if is_missing_object_error(e):
                raise BlobMissingError(key) from e
            raise StorageBackendError("Property fetch", e, key=key) from e
        except BotoCoreError as e:
            raise StorageBackendError("Property fetch", e, key=key) from e

        return BlobProperties(
            size=head["ContentLength"],
            content_type=head.get("ContentType") or DEFAULT_CONTENT_TYPE,
            last_modified=head["LastModified"],
            metadata=head.get("Metadata", {}),
        )

    def get(self, key: str) -> BlobDownload:
        try:
            response = fetch_s3_object(self.bucket_name, key, s3_client=self._s3_client)
        except ClientError as e:
            if is_missing_object_error(e):
                raise BlobMissingError(key) from e
            raise StorageBackendError("Download", e, key=key) from e
        except BotoCoreError as e:
            raise StorageBackendError("Download", e, key=key) from e

        body = response["Body"]
        return BlobDownload(
            stream=body.iter_chunks(chunk_size=DOWNLOAD_CHUNK_SIZE),
            content_type=response.get("ContentType") or DEFAULT_CONTENT_TYPE,
            content_length=response["ContentLength"],
            _body=body,
        )

    def delete(self, key: str) -> None:
        try:
            delete_s3_object(self.bucket_name, key, s3_client=self._s3_client)
        except (BotoCoreError, ClientError) as e:
            raise StorageBackendError("Delete", e, key=key) from e

    def list_keys(self) -> Iterator[str]:
        try:
            yield from iter_s3_object_keys(self.bucket_name, s3_client=self._s3_client)
        except (BotoCoreError, ClientError) as e:
            raise StorageBackendError("Listing", e) from e

    def ping(self) -> bool:
        try:
            return bucket_exists(self.bucket_name, s3_client=self._s3_client)
        except (BotoCoreError, ClientError) as e:
            logger.warning(f"S3 health check failed: {str(e)}")
            return False
