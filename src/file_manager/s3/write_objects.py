"""Functions for writing objects to an S3 bucket--the "C" and "U" in CRUD."""

import io
from typing import TYPE_CHECKING, BinaryIO, Dict, Optional, Union

import boto3

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def upload_s3_object(
    bucket_name: str,
    object_key: str,
    file_content: Union[bytes, BinaryIO],
    content_type: Optional[str] = None,
    metadata: Optional[Dict[str, str]] = None,
    s3_client: Optional["S3Client"] = None,
) -> None:
    """
    Upload a file to an S3 bucket.

    File objects are streamed through the managed transfer (multipart for
    large bodies), so the object only becomes visible once it is complete.

    :param bucket_name: The name of the S3 bucket.
    :param object_key: path to the object in the S3 bucket.
    :param file_content: The content of the file to upload, as bytes or a readable binary file object.
    :param content_type: The MIME type of the file, e.g. "text/plain" for a text file.
    :param metadata: Optional user metadata stored alongside the object (ASCII values).
    :param s3_client: An optional boto3 S3 client. If not provided, one will be created.
    """
    content_type = content_type or DEFAULT_CONTENT_TYPE
    s3_client = s3_client or boto3.client("s3")
    if isinstance(file_content, (bytes, bytearray)):
        file_content = io.BytesIO(file_content)

    extra_args = {"ContentType": content_type}
    if metadata:
        extra_args["Metadata"] = metadata

    s3_client.upload_fileobj(
        Fileobj=file_content,
        Bucket=bucket_name,
        Key=object_key,
        ExtraArgs=extra_args,
    )
