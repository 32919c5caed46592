"""Bucket-level setup: make sure the private bucket exists before serving traffic."""

import logging
from typing import TYPE_CHECKING, Optional

import boto3
from botocore.exceptions import ClientError

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

logger = logging.getLogger(__name__)


def bucket_exists(bucket_name: str, s3_client: Optional["S3Client"] = None) -> bool:
    s3_client = s3_client or boto3.client("s3")
    try:
        s3_client.head_bucket(Bucket=bucket_name)
        return True
    except ClientError as err:
        if err.response.get("Error", {}).get("Code") in {"404", "NoSuchBucket", "NotFound"}:
            return False
        raise


def create_private_bucket_if_absent(
    bucket_name: str,
    region: str,
    s3_client: Optional["S3Client"] = None,
) -> bool:
    """
    Create the bucket if it is missing and block all public access to it.

    :param bucket_name: The name of the S3 bucket.
    :param region: Region to create the bucket in.
    :param s3_client: An optional boto3 S3 client. If not provided, one will be created.

    :return: True if the bucket was created by this call.
    """
    s3_client = s3_client or boto3.client("s3")
    if bucket_exists(bucket_name, s3_client=s3_client):
        logger.info(f"Bucket '{bucket_name}' already exists")
        return False

    create_kwargs = {"Bucket": bucket_name}
    # us-east-1 rejects an explicit LocationConstraint
    if region != "us-east-1":
        create_kwargs["CreateBucketConfiguration"] = {"LocationConstraint": region}

    try:
        s3_client.create_bucket(**create_kwargs)
    except ClientError as err:
        if err.response.get("Error", {}).get("Code") != "BucketAlreadyOwnedByYou":
            raise
        return False

    s3_client.put_public_access_block(
        Bucket=bucket_name,
        PublicAccessBlockConfiguration={
            "BlockPublicAcls": True,
            "IgnorePublicAcls": True,
            "BlockPublicPolicy": True,
            "RestrictPublicBuckets": True,
        },
    )
    logger.info(f"Created private bucket '{bucket_name}' in {region}")
    return True
