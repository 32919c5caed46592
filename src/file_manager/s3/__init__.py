"""Thin boto3 wrappers for the S3 calls the blob store adapter is built from."""
