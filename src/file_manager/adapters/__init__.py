"""
Adapter layer for the File Manager.

Contains the blob store contract and its S3 implementation.
"""
