"""File Manager: upload, list, download and delete files kept in a private S3 bucket."""
