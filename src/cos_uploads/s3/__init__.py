"""Thin functions over the boto3 S3 client used by the storage engine."""
