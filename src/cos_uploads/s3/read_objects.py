"""Functions for reading object metadata from an S3 bucket--the "R" in CRUD."""

from typing import Optional

import boto3

from cos_uploads.s3.client import CLIENT_ERRORS

try:
    from mypy_boto3_s3 import S3Client
    from mypy_boto3_s3.type_defs import HeadObjectOutputTypeDef
except ImportError:
    ...


def fetch_s3_object_metadata(
    bucket_name: str,
    object_key: str,
    s3_client: Optional["S3Client"] = None,
) -> "HeadObjectOutputTypeDef":
    """
    Fetch the metadata (ETag, ContentLength, ContentType...) of an object.

    :param bucket_name: The name of the S3 bucket.
    :param object_key: path to the object in the S3 bucket.
    :param s3_client: An optional boto3 S3 client. If not provided, one will be created.
    """
    s3_client = s3_client or boto3.client("s3")
    return s3_client.head_object(Bucket=bucket_name, Key=object_key)


def object_exists_in_s3(
    bucket_name: str,
    object_key: str,
    s3_client: Optional["S3Client"] = None,
) -> bool:
    """Check if an object exists in the S3 bucket using head_object."""
    try:
        fetch_s3_object_metadata(bucket_name, object_key, s3_client=s3_client)
        return True
    except CLIENT_ERRORS as err:
        error_code = err.response.get("Error", {}).get("Code")
        if error_code in ("404", "NoSuchKey", "NotFound"):
            return False
        raise
