"""Functions for writing objects to an S3 bucket--the "C" and "U" in CRUD."""

from typing import BinaryIO, Callable, Optional

import boto3

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...


def upload_s3_object_stream(
    bucket_name: str,
    object_key: str,
    file_stream: BinaryIO,
    content_type: Optional[str] = None,
    s3_client: Optional["S3Client"] = None,
    callback: Optional[Callable[[int], None]] = None,
) -> None:
    """
    Stream a file-like object into an S3 bucket.

    The transfer manager switches to a multipart upload for large streams,
    so the body never has to be read into memory in one piece.

    :param bucket_name: The name of the S3 bucket.
    :param object_key: path to the object in the S3 bucket.
    :param file_stream: A readable binary stream with the file content.
    :param content_type: The MIME type of the file, e.g. "text/plain" for a text file.
    :param s3_client: An optional boto3 S3 client. If not provided, one will be created.
    :param callback: Called with the number of bytes transferred since the last call.
    """
    content_type = content_type or "application/octet-stream"
    s3_client = s3_client or boto3.client("s3")
    s3_client.upload_fileobj(
        Fileobj=file_stream,
        Bucket=bucket_name,
        Key=object_key,
        ExtraArgs={"ContentType": content_type},
        Callback=callback,
    )
