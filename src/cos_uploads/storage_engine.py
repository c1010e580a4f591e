"""
Storage engine that streams uploaded files into an IBM Cloud Object Storage bucket.

The upload pipeline (see `cos_uploads.uploader`) hands every incoming file to
`StorageEngine.handle_file` and, when a request fails halfway, asks the engine
to undo the files it already stored with `StorageEngine.remove_file`.
"""

import logging
import secrets
import threading
from abc import ABC, abstractmethod
from typing import Callable, List, Optional
from urllib.parse import quote

from fastapi import Request

from cos_uploads.errors import (
    EmptyObjectKeyError,
    StorageParamsError,
    StorageRemoveError,
    StorageUploadError,
)
from cos_uploads.s3.client import STORAGE_ERRORS, create_ibm_s3_client, create_s3_client
from cos_uploads.s3.delete_objects import delete_s3_object
from cos_uploads.s3.read_objects import fetch_s3_object_metadata
from cos_uploads.s3.write_objects import upload_s3_object_stream
from cos_uploads.schemas import (
    DEFAULT_SIGNATURE_VERSION,
    IAM_SIGNATURE_VERSION,
    IncomingFile,
    StorageParamError,
    StorageParams,
    StoredFile,
)

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...

logger = logging.getLogger(__name__)

OBJECT_KEY_BYTES = 16

KeyFunction = Callable[[Request, IncomingFile], str]


def generate_object_key(request: Request, file: IncomingFile) -> str:
    """Default object key: 16 random bytes as lowercase hex."""
    return secrets.token_hex(OBJECT_KEY_BYTES)


def validate_storage_params(params: StorageParams) -> None:
    """Check the required parameters, raising every failure at once.

    Either the IAM pair (api_key_id, service_instance_id) or the HMAC pair
    (access_key_id, secret_access_key) must be complete.
    """
    errors: List[StorageParamError] = []

    if not params.endpoint:
        errors.append(StorageParamError(
            param="endpoint",
            message="Failed to upload file: endpoint cannot be empty.",
        ))
    if not params.bucket:
        errors.append(StorageParamError(
            param="bucket",
            message="Failed to upload file: bucket name cannot be empty.",
        ))
    if params.uses_iam:
        if not params.api_key_id:
            errors.append(StorageParamError(
                param="api_key_id",
                message="Failed to upload file: API key id cannot be empty.",
            ))
        if not params.service_instance_id:
            errors.append(StorageParamError(
                param="service_instance_id",
                message="Failed to upload file: service instance id cannot be empty.",
            ))
    else:
        if not params.access_key_id:
            errors.append(StorageParamError(
                param="access_key_id",
                message="Failed to upload file: access key id cannot be empty.",
            ))
        if not params.secret_access_key:
            errors.append(StorageParamError(
                param="secret_access_key",
                message="Failed to upload file: secret access key cannot be empty.",
            ))

    if errors:
        raise StorageParamsError(errors)


class UploadProgress:
    """Accumulates the byte counts reported by the transfer manager.

    boto3 calls the callback from its worker threads, one call per chunk, and
    with negative amounts when a chunk is retried.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.total = 0

    def __call__(self, bytes_amount: int) -> None:
        with self._lock:
            self.total += bytes_amount


class StorageEngine(ABC):
    """Contract between the upload pipeline and a place that keeps files."""

    @abstractmethod
    def handle_file(self, request: Request, file: IncomingFile) -> StoredFile:
        """Store `file` and return what was stored. Raise to fail the request."""

    @abstractmethod
    def remove_file(self, request: Request, file: StoredFile) -> None:
        """Remove a file previously returned by `handle_file`."""


def build_s3_client(params: StorageParams) -> "S3Client":
    """Pick the IAM or HMAC client for validated storage parameters."""
    if params.uses_iam:
        return create_ibm_s3_client(
            endpoint=params.endpoint,
            api_key_id=params.api_key_id,
            service_instance_id=params.service_instance_id,
            region=params.region,
            signature_version=params.signature_version or IAM_SIGNATURE_VERSION,
        )
    return create_s3_client(
        endpoint=params.endpoint,
        access_key_id=params.access_key_id,
        secret_access_key=params.secret_access_key,
        region=params.region,
        signature_version=params.signature_version or DEFAULT_SIGNATURE_VERSION,
    )


class CosStorage(StorageEngine):
    """Stream uploads straight into a COS bucket through the S3 API."""

    def __init__(self, params: StorageParams, s3_client: Optional["S3Client"] = None):
        validate_storage_params(params)

        self.bucket = params.bucket
        self.get_object_key: KeyFunction = params.key or generate_object_key
        self.s3_client = s3_client or build_s3_client(params)

    def object_location(self, key: str) -> str:
        endpoint = self.s3_client.meta.endpoint_url.rstrip("/")
        return f"{endpoint}/{self.bucket}/{quote(key)}"

    def handle_file(self, request: Request, file: IncomingFile) -> StoredFile:
        """
        Upload one file to the bucket and report where it went.

        If the object was written but its metadata cannot be read back, the
        object is deleted again before the error is raised.

        Args:
            request: The request the file belongs to, passed to the key function
            file: The incoming file with its readable stream

        Returns:
            StoredFile: Size and identity of the stored object
        """
        key = self.get_object_key(request, file)
        if not key:
            raise EmptyObjectKeyError(field=file.fieldname)

        progress = UploadProgress()
        logger.info(f"Uploading '{file.originalname}' to bucket '{self.bucket}' as '{key}'")
        try:
            upload_s3_object_stream(
                bucket_name=self.bucket,
                object_key=key,
                file_stream=file.stream,
                content_type=file.mimetype,
                s3_client=self.s3_client,
                callback=progress,
            )
        except STORAGE_ERRORS as err:
            logger.error(f"Error uploading '{key}' to bucket '{self.bucket}': {str(err)}")
            raise StorageUploadError(
                f"Failed to upload file: {str(err)}", field=file.fieldname
            ) from err

        try:
            metadata = fetch_s3_object_metadata(self.bucket, key, s3_client=self.s3_client)
        except STORAGE_ERRORS as err:
            logger.error(f"Error reading back '{key}' from bucket '{self.bucket}': {str(err)}")
            self.discard_object(key)
            raise StorageUploadError(
                f"Failed to upload file: {str(err)}", field=file.fieldname
            ) from err

        # Some transfers finish without progress events
        size = progress.total or metadata.get("ContentLength", 0)
        logger.info(f"Uploaded '{key}' ({size} bytes)")

        return StoredFile(
            fieldname=file.fieldname,
            originalname=file.originalname,
            encoding=file.encoding,
            mimetype=file.mimetype,
            size=size,
            bucket=self.bucket,
            key=key,
            location=self.object_location(key),
            etag=metadata["ETag"],
        )

    def discard_object(self, key: str) -> None:
        """Best-effort delete of an object that never made it into a StoredFile."""
        try:
            delete_s3_object(self.bucket, key, s3_client=self.s3_client)
        except STORAGE_ERRORS:
            logger.exception(f"Could not discard '{key}' from bucket '{self.bucket}'")
            return
        logger.info(f"Discarded '{key}' from bucket '{self.bucket}'")

    def remove_file(self, request: Request, file: StoredFile) -> None:
        """Delete a stored object, used when the rest of the request fails."""
        try:
            delete_s3_object(file.bucket, file.key, s3_client=self.s3_client)
        except STORAGE_ERRORS as err:
            logger.error(f"Error removing '{file.key}' from bucket '{file.bucket}': {str(err)}")
            raise StorageRemoveError(
                f"Failed to remove file: {str(err)}", field=file.fieldname
            ) from err
        logger.info(f"Removed '{file.key}' from bucket '{file.bucket}'")


def cos_storage(params: StorageParams, s3_client: Optional["S3Client"] = None) -> CosStorage:
    """Build a `CosStorage` engine from storage parameters."""
    return CosStorage(params, s3_client=s3_client)
