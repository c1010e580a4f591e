"""
Upload pipeline that feeds multipart files into a storage engine.

An `Uploader` produces FastAPI dependencies. Each dependency reads the parsed
multipart form, hands the files of one field to the storage engine and puts
the stored metadata on `request.state` (and returns it to the route).

Example usage:

    upload = Uploader(cos_storage(params))

    @app.post("/upload")
    async def upload_file(file: StoredFile = Depends(upload.single("file"))):
        ...
"""

import asyncio
import logging
import sys
from typing import Awaitable, Callable, List, Optional

from fastapi import Request
from starlette.datastructures import UploadFile

from cos_uploads.errors import UnexpectedFieldError
from cos_uploads.schemas import (
    DEFAULT_ENCODING,
    DEFAULT_MULTIPLE_FIELD_NAME,
    DEFAULT_SINGLE_FIELD_NAME,
    IncomingFile,
    StorageParams,
    StoredFile,
)
from cos_uploads.storage_engine import CosStorage, StorageEngine

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...

logger = logging.getLogger(__name__)

FileFilter = Callable[[Request, IncomingFile], bool]


def to_incoming_file(field_name: str, upload: UploadFile) -> IncomingFile:
    return IncomingFile(
        fieldname=field_name,
        originalname=upload.filename or "",
        encoding=upload.headers.get("content-transfer-encoding", DEFAULT_ENCODING),
        mimetype=upload.content_type or "application/octet-stream",
        stream=upload.file,
    )


class Uploader:
    """Multipart upload handling bound to one storage engine.

    Args:
        storage: Engine that stores and removes the files
        file_filter: Optional `(request, file) -> bool`, returning False skips the file
    """

    def __init__(self, storage: StorageEngine, file_filter: Optional[FileFilter] = None):
        self.storage = storage
        self.file_filter = file_filter

    def single(self, field_name: str = DEFAULT_SINGLE_FIELD_NAME) -> Callable[[Request], Awaitable[Optional[StoredFile]]]:
        """Accept at most one file, on `field_name`."""

        async def upload_single_file(request: Request) -> Optional[StoredFile]:
            stored_files = await self.process_request(request, field_name, max_count=1)
            request.state.file = stored_files[0] if stored_files else None
            return request.state.file

        return upload_single_file

    def array(
        self,
        field_name: str = DEFAULT_MULTIPLE_FIELD_NAME,
        max_count: Optional[int] = None,
    ) -> Callable[[Request], Awaitable[List[StoredFile]]]:
        """Accept any number of files on `field_name`, up to `max_count` when given."""

        async def upload_files(request: Request) -> List[StoredFile]:
            request.state.files = await self.process_request(request, field_name, max_count=max_count)
            return request.state.files

        return upload_files

    async def process_request(
        self,
        request: Request,
        field_name: str,
        max_count: Optional[int] = None,
    ) -> List[StoredFile]:
        """Store the files of `field_name`, removing them again if anything fails.

        Cancellation counts as a failure too. The form parser is not given a file
        limit; `max_count` is enforced here so every limit error has the same shape.
        """
        form = await request.form(max_files=sys.maxsize)
        stored_files: List[StoredFile] = []
        file_count = 0

        try:
            for name, value in form.multi_items():
                if not isinstance(value, UploadFile):
                    continue
                if name != field_name:
                    raise UnexpectedFieldError(name)
                file_count += 1
                if max_count is not None and file_count > max_count:
                    raise UnexpectedFieldError(name)

                incoming = to_incoming_file(name, value)
                if self.file_filter is not None and not self.file_filter(request, incoming):
                    logger.info(f"Skipping '{incoming.originalname}', rejected by file filter")
                    continue

                stored = await asyncio.to_thread(self.storage.handle_file, request, incoming)
                stored_files.append(stored)
        except BaseException:
            await self.remove_uploaded_files(request, stored_files)
            raise
        finally:
            await form.close()

        return stored_files

    async def remove_uploaded_files(self, request: Request, stored_files: List[StoredFile]) -> None:
        """Undo the files stored so far; failures are logged so the original error wins."""
        for stored in stored_files:
            try:
                await asyncio.to_thread(self.storage.remove_file, request, stored)
            except Exception:
                logger.exception(f"Could not remove '{stored.key}' from bucket '{stored.bucket}'")


def cos_single_upload(
    params: StorageParams,
    s3_client: Optional["S3Client"] = None,
) -> Callable[[Request], Awaitable[Optional[StoredFile]]]:
    """
    Dependency for single file uploads to IBM Cloud Object Storage.

    The field name defaults to 'file'. A `params.file_filter` decides which
    files are stored.

    Example usage:

        @app.post("/upload")
        async def upload(file: StoredFile = Depends(cos_single_upload(params))):
            ...
    """
    uploader = Uploader(CosStorage(params, s3_client=s3_client), file_filter=params.file_filter)
    return uploader.single(params.field_name or DEFAULT_SINGLE_FIELD_NAME)


def cos_multiple_upload(
    params: StorageParams,
    s3_client: Optional["S3Client"] = None,
) -> Callable[[Request], Awaitable[List[StoredFile]]]:
    """
    Dependency for multiple file uploads to IBM Cloud Object Storage.

    The field name defaults to 'files'; `params.max_count` caps the number of
    files, unlimited when unset.
    """
    uploader = Uploader(CosStorage(params, s3_client=s3_client), file_filter=params.file_filter)
    return uploader.array(params.field_name or DEFAULT_MULTIPLE_FIELD_NAME, params.max_count)
