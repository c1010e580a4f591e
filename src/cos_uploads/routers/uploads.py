import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from cos_uploads.config.settings import Settings
from cos_uploads.schemas import StoredFile, UploadFilesResponse
from cos_uploads.storage_engine import cos_storage
from cos_uploads.uploader import Uploader, cos_multiple_upload, cos_single_upload

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...

logger = logging.getLogger(__name__)


def create_uploads_router(settings: Settings, s3_client: Optional["S3Client"] = None) -> APIRouter:
    """
    Build the upload routes around one set of storage parameters.

    - `POST /` uses an `Uploader` around a plain `CosStorage` engine
    - `POST /single` uses `cos_single_upload`
    - `POST /multiple` uses `cos_multiple_upload`
    """
    router = APIRouter()
    params = settings.to_storage_params()

    upload = Uploader(cos_storage(params, s3_client=s3_client))
    single_upload = cos_single_upload(params, s3_client=s3_client)
    multiple_upload = cos_multiple_upload(
        settings.to_storage_params(max_count=settings.max_upload_count),
        s3_client=s3_client,
    )

    @router.post("/", response_model=StoredFile, status_code=status.HTTP_201_CREATED)
    async def upload_file(file: Optional[StoredFile] = Depends(upload.single("file"))) -> StoredFile:
        """Store the file sent in the `file` form field."""
        if file is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No file provided"
            )
        return file

    @router.post("/single", response_model=StoredFile, status_code=status.HTTP_201_CREATED)
    async def upload_single_file(file: Optional[StoredFile] = Depends(single_upload)) -> StoredFile:
        if file is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No file provided"
            )
        return file

    @router.post("/multiple", response_model=UploadFilesResponse, status_code=status.HTTP_201_CREATED)
    async def upload_multiple_files(files: List[StoredFile] = Depends(multiple_upload)) -> UploadFilesResponse:
        """Store every file sent in the `files` form field."""
        logger.info(f"Stored {len(files)} file(s)")
        return UploadFilesResponse(files=files)

    return router
