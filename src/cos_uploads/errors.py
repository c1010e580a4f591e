"""Exceptions raised by the upload pipeline and the FastAPI handlers that render them."""

import logging
from typing import List, Optional

import pydantic
from fastapi import Request, status
from fastapi.responses import JSONResponse

from cos_uploads.schemas import StorageParamError

logger = logging.getLogger(__name__)


class StorageParamsError(ValueError):
    """Raised when the storage configuration has empty required parameters.

    Carries every failing parameter, not just the first one.
    """

    def __init__(self, errors: List[StorageParamError]):
        self.errors = errors
        super().__init__("; ".join(error.message for error in errors))


class UploadError(Exception):
    """Base class for errors that abort an upload request."""

    code: str = "UPLOAD_FAILED"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(message)


class UnexpectedFieldError(UploadError):
    """A file arrived on a field the uploader was not told about, or too many files arrived."""

    code = "LIMIT_UNEXPECTED_FILE"

    def __init__(self, field: str):
        super().__init__("Unexpected field", field=field)


class EmptyObjectKeyError(UploadError):
    """The key function produced an empty object key."""

    code = "EMPTY_OBJECT_KEY"

    def __init__(self, field: Optional[str] = None):
        super().__init__("Failed to upload file: object key cannot be empty.", field=field)


class StorageUploadError(UploadError):
    """Writing an object to the bucket failed."""

    code = "STORAGE_UPLOAD_FAILED"
    status_code = status.HTTP_502_BAD_GATEWAY


class StorageRemoveError(UploadError):
    """Deleting an object from the bucket failed."""

    code = "STORAGE_REMOVE_FAILED"
    status_code = status.HTTP_502_BAD_GATEWAY


async def handle_upload_errors(request: Request, exc: UploadError) -> JSONResponse:
    """Render an upload error with its code and offending field."""
    logger.warning(f"Upload rejected ({exc.code}): {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.message,
            "code": exc.code,
            "field": exc.field,
        },
    )


async def handle_pydantic_validation_errors(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    errors = exc.errors()
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": [
                {
                    "msg": error["msg"],
                    "input": str(error.get("input")),
                }
                for error in errors
            ]
        },
    )


async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that propagates out of a route."""
    try:
        return await call_next(request)
    except Exception as err:
        logger.exception(err)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )
