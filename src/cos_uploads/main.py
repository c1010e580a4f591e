import logging
from textwrap import dedent
from typing import Optional

import pydantic
from fastapi import FastAPI
from fastapi.routing import APIRoute

from cos_uploads.config.settings import Settings
from cos_uploads.errors import (
    UploadError,
    handle_broad_exceptions,
    handle_pydantic_validation_errors,
    handle_upload_errors,
)
from cos_uploads.routers.health import router as health_router
from cos_uploads.routers.uploads import create_uploads_router

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...

# Set up logging
logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, s3_client: Optional["S3Client"] = None) -> FastAPI:
    """Create a FastAPI application."""
    settings = settings or Settings()

    app = FastAPI(
        title="COS Uploads",
        summary="Stream multipart uploads into IBM Cloud Object Storage",
        version="v1",
        description=dedent(
            """\
        Files sent as `multipart/form-data` are piped straight into the configured
        bucket. Every route answers with the stored object's bucket, key, location,
        etag and size.
        """
        ),
        docs_url="/docs",
        generate_unique_id_function=custom_generate_unique_id,
    )
    app.state.settings = settings
    logger.info(f"Uploads go to bucket '{settings.cos_bucket_name}' at {settings.cos_endpoint}")

    app.include_router(create_uploads_router(settings, s3_client=s3_client), tags=["uploads"])
    app.include_router(health_router, tags=["health"])

    app.add_exception_handler(
        exc_class_or_status_code=UploadError,
        handler=handle_upload_errors,
    )
    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.middleware("http")(handle_broad_exceptions)

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"
