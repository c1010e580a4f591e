####################################
# --- Upload/storage schemas --- #
####################################

from dataclasses import dataclass
from typing import BinaryIO, Callable, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
)

DEFAULT_SINGLE_FIELD_NAME = "file"
DEFAULT_MULTIPLE_FIELD_NAME = "files"
DEFAULT_SIGNATURE_VERSION = "s3v4"
IAM_SIGNATURE_VERSION = "oauth"
DEFAULT_ENCODING = "7bit"


@dataclass
class IncomingFile:
    """A file handed over by the multipart parser, before it is stored."""
    fieldname: str
    originalname: str
    encoding: str
    mimetype: str
    stream: BinaryIO


class StorageParams(BaseModel):
    """Configuration for the COS storage engine and the upload helpers."""
    bucket: str = Field(
        default="",
        description="Name of the bucket that receives the uploads.",
    )
    endpoint: str = Field(
        default="",
        description="URL of the object storage endpoint.",
        json_schema_extra={"example": "https://s3.us-south.cloud-object-storage.appdomain.cloud"},
    )
    access_key_id: str = Field(default="", description="HMAC access key id.")
    secret_access_key: str = Field(default="", description="HMAC secret access key.")
    api_key_id: str = Field(
        default="",
        description="IAM API key. When set, the client authenticates with IAM instead of HMAC keys.",
    )
    service_instance_id: str = Field(default="", description="Resource instance id of the COS service.")
    region: Optional[str] = Field(default=None, description="Region passed to the client.")
    signature_version: Optional[str] = Field(
        default=None,
        description="Request signing version. Defaults to s3v4 for HMAC keys, oauth for IAM.",
    )

    # (request, file) -> object key
    key: Optional[Callable[..., str]] = None
    # (request, file) -> bool, False skips the file
    file_filter: Optional[Callable[..., bool]] = None

    field_name: Optional[str] = Field(
        default=None,
        description="Form field holding the files. Defaults to 'file' or 'files'.",
    )
    max_count: Optional[int] = Field(
        default=None,
        ge=1,
        description="Maximum number of files accepted by the multiple helper.",
    )

    @property
    def uses_iam(self) -> bool:
        """IAM credentials take over as soon as either IAM value is given."""
        return bool(self.api_key_id or self.service_instance_id)


class StorageParamError(BaseModel):
    """One invalid storage parameter."""
    param: str
    message: str


class StoredFile(BaseModel):
    """Metadata of a file after it was written to the bucket."""
    fieldname: str
    originalname: str
    encoding: str
    mimetype: str
    size: int = Field(description="The size of the file in bytes.")
    bucket: str
    key: str = Field(
        description="The object key inside the bucket.",
        json_schema_extra={"example": "5d41402abc4b2a76b9719d911017c592"},
    )
    location: str
    etag: str

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "fieldname": "file",
                "originalname": "report.pdf",
                "encoding": "7bit",
                "mimetype": "application/pdf",
                "size": 512,
                "bucket": "uploads",
                "key": "5d41402abc4b2a76b9719d911017c592",
                "location": "https://s3.us-south.cloud-object-storage.appdomain.cloud/uploads/5d41402abc4b2a76b9719d911017c592",
                "etag": "\"9a0364b9e99bb480dd25e1f0284c8555\"",
            }
        }
    )


class UploadFilesResponse(BaseModel):
    """Response model for `POST /multiple`."""
    files: list[StoredFile]
