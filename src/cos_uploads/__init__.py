"""Stream multipart uploads straight into an IBM Cloud Object Storage bucket."""

from cos_uploads.schemas import IncomingFile, StorageParamError, StorageParams, StoredFile
from cos_uploads.storage_engine import CosStorage, StorageEngine, cos_storage
from cos_uploads.uploader import Uploader, cos_multiple_upload, cos_single_upload

__all__ = [
    "CosStorage",
    "IncomingFile",
    "StorageEngine",
    "StorageParamError",
    "StorageParams",
    "StoredFile",
    "Uploader",
    "cos_multiple_upload",
    "cos_single_upload",
    "cos_storage",
]
