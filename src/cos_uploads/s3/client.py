"""Construction of the S3-compatible clients that talk to the object store."""

import logging
from typing import Optional

import boto3
import ibm_boto3
from boto3.exceptions import S3UploadFailedError
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from ibm_boto3.exceptions import S3UploadFailedError as IbmS3UploadFailedError
from ibm_botocore.client import Config as IbmConfig
from ibm_botocore.exceptions import BotoCoreError as IbmBotoCoreError
from ibm_botocore.exceptions import ClientError as IbmClientError

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...

logger = logging.getLogger(__name__)

# ibm_boto3 is a fork of boto3 with its own exception classes
CLIENT_ERRORS = (ClientError, IbmClientError)
STORAGE_ERRORS = (
    S3UploadFailedError,
    BotoCoreError,
    ClientError,
    IbmS3UploadFailedError,
    IbmBotoCoreError,
    IbmClientError,
)


def create_s3_client(
    endpoint: str,
    access_key_id: str,
    secret_access_key: str,
    region: Optional[str] = None,
    signature_version: str = "s3v4",
) -> "S3Client":
    """
    Create a boto3 S3 client for an S3-compatible endpoint using HMAC keys.

    :param endpoint: URL of the object storage endpoint.
    :param access_key_id: HMAC access key id.
    :param secret_access_key: HMAC secret access key.
    :param region: Optional region name, some endpoints ignore it.
    :param signature_version: Request signing version.
    """
    logger.info(f"Creating S3 client for endpoint {endpoint}")
    return boto3.client(
        "s3",
        endpoint_url=endpoint,
        aws_access_key_id=access_key_id,
        aws_secret_access_key=secret_access_key,
        region_name=region,
        config=Config(signature_version=signature_version),
    )


def create_ibm_s3_client(
    endpoint: str,
    api_key_id: str,
    service_instance_id: str,
    region: Optional[str] = None,
    signature_version: str = "oauth",
):
    """
    Create an ibm_boto3 S3 client that authenticates with an IAM API key.

    The client exchanges the API key for a bearer token on first use and
    refreshes it on its own.

    :param endpoint: URL of the object storage endpoint.
    :param api_key_id: IAM API key.
    :param service_instance_id: Resource instance id of the COS service.
    :param region: Optional region name.
    :param signature_version: Request signing version, "oauth" for IAM tokens.
    """
    logger.info(f"Creating IAM authenticated S3 client for endpoint {endpoint}")
    return ibm_boto3.client(
        "s3",
        endpoint_url=endpoint,
        ibm_api_key_id=api_key_id,
        ibm_service_instance_id=service_instance_id,
        region_name=region,
        config=IbmConfig(signature_version=signature_version),
    )
