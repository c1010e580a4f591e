import boto3
import pytest
from fastapi.testclient import TestClient
from moto import mock_aws
from starlette.requests import Request

from cos_uploads.config.settings import Settings
from cos_uploads.main import create_app
from cos_uploads.schemas import StorageParams
from tests.consts import (
    TEST_ACCESS_KEY_ID,
    TEST_BUCKET_NAME,
    TEST_ENDPOINT,
    TEST_SECRET_ACCESS_KEY,
)


@pytest.fixture
def aws_credentials(monkeypatch):
    """Fake credentials so nothing can reach a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def mocked_aws(aws_credentials):
    """Mock S3 with the test bucket created."""
    with mock_aws():
        s3_client = boto3.client("s3")
        s3_client.create_bucket(Bucket=TEST_BUCKET_NAME)

        yield

        # Clean up the bucket so objects do not leak between tests
        response = s3_client.list_objects_v2(Bucket=TEST_BUCKET_NAME)
        for obj in response.get("Contents", []):
            s3_client.delete_object(Bucket=TEST_BUCKET_NAME, Key=obj["Key"])
        s3_client.delete_bucket(Bucket=TEST_BUCKET_NAME)


@pytest.fixture
def s3_client(mocked_aws):
    return boto3.client("s3", region_name="us-east-1")


@pytest.fixture
def storage_params() -> StorageParams:
    return StorageParams(
        bucket=TEST_BUCKET_NAME,
        endpoint=TEST_ENDPOINT,
        access_key_id=TEST_ACCESS_KEY_ID,
        secret_access_key=TEST_SECRET_ACCESS_KEY,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        cos_endpoint=TEST_ENDPOINT,
        cos_bucket_name=TEST_BUCKET_NAME,
        cos_access_key_id=TEST_ACCESS_KEY_ID,
        cos_secret_access_key=TEST_SECRET_ACCESS_KEY,
        max_upload_count=3,
    )


@pytest.fixture
def client(settings, s3_client) -> TestClient:
    app = create_app(settings=settings, s3_client=s3_client)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def request_stub() -> Request:
    return Request({"type": "http", "method": "POST", "path": "/", "headers": []})
