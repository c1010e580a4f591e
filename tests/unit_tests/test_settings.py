import pytest
from click.testing import CliRunner
from pydantic import ValidationError

from cos_uploads.cli import cli, mask_secret
from cos_uploads.config.settings import Settings, get_settings
from cos_uploads.main import create_app
from cos_uploads.errors import StorageParamsError


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("COS_ENDPOINT", "https://s3.eu-de.cloud-object-storage.appdomain.cloud")
    monkeypatch.setenv("COS_BUCKET_NAME", "invoices")
    monkeypatch.setenv("COS_ACCESS_KEY_ID", "key-id")
    monkeypatch.setenv("COS_SECRET_ACCESS_KEY", "secret")
    monkeypatch.setenv("MAX_UPLOAD_COUNT", "5")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings()

    assert settings.cos_bucket_name == "invoices"
    assert settings.max_upload_count == 5
    assert settings.log_level == "DEBUG"
    assert settings.cos_signature_version is None


def test_settings_reject_unknown_log_level():
    with pytest.raises(ValidationError):
        Settings(log_level="chatty")


def test_to_storage_params_passes_overrides(settings):
    params = settings.to_storage_params(field_name="documents", max_count=2)

    assert params.bucket == settings.cos_bucket_name
    assert params.endpoint == settings.cos_endpoint
    assert params.field_name == "documents"
    assert params.max_count == 2


def test_to_storage_params_carries_iam_credentials():
    params = Settings(
        cos_endpoint="https://s3.us-south.cloud-object-storage.appdomain.cloud",
        cos_bucket_name="invoices",
        cos_api_key_id="iam-api-key",
        cos_service_instance_id="instance-id",
    ).to_storage_params()

    assert params.uses_iam
    assert params.api_key_id == "iam-api-key"
    assert params.service_instance_id == "instance-id"


def test_create_app_refuses_incomplete_settings():
    with pytest.raises(StorageParamsError) as exc_info:
        create_app(Settings(cos_endpoint="", cos_bucket_name="invoices", cos_access_key_id="", cos_secret_access_key=""))

    assert [error.param for error in exc_info.value.errors] == ["endpoint", "access_key_id", "secret_access_key"]


def test_mask_secret():
    assert mask_secret("") == "<not set>"
    assert mask_secret("abcdefghij") == "abcd******"
    assert mask_secret("abcd") == "********"
    assert mask_secret("12345678") == "********"


def test_show_config(monkeypatch):
    monkeypatch.setenv("COS_BUCKET_NAME", "invoices")
    monkeypatch.setenv("COS_SECRET_ACCESS_KEY", "supersecretvalue")
    monkeypatch.setenv("COS_API_KEY_ID", "key")
    get_settings.cache_clear()

    result = CliRunner().invoke(cli, ["show-config"])
    get_settings.cache_clear()

    assert result.exit_code == 0
    assert "COS Bucket: invoices" in result.output
    assert "supersecretvalue" not in result.output
    assert "IAM API Key Id: ********" in result.output
