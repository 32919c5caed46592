import pytest
from click.testing import CliRunner

from file_manager.cli import cli
from file_manager.config.settings import Settings
from file_manager.errors import ConfigurationError
from file_manager.main import create_app


@pytest.fixture
def no_credentials(monkeypatch):
    monkeypatch.delenv("AWS_ACCESS_KEY_ID", raising=False)
    monkeypatch.delenv("AWS_SECRET_ACCESS_KEY", raising=False)
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


def test_settings__defaults(no_credentials):
    settings = Settings(_env_file=None)

    assert settings.s3_bucket_name == "files"
    assert settings.port == 3000
    assert settings.log_level == "INFO"


def test_settings__reads_environment(no_credentials, monkeypatch):
    monkeypatch.setenv("S3_BUCKET_NAME", "uploads")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("AWS_ENDPOINT_URL", "")

    settings = Settings(_env_file=None)

    assert settings.s3_bucket_name == "uploads"
    assert settings.port == 8080
    assert settings.log_level == "DEBUG"
    assert settings.aws_endpoint_url is None


def test_require_storage_credentials__missing(no_credentials):
    settings = Settings(_env_file=None, aws_access_key_id="AKIA123")

    with pytest.raises(ConfigurationError, match="AWS_SECRET_ACCESS_KEY"):
        settings.require_storage_credentials()


def test_create_app__refuses_to_start_without_credentials(no_credentials):
    with pytest.raises(ConfigurationError):
        create_app(Settings(_env_file=None))


def test_describe__masks_secrets(settings):
    described = settings.describe()

    assert described["AWS Secret Access Key"] == "test***"
    assert described["S3 Bucket"] == settings.s3_bucket_name


def test_cli_serve__exits_without_credentials(no_credentials, monkeypatch):
    monkeypatch.chdir("/")  # keep a developer's .env out of the picture
    calls = []
    monkeypatch.setattr("file_manager.cli.uvicorn.run", lambda *args, **kwargs: calls.append(kwargs))

    result = CliRunner().invoke(cli, ["serve"])

    assert result.exit_code == 1
    assert calls == []


def test_cli_serve__runs_app_factory(aws_credentials, monkeypatch):
    monkeypatch.chdir("/")
    calls = []
    monkeypatch.setattr("file_manager.cli.uvicorn.run", lambda app, **kwargs: calls.append((app, kwargs)))

    result = CliRunner().invoke(cli, ["serve", "--port", "9000"])

    assert result.exit_code == 0
    [(app, kwargs)] = calls
    assert app == "file_manager.main:create_app_from_env"
    assert kwargs["factory"] is True
    assert kwargs["port"] == 9000


def test_cli_show_config(aws_credentials, monkeypatch):
    monkeypatch.chdir("/")

    result = CliRunner().invoke(cli, ["show-config"])

    assert result.exit_code == 0
    assert "S3 Bucket: files" in result.output
    assert "testing" not in result.output
