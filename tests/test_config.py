"""Tests for ServerConfig and credential handling."""

import pytest
from pydantic import SecretStr, ValidationError

from azure_devops_tree.auth import PAT_PROVIDER_ID, AuthSession, PatCredentialProvider
from azure_devops_tree.config import ServerConfig
from azure_devops_tree.models import AuthenticationError
from azure_devops_tree.sources import AzureDevOpsServerSource, AzureDevOpsServicesSource


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in ("PAT", "ORGANIZATIONS", "SERVERS", "MAX_BATCH_SIZE", "MAX_URL_LENGTH", "STORAGE_DIR"):
        monkeypatch.delenv(f"AZURE_DEVOPS_{key}", raising=False)
    # Keep a developer's .env out of the tests
    monkeypatch.chdir(tmp_path)


class TestServerConfig:
    def test_defaults(self):
        config = ServerConfig()

        assert config.pat is None
        assert config.get_sources() == []
        api = config.get_api_config()
        assert api.max_batch_size == 500
        assert api.max_url_length == 2000

    def test_sources_from_environment(self, monkeypatch):
        monkeypatch.setenv("AZURE_DEVOPS_ORGANIZATIONS", '["contoso", "fabrikam"]')
        monkeypatch.setenv(
            "AZURE_DEVOPS_SERVERS",
            '[{"scheme": "http", "instance": "tfs.local", "port": 8081, "collection": "Main"}]',
        )

        sources = ServerConfig().get_sources()

        assert [s.name for s in sources] == ["contoso", "fabrikam", "tfs.local"]
        assert isinstance(sources[0], AzureDevOpsServicesSource)
        assert sources[0].base_url == "https://dev.azure.com/contoso/"
        assert isinstance(sources[2], AzureDevOpsServerSource)
        assert sources[2].base_url == "http://tfs.local:8081/Main/"
        assert sources[2].api_version == "6.0"

    def test_limits_and_storage(self, monkeypatch, tmp_path):
        monkeypatch.setenv("AZURE_DEVOPS_PAT", "token")
        monkeypatch.setenv("AZURE_DEVOPS_MAX_URL_LENGTH", "1500")
        monkeypatch.setenv("AZURE_DEVOPS_STORAGE_DIR", str(tmp_path))

        config = ServerConfig()

        assert config.get_api_config().pat.get_secret_value() == "token"
        assert config.get_api_config().max_url_length == 1500
        assert config.icons_dir == tmp_path / "icons"


class TestPatCredentialProvider:
    @pytest.mark.asyncio
    async def test_session_from_token(self):
        session = await PatCredentialProvider(SecretStr("abc")).get_session(PAT_PROVIDER_ID)

        assert session.access_token == "abc"

    @pytest.mark.asyncio
    async def test_no_token(self):
        provider = PatCredentialProvider(None)

        assert await provider.get_session(PAT_PROVIDER_ID) is None
        with pytest.raises(AuthenticationError):
            await provider.get_session(PAT_PROVIDER_ID, create_if_none=True)

    @pytest.mark.asyncio
    async def test_unknown_provider(self):
        with pytest.raises(AuthenticationError):
            await PatCredentialProvider(SecretStr("abc")).get_session("other")


class TestAuthSession:
    def test_defaults_to_pat_provider(self):
        session = AuthSession(access_token="abc")

        assert session.id == PAT_PROVIDER_ID
        assert session.account_label == "Azure DevOps Personal Access Token"

    def test_is_immutable(self):
        session = AuthSession(access_token="abc")

        with pytest.raises(ValidationError):
            session.access_token = "other"

    def test_token_is_required(self):
        with pytest.raises(ValidationError):
            AuthSession()
