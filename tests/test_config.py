"""Tests for Config and API domain inference."""

import pytest

from crmbridge.config import (
    DEFAULT_ACCOUNTS_DOMAIN,
    DEFAULT_API_DOMAIN,
    DEFAULT_API_VERSION,
    Config,
    infer_api_domain,
)

ENV_VARS = (
    "CRM_CLIENT_ID",
    "CRM_CLIENT_SECRET",
    "CRM_ACCOUNTS_DOMAIN",
    "CRM_API_DOMAIN",
    "CRM_API_VERSION",
    "CRM_ACCESS_TOKEN",
    "CRM_REFRESH_TOKEN",
    "CRM_DEBUG",
    "CRM_LOG_LEVEL",
    "CRM_TIMEOUT_S",
)


@pytest.fixture
def clean_env(monkeypatch):
    # setenv first so teardown also removes values load_dotenv wrote
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


class TestInferApiDomain:
    @pytest.mark.parametrize(
        "accounts_domain, expected",
        [
            ("https://accounts.zoho.com", "https://www.zohoapis.com"),
            ("https://accounts.zoho.com/", "https://www.zohoapis.com"),
            ("https://accounts.zoho.in", "https://www.zohoapis.in"),
            ("https://accounts.unknown.net", DEFAULT_API_DOMAIN),
            ("", DEFAULT_API_DOMAIN),
            (None, DEFAULT_API_DOMAIN),
        ],
    )
    def test_mapping(self, accounts_domain, expected):
        assert infer_api_domain(accounts_domain) == expected


class TestConfig:
    def test_defaults(self, clean_env):
        config = Config()
        assert config.accounts_domain == DEFAULT_ACCOUNTS_DOMAIN
        assert config.api_domain is None
        assert config.api_version == DEFAULT_API_VERSION
        assert config.debug is False
        assert config.log_level == "INFO"
        assert config.timeout_s == 30.0
        assert config.resolved_api_domain() == DEFAULT_API_DOMAIN

    def test_reads_environment(self, clean_env):
        clean_env.setenv("CRM_CLIENT_ID", "env-id")
        clean_env.setenv("CRM_ACCOUNTS_DOMAIN", "https://accounts.zoho.com")
        clean_env.setenv("CRM_REFRESH_TOKEN", "env-refresh")
        clean_env.setenv("CRM_DEBUG", "1")
        clean_env.setenv("CRM_TIMEOUT_S", "12.5")

        config = Config()

        assert config.client_id == "env-id"
        assert config.refresh_token == "env-refresh"
        assert config.debug is True
        assert config.timeout_s == 12.5
        assert config.resolved_api_domain() == "https://www.zohoapis.com"

    def test_arguments_win(self, clean_env):
        clean_env.setenv("CRM_CLIENT_ID", "env-id")
        assert Config(client_id="arg-id").client_id == "arg-id"

    def test_explicit_api_domain(self, clean_env):
        config = Config(accounts_domain="https://accounts.zoho.com", api_domain="https://proxy.local")
        assert config.resolved_api_domain() == "https://proxy.local"

    def test_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("CRM_CLIENT_SECRET=from-file\nCRM_API_VERSION=v3\n")

        config = Config.from_env(env_file=env_file)

        assert config.client_secret == "from-file"
        assert config.api_version == "v3"

    def test_missing_env_file_ignored(self, clean_env, tmp_path):
        assert Config(env_file=tmp_path / "missing.env").client_id == ""
