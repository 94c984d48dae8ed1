"""Tests for ClientConfig defaults and environment overrides."""

from clubledger.config import DEFAULT_BASE_URL, ClientConfig


class TestClientConfig:
    def test_defaults(self):
        config = ClientConfig()
        assert config.base_url == DEFAULT_BASE_URL
        assert config.api_token is None
        assert config.currency_symbol == "£"
        assert config.date_format == "%d/%m/%Y"
        assert config.high_debt_threshold == 20.0
        assert config.strict_records is False

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("CLUBLEDGER_BASE_URL", "https://club.example")
        monkeypatch.setenv("CLUBLEDGER_API_TOKEN", "env-token")
        config = ClientConfig.from_env()
        assert config.base_url == "https://club.example"
        assert config.api_token == "env-token"

    def test_overrides_win_and_none_ignored(self, monkeypatch):
        monkeypatch.setenv("CLUBLEDGER_API_TOKEN", "env-token")
        config = ClientConfig.from_env(api_token="cli-token", base_url=None)
        assert config.api_token == "cli-token"
        assert config.base_url == DEFAULT_BASE_URL
