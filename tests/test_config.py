"""
Unit tests for settings and environment bootstrap.
"""

import logging

from esg_dashboard import bootstrap_env, config


class TestBridgeSecrets:
    """Tests for copying secrets into the environment."""

    def test_nested_keys_flattened(self, monkeypatch):
        """Nested tables become TABLE_KEY variables."""
        monkeypatch.delenv("SOURCES_ESG", raising=False)
        added = bootstrap_env.bridge_secrets({"sources": {"esg": "https://example.com/esg.csv"}})
        assert added == ["SOURCES_ESG"]
        assert bootstrap_env.os.environ["SOURCES_ESG"] == "https://example.com/esg.csv"
        monkeypatch.delenv("SOURCES_ESG")

    def test_existing_variables_not_overridden(self, monkeypatch):
        """Values already in the environment win over secrets."""
        monkeypatch.setenv("ESG_DATA_SOURCE", "local.csv")
        added = bootstrap_env.bridge_secrets({"ESG_DATA_SOURCE": "remote.csv"})
        assert added == []
        assert config.get_setting("ESG_DATA_SOURCE") == "local.csv"

    def test_env_key_sanitised(self):
        """Keys are upper-cased with invalid characters replaced."""
        assert bootstrap_env.env_key("price-data", "url") == "PRICE_DATA_URL"


class TestSettings:
    """Tests for Settings.from_env."""

    def test_defaults(self, monkeypatch):
        """Unset variables fall back to the bundled data files."""
        for name in ("ESG_DATA_SOURCE", "PRICE_DATA_SOURCE", "REQUEST_TIMEOUT", "LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        settings = config.Settings.from_env()
        assert settings.esg_data_source == config.DEFAULT_ESG_DATA_SOURCE
        assert settings.price_data_source == config.DEFAULT_PRICE_DATA_SOURCE
        assert settings.request_timeout == 15.0
        assert settings.log_level == "INFO"

    def test_overrides(self, monkeypatch):
        """Environment values override defaults."""
        monkeypatch.setenv("PRICE_DATA_SOURCE", "https://example.com/prices.csv")
        monkeypatch.setenv("REQUEST_TIMEOUT", "3.5")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        settings = config.Settings.from_env()
        assert settings.price_data_source == "https://example.com/prices.csv"
        assert settings.request_timeout == 3.5
        assert settings.log_level == "DEBUG"

    def test_bad_timeout_ignored(self, monkeypatch):
        """A non-numeric timeout keeps the default."""
        monkeypatch.setenv("REQUEST_TIMEOUT", "soon")
        assert config.Settings.from_env().request_timeout == 15.0

    def test_tabs_order(self):
        """Tabs are declared in display order."""
        assert [tab.key for tab in config.TABS][0] == "overview"
        assert "data_quality" in [tab.key for tab in config.TABS]


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_single_handler(self):
        """Repeat calls adjust the level without stacking handlers."""
        root = logging.getLogger()
        config.configure_logging("WARNING")
        config.configure_logging("DEBUG")
        tagged = [h for h in root.handlers if getattr(h, "_esg_dashboard", False)]
        assert len(tagged) == 1
        assert root.level == logging.DEBUG
        for handler in tagged:
            root.removeHandler(handler)
        root.setLevel(logging.WARNING)
