"""
Tests for environment loading and settings.
"""

import os
import pytest
from pathlib import Path

from contactlink.env import Settings, load_env, load_settings, require_token
from contactlink.errors import ConfigurationError
from contactlink.hubspot import DEFAULT_BASE_URL

ENV_VARS = [
    "HUBSPOT_ACCESS_TOKEN",
    "HUBSPOT_BASE_URL",
    "CONTACTLINK_DB_PATH",
    "CONTACTLINK_LOG_LEVEL",
    "CONTACTLINK_LOG_DIR",
    "CONTACTLINK_MATCH_THRESHOLD",
    "CONTACTLINK_PREFIX_BOOST",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestLoadSettings:
    """Test Settings built from the environment."""

    def test_defaults(self, clean_env):
        settings = load_settings()
        assert settings.hubspot_access_token is None
        assert settings.hubspot_base_url == DEFAULT_BASE_URL
        assert settings.db_path == Path("data/audit.db")
        assert settings.log_level == "INFO"
        assert settings.match_threshold == 0.6
        assert settings.prefix_boost == 0.9

    def test_overrides(self, clean_env):
        clean_env.setenv("HUBSPOT_ACCESS_TOKEN", "pat-test")
        clean_env.setenv("CONTACTLINK_DB_PATH", "/tmp/x/audit.db")
        clean_env.setenv("CONTACTLINK_LOG_LEVEL", "debug")
        clean_env.setenv("CONTACTLINK_MATCH_THRESHOLD", "0.75")

        settings = load_settings()
        assert settings.hubspot_access_token == "pat-test"
        assert settings.db_path == Path("/tmp/x/audit.db")
        assert settings.log_level == "DEBUG"
        assert settings.match_threshold == 0.75

    @pytest.mark.parametrize("value", ["high", "1.5", "-0.1"])
    def test_invalid_scores_rejected(self, clean_env, value):
        clean_env.setenv("CONTACTLINK_PREFIX_BOOST", value)
        with pytest.raises(ConfigurationError):
            load_settings()

    def test_invalid_log_level_rejected(self, clean_env):
        clean_env.setenv("CONTACTLINK_LOG_LEVEL", "verbose")
        with pytest.raises(ConfigurationError, match="CONTACTLINK_LOG_LEVEL"):
            load_settings()


class TestLoadEnv:
    """Test .env loading."""

    def test_reads_dotenv_from_cwd(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text("HUBSPOT_ACCESS_TOKEN=from-dotenv\n")
        clean_env.chdir(tmp_path)

        load_env()

        assert os.environ["HUBSPOT_ACCESS_TOKEN"] == "from-dotenv"

    def test_environment_wins(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text("HUBSPOT_ACCESS_TOKEN=from-dotenv\n")
        clean_env.chdir(tmp_path)
        clean_env.setenv("HUBSPOT_ACCESS_TOKEN", "from-shell")

        load_env()

        assert os.environ["HUBSPOT_ACCESS_TOKEN"] == "from-shell"

    def test_missing_dotenv_is_fine(self, clean_env, tmp_path):
        clean_env.chdir(tmp_path)
        load_env()
        assert "HUBSPOT_ACCESS_TOKEN" not in os.environ


class TestRequireToken:
    def test_missing_token(self):
        with pytest.raises(ConfigurationError, match="HUBSPOT_ACCESS_TOKEN"):
            require_token(Settings())

    def test_present_token(self):
        assert require_token(Settings(hubspot_access_token="pat-1")) == "pat-1"
