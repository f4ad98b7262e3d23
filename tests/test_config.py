"""
Tests for application settings.
"""

import pytest
from pydantic import ValidationError

from moneymath.config import Settings, get_env_file


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.api_prefix == "/api"
        assert settings.xirr_guess_percent == 10.0

    def test_log_level_is_normalised(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")

    def test_env_file_follows_app_env(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "production")
        assert get_env_file() == ".env.production"
        monkeypatch.delenv("APP_ENV")
        assert get_env_file() == ".env.development"
