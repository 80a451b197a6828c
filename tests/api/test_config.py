"""
Unit tests for API configuration.
"""

import pytest
from pydantic import ValidationError

from api.config import APIConfig


class TestAPIConfig:
    """Test cases for APIConfig settings."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        """Remove settings that may leak in from the environment."""
        for name in ("PORT", "MYPORT", "LOG_LEVEL", "LOG_FORMAT", "MONGODB_COLLECTION"):
            monkeypatch.delenv(name, raising=False)

    def test_defaults(self):
        """Test default settings."""
        settings = APIConfig(_env_file=None)
        assert settings.port == 5000
        assert settings.mongodb_collection == "books"
        assert settings.mongodb_tls_certificate_key_file is None
        assert settings.log_level == "INFO"

    def test_port_from_environment(self, monkeypatch):
        """Test that PORT sets the listening port."""
        monkeypatch.setenv("PORT", "8080")
        assert APIConfig(_env_file=None).port == 8080

    def test_legacy_port_variable(self, monkeypatch):
        """Test that MyPort is still honoured."""
        monkeypatch.setenv("MyPort", "9090")
        assert APIConfig(_env_file=None).port == 9090

    def test_invalid_port(self, monkeypatch):
        """Test that an out-of-range port is rejected."""
        monkeypatch.setenv("PORT", "70000")
        with pytest.raises(ValidationError):
            APIConfig(_env_file=None)

    def test_log_level_normalized(self, monkeypatch):
        """Test that the log level is upper-cased."""
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert APIConfig(_env_file=None).log_level == "DEBUG"

    def test_invalid_log_format(self, monkeypatch):
        """Test that an unknown log format is rejected."""
        monkeypatch.setenv("LOG_FORMAT", "xml")
        with pytest.raises(ValidationError):
            APIConfig(_env_file=None)

    def test_env_file(self, tmp_path):
        """Test loading settings from a .env file."""
        env_file = tmp_path / ".env"
        env_file.write_text("MONGODB_COLLECTION=novels\nPORT=7000\n")

        settings = APIConfig(_env_file=env_file)
        assert settings.mongodb_collection == "novels"
        assert settings.port == 7000
