import logging

import pytest
import structlog
from pydantic import ValidationError as SettingsValidationError

from shared.config import Settings
from shared.logging import configure_logging, get_log_level


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        monkeypatch.delenv("DATABASE_URL", raising=False)
        settings = Settings(_env_file=None)
        assert settings.environment == "development"
        assert settings.currency == "INR"
        assert settings.order_conflict_retries == 1
        assert settings.database_url.startswith("sqlite")

    def test_environment_variables_override(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://store@localhost/makhana")
        monkeypatch.setenv("ORDER_CONFLICT_RETRIES", "3")
        settings = Settings(_env_file=None)
        assert settings.database_url == "postgresql://store@localhost/makhana"
        assert settings.order_conflict_retries == 3

    def test_log_level_is_validated(self):
        with pytest.raises(SettingsValidationError):
            Settings(_env_file=None, log_level="LOUD")
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_allowed_origins_list(self):
        settings = Settings(_env_file=None, allowed_origins="http://a.test, http://b.test")
        assert settings.get_allowed_origins_list() == ["http://a.test", "http://b.test"]

    def test_is_production(self):
        assert Settings(_env_file=None, environment="staging").is_production
        assert not Settings(_env_file=None, environment="test").is_production


class TestLogLevel:
    def test_level_follows_environment(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert get_log_level(Settings(_env_file=None, environment="production")) == "INFO"
        assert get_log_level(Settings(_env_file=None, environment="development")) == "DEBUG"
        assert get_log_level(Settings(_env_file=None, environment="test")) == "WARNING"

    def test_explicit_level_wins(self):
        assert get_log_level(Settings(_env_file=None, environment="development", log_level="error")) == "ERROR"

    def test_process_environment_is_not_consulted(self, monkeypatch):
        # Only the Settings object decides; stray variables do not leak in
        monkeypatch.setenv("LOG_LEVEL", "CRITICAL")
        monkeypatch.setenv("ENVIRONMENT", "production")
        settings = Settings.model_construct(environment="development", log_level=None)
        assert get_log_level(settings) == "DEBUG"


class TestConfigureLogging:
    def test_writes_rotating_files(self, tmp_path):
        settings = Settings(_env_file=None, environment="test", log_level="INFO", log_dir=str(tmp_path))
        try:
            assert configure_logging(settings) == "INFO"
            structlog.get_logger("tests").error("Something failed", order_id="o-1")
            for handler in logging.getLogger().handlers:
                handler.flush()

            assert "Something failed" in (tmp_path / "makhana.log").read_text()
            assert "Something failed" in (tmp_path / "makhana_error.log").read_text()
        finally:
            for handler in logging.getLogger().handlers:
                handler.close()
            logging.getLogger().handlers = []
            structlog.reset_defaults()

    def test_info_stays_out_of_the_error_file(self, tmp_path):
        settings = Settings(_env_file=None, environment="test", log_level="INFO", log_dir=str(tmp_path))
        try:
            configure_logging(settings, log_file_prefix="store")
            structlog.get_logger("tests").info("Cart item set")
            for handler in logging.getLogger().handlers:
                handler.flush()

            assert "Cart item set" in (tmp_path / "store.log").read_text()
            assert "Cart item set" not in (tmp_path / "store_error.log").read_text()
        finally:
            for handler in logging.getLogger().handlers:
                handler.close()
            logging.getLogger().handlers = []
            structlog.reset_defaults()
