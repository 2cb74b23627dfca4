# =============================================================================
# tests/test_config.py - Configuration Tests
# =============================================================================
# This module contains tests for:
# - Settings parsing from the environment
# - overlay_settings precedence
# - Credentials
# - Log routing
# =============================================================================

import logging
import sys

import pytest
from pydantic import ValidationError

from app.config import Settings, overlay_settings
from app.credentials import Credentials
from lib.log import SQL_LOGGER, configure_logging, route_logger
from tests.conftest import write


# =============================================================================
# Settings Tests
# =============================================================================

class TestSettings:
    """Test Settings defaults and parsing."""

    def test_log_flag_from_environment(self, monkeypatch):
        monkeypatch.setenv("LOG", "1")

        assert Settings().LOG is True

    def test_log_disabled(self, monkeypatch):
        monkeypatch.setenv("LOG", "0")

        assert Settings().LOG is False

    @pytest.mark.parametrize("value, enabled", [
        ("1", True), ("true", True), ("yes", True), ("on", True),
        ("0", False), ("false", False), ("no", False), ("off", False),
    ])
    def test_log_accepted_values(self, monkeypatch, value, enabled):
        monkeypatch.setenv("LOG", value)

        assert Settings().LOG is enabled

    def test_log_unset(self, monkeypatch):
        monkeypatch.delenv("LOG", raising=False)

        assert Settings().LOG is False

    def test_log_rejects_other_values(self, monkeypatch):
        monkeypatch.setenv("LOG", "verbose")

        with pytest.raises(ValidationError):
            Settings()

    def test_defaults(self, monkeypatch):
        for name in ("JOB_QUEUE_ADAPTER", "CABLE_ADAPTER", "SECRET_KEY_BASE"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings()

        assert settings.JOB_QUEUE_ADAPTER == "async_inline"
        assert settings.CABLE_ADAPTER == "test_print"
        assert settings.SECRET_KEY_BASE == "i_am_a_secret"
        assert settings.CONSIDER_ALL_REQUESTS_LOCAL is True
        assert settings.EAGER_LOAD is False

    def test_allowed_hosts_list(self):
        settings = Settings(ALLOWED_HOSTS="example.com, .test ,")

        assert settings.allowed_hosts_list == ["example.com", ".test"]

    def test_allowed_hosts_empty(self):
        assert Settings(ALLOWED_HOSTS="").allowed_hosts_list == []

    def test_storage_configurations(self, tmp_path):
        settings = Settings(STORAGE_ROOT=tmp_path)

        assert settings.storage_configurations == {"local": {"service": "Disk", "root": tmp_path}}


class TestOverlaySettings:
    """Test applying settings.env files."""

    def test_later_files_win(self, tmp_path):
        shared = write(tmp_path / "shared.env", "DEFAULT_URL_HOST=shared.test\nAPI_PORT=4000\n")
        chapter = write(tmp_path / "chapter.env", "DEFAULT_URL_HOST=chapter.test\n")

        settings = overlay_settings(Settings(), [shared, chapter])

        assert settings.DEFAULT_URL_HOST == "chapter.test"
        assert settings.API_PORT == 4000

    def test_missing_files_are_skipped(self, tmp_path):
        base = Settings()

        assert overlay_settings(base, [tmp_path / "missing.env"]) is base

    def test_unknown_keys_are_ignored(self, tmp_path):
        env_file = write(tmp_path / "settings.env", "NOT_A_SETTING=1\nEAGER_LOAD=true\n")

        settings = overlay_settings(Settings(), [env_file])

        assert settings.EAGER_LOAD is True
        assert not hasattr(settings, "NOT_A_SETTING")

    def test_base_is_untouched(self, tmp_path):
        base = Settings(DEFAULT_URL_HOST="base.test")
        env_file = write(tmp_path / "settings.env", "DEFAULT_URL_HOST=chapter.test\n")

        overlay_settings(base, [env_file])

        assert base.DEFAULT_URL_HOST == "base.test"


# =============================================================================
# Credentials Tests
# =============================================================================

class TestCredentials:
    """Test the shared credentials file."""

    def test_reads_values(self, tmp_path):
        content = write(tmp_path / "credentials.env", "API_TOKEN=abc123\n")
        key = write(tmp_path / "master.key", "deadbeef\n")

        credentials = Credentials(content, key)

        assert credentials.get("API_TOKEN") == "abc123"
        assert credentials["API_TOKEN"] == "abc123"
        assert "API_TOKEN" in credentials
        assert credentials.key == "deadbeef"

    def test_missing_files(self, tmp_path):
        credentials = Credentials(tmp_path / "credentials.env", tmp_path / "master.key")

        assert credentials.config == {}
        assert credentials.key is None
        assert credentials.get("API_TOKEN", "fallback") == "fallback"
        assert "API_TOKEN" not in credentials

    def test_harness_credentials(self, harness, settings):
        assert harness.credentials.content_path == settings.CREDENTIALS_PATH


# =============================================================================
# Log Routing Tests
# =============================================================================

class TestLogRouting:
    """Test LOG-driven log routing."""

    def test_enabled_logs_to_stdout(self):
        logger = route_logger("tests.enabled", True)

        stream_handlers = [h for h in logger.handlers if isinstance(h, logging.StreamHandler)]
        assert [h.stream for h in stream_handlers] == [sys.stdout]
        assert logger.level == logging.DEBUG
        assert logger.propagate is False

    def test_disabled_discards(self):
        logger = route_logger("tests.disabled", False)

        assert all(isinstance(h, logging.NullHandler) for h in logger.handlers)
        assert logger.level == logging.WARNING

    def test_reconfiguring_replaces_handler(self):
        route_logger("tests.twice", True)
        logger = route_logger("tests.twice", False)

        assert len(logger.handlers) == 1

    def test_sql_statements_logged_at_info(self):
        configure_logging(True)
        try:
            assert logging.getLogger(SQL_LOGGER).level == logging.INFO
            assert logging.getLogger("app").level == logging.DEBUG
        finally:
            configure_logging(False)
