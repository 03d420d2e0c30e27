"""Tests for logging setup."""

import logging

import pytest

from securestore.utils.logging import get_logger, setup_logging


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_explicit_level(self):
        """Should apply the requested level to the root logger."""
        root = setup_logging(level="debug")

        assert root is logging.getLogger()
        assert root.level == logging.DEBUG

    def test_level_from_environment(self, monkeypatch):
        """Should fall back to SECURESTORE_LOG_LEVEL."""
        monkeypatch.setenv("SECURESTORE_LOG_LEVEL", "ERROR")

        assert setup_logging().level == logging.ERROR

    def test_log_file(self, tmp_path):
        """Should also write to the given file."""
        # Arrange
        log_file = tmp_path / "securestore.log"
        setup_logging(level="INFO", log_file=str(log_file))

        # Act
        get_logger("securestore.test").info("Stored secret 'k' in namespace 'ns'")
        for handler in logging.getLogger().handlers:
            handler.flush()

        # Assert
        assert "Stored secret 'k'" in log_file.read_text()


class TestGetLogger:
    """Tests for get_logger()."""

    def test_module_loggers_are_named(self):
        """Facade modules should log under their module name."""
        from securestore.secrets import selector, store

        assert store.logger is get_logger("securestore.secrets.store")
        assert selector.logger.name == "securestore.secrets.selector"
