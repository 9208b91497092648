"""Unit tests for database logging setup."""

import logging

import pytest

from sqlwrapper.builder import ConnectionBuilder
from sqlwrapper.config.logging_config import (
    LOGGER_NAME, DatabaseLoggerAdapter, setup_db_logging
)
from sqlwrapper.wrapper import ConnectionWrapper


@pytest.fixture
def db_logger():
    """Restore the package logger after each test."""
    logger = logging.getLogger(LOGGER_NAME)
    level, handlers, propagate = logger.level, logger.handlers[:], logger.propagate
    yield logger
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate


class TestSetup:
    """Test logger configuration."""

    def test_level_from_config(self, db_logger):
        logger = setup_db_logging({'logging': {'level': 'debug'}})
        assert logger is db_logger
        assert logger.level == logging.DEBUG
        assert logger.propagate is False

    def test_no_duplicate_handlers(self, db_logger):
        setup_db_logging()
        setup_db_logging()
        assert len(db_logger.handlers) == 1

    def test_file_handler(self, db_logger, tmp_path):
        """Test statements are written to the configured file."""
        log_file = tmp_path / 'logs' / 'db.log'
        setup_db_logging({'logging': {'level': 'DEBUG', 'file': str(log_file)}})

        connection = ConnectionBuilder.new().dsn('sqlite://').build()
        try:
            ConnectionWrapper(connection).query("SELECT 1 AS one")
        finally:
            connection.close()

        for handler in db_logger.handlers:
            handler.flush()
        content = log_file.read_text()
        assert 'Executed: SELECT 1 AS one' in content
        assert '[sqlite]' in content


class TestAdapter:
    """Test the database logger adapter."""

    def test_context_added(self, caplog):
        adapter = DatabaseLoggerAdapter(logging.getLogger('test_adapter'), {'driver_name': 'mysql'})
        with caplog.at_level(logging.INFO, logger='test_adapter'):
            adapter.connection_event('connected', 'localhost')
        assert caplog.records[0].database_context == 'mysql'
        assert 'Connection connected: localhost' in caplog.text

    def test_failed_transaction_logged_as_error(self, caplog):
        adapter = DatabaseLoggerAdapter(logging.getLogger('test_adapter'))
        with caplog.at_level(logging.DEBUG, logger='test_adapter'):
            adapter.transaction('commit', success=False, error='locked')
        assert caplog.records[0].levelno == logging.ERROR
        assert caplog.records[0].database_context == 'db'
        assert 'locked' in caplog.text
