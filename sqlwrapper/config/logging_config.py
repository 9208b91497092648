"""
Database logging configuration.

Sets up the ``sqlwrapper`` logger from the ``logging`` section of a
configuration dictionary and provides an adapter that tags records with the
database context.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Union

LOGGER_NAME = 'sqlwrapper'

LoggerLike = Union[logging.Logger, logging.LoggerAdapter]


class SafeFormatter(logging.Formatter):
    """Formatter that provides a default for the database context field."""

    def format(self, record):
        if not hasattr(record, 'database_context'):
            record.database_context = 'db'
        return super().format(record)


def setup_db_logging(config: Optional[Dict[str, Any]] = None) -> logging.Logger:
    """
    Setup database logging based on configuration.

    Args:
        config: Configuration dictionary with an optional 'logging' section

    Returns:
        Configured logger for database operations
    """
    logging_config = (config or {}).get('logging') or {}
    log_level = str(logging_config.get('level', 'INFO')).upper()

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level))

    # Remove any existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    formatter = SafeFormatter(
        '%(asctime)s.%(msecs)03d - [%(database_context)s] - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_file = logging_config.get('file')
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Prevent propagation to root logger to avoid duplicate messages
    logger.propagate = False

    return logger


def log_query(logger: LoggerLike, query: str, params: Any = None,
              duration: Optional[float] = None) -> None:
    """
    Log an executed statement at DEBUG level.

    Args:
        logger: Database logger instance
        query: SQL text
        params: Bound parameters
        duration: Execution time in seconds
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return
    message = f"Executed: {' '.join(query.split())}"
    if params:
        message += f" | params={params!r}"
    if duration is not None:
        message += f" | {duration:.3f}s"
    logger.debug(message)


def log_transaction(logger: LoggerLike, operation: str, success: bool = True,
                    error: Optional[str] = None) -> None:
    """
    Log a transaction boundary.

    Args:
        logger: Database logger instance
        operation: 'begin', 'commit' or 'rollback'
        success: Whether the operation succeeded
        error: Error message if it failed
    """
    if success:
        logger.debug(f"Transaction {operation}")
    else:
        message = f"Transaction {operation} failed"
        if error:
            message += f": {error}"
        logger.error(message)


class DatabaseLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that adds database context to log messages.

    The context is taken from ``extra['driver_name']`` and exposed to
    formatters as ``database_context``.
    """

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg, kwargs):
        kwargs.setdefault('extra', {})
        kwargs['extra']['database_context'] = self.extra.get('driver_name', 'db')
        return msg, kwargs

    def query(self, query: str, params: Any = None, duration: Optional[float] = None) -> None:
        """Log an executed statement."""
        log_query(self, query, params, duration)

    def transaction(self, operation: str, success: bool = True, error: Optional[str] = None) -> None:
        """Log a transaction boundary."""
        log_transaction(self, operation, success, error)

    def connection_event(self, event: str, details: Optional[str] = None) -> None:
        """Log a connection event ('connected', 'failed', ...)."""
        message = f"Connection {event}"
        if details:
            message += f": {details}"
        if event == 'failed':
            self.error(message)
        else:
            self.info(message)
