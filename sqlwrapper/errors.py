"""Exceptions raised by the sqlwrapper helpers.

Connection failures are not wrapped: the errors raised by SQLAlchemy while
creating the engine or connecting reach the caller unchanged.
"""

from typing import Any, Optional


class SqlWrapperError(Exception):
    """Base exception for sqlwrapper errors."""
    pass


class InvalidArgumentError(SqlWrapperError, ValueError):
    """Raised when a helper receives an argument of the wrong kind."""
    pass


class ConfigurationError(SqlWrapperError):
    """Raised when a connection configuration fails validation."""
    pass


class ExecutionError(SqlWrapperError):
    """Raised when a statement cannot be prepared or executed.

    Args:
        command: SQL text that failed
        params: Parameters bound to the command
        orig: Underlying client error, if any
    """

    def __init__(self, command: str, params: Any = None, orig: Optional[BaseException] = None):
        self.command = command
        self.params = params
        self.orig = orig
        super().__init__(f"SQL error: {command}")

    def __str__(self) -> str:
        message = super().__str__()
        if self.orig is not None:
            message += f" ({self.orig.__class__.__name__}: {self.orig})"
        return message
