"""
sqlwrapper - a fluent connection builder and CRUD helpers over SQLAlchemy.

This package provides:
- ConnectionBuilder: chained setup of a database connection
- ConnectionWrapper: id generation, row counting, dialect-aware
  LIMIT/OFFSET clauses, row to object mapping and guarded transactions
"""

from .builder import ConnectionBuilder
from .wrapper import ConnectionWrapper
from .dialect import Dialect, limit_offset_clause, last_insert_id_sql
from .mapping import Record, hydrate, make_object
from .errors import (
    SqlWrapperError,
    InvalidArgumentError,
    ExecutionError,
    ConfigurationError,
)

__version__ = "1.0.0"

__all__ = [
    'ConnectionBuilder',
    'ConnectionWrapper',
    'Dialect',
    'limit_offset_clause',
    'last_insert_id_sql',
    'Record',
    'hydrate',
    'make_object',
    'SqlWrapperError',
    'InvalidArgumentError',
    'ExecutionError',
    'ConfigurationError',
]
