"""
Fluent builder for database connections

Example:

    connection = (
        ConnectionBuilder.new()
        .dsn('mysql+pymysql://127.0.0.1/mydb')
        .username('myuser')
        .password('mypass')
        .in_strict_mode()
        .persistent()
        .mysql_utf8()
        .build()
    )
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, URL, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from .config.db_config import load_config, validate_config
from .config.logging_config import DatabaseLoggerAdapter

logger = logging.getLogger(__name__)

STRICT_ERRORS_KEY = 'strict_errors'


class ConnectionBuilder:
    """Accumulates connection parameters and builds a live connection"""

    def __init__(self):
        self._dsn: str = ''
        self._username: Optional[str] = None
        self._password: Optional[str] = None
        self._options: Dict[str, Any] = {}
        self._engine_options: Dict[str, Any] = {}
        self._strict_errors = False

    @classmethod
    def new(cls) -> 'ConnectionBuilder':
        return cls()

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'ConnectionBuilder':
        """
        Create a builder from a configuration dictionary

        Args:
            config: Configuration with a 'database' section (see db_config)

        Returns:
            Populated ConnectionBuilder
        """
        validate_config(config)
        db = config['database']

        builder = (
            cls()
            .dsn(db['url'])
            .options(db.get('options') or {})
            .engine_options(db.get('engine_options') or {})
            .strict_errors(bool(db.get('strict_errors', False)))
        )
        if db.get('username') is not None:
            builder.username(db['username'])
        if db.get('password') is not None:
            builder.password(db['password'])
        if db.get('persistent') is not None:
            builder.persistence(db['persistent'])
        if db.get('mysql_utf8'):
            builder.mysql_utf8()
        return builder

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> 'ConnectionBuilder':
        """Create a builder from a YAML configuration file"""
        return cls.from_config(load_config(path))

    def build(self) -> Connection:
        """
        Build the connection. This is the last method of the chain.

        Returns:
            Live SQLAlchemy Connection

        Raises:
            sqlalchemy.exc.SQLAlchemyError: If the URL is invalid or the
                database rejects the connection
        """
        engine_args = dict(self._engine_options)
        engine_args['connect_args'] = dict(self._options)

        safe_url = '<invalid url>'
        db_logger = DatabaseLoggerAdapter(logger)
        engine = None
        try:
            url = self.url()
            safe_url = url.render_as_string(hide_password=True)
            db_logger = DatabaseLoggerAdapter(logger, {'driver_name': url.get_backend_name()})
            engine = create_engine(url, **engine_args)
            connection = engine.connect()
        except SQLAlchemyError as e:
            if engine is not None:
                engine.dispose()
            db_logger.connection_event('failed', f"{safe_url}: {e}")
            raise

        connection.info[STRICT_ERRORS_KEY] = self._strict_errors
        db_logger.connection_event('connected', f"{safe_url} (strict_errors={self._strict_errors})")
        return connection

    def url(self) -> URL:
        """Get the database URL with the configured credentials applied"""
        url = make_url(self._dsn)
        credentials = {}
        if self._username is not None:
            credentials['username'] = self._username
        if self._password is not None:
            credentials['password'] = self._password
        return url.set(**credentials) if credentials else url

    # Basic data

    def dsn(self, dsn: str) -> 'ConnectionBuilder':
        self._dsn = dsn
        return self

    def username(self, username: str) -> 'ConnectionBuilder':
        self._username = username
        return self

    def password(self, password: str) -> 'ConnectionBuilder':
        self._password = password
        return self

    def options(self, options: Any) -> 'ConnectionBuilder':
        """Set the driver options (connect_args); non-mappings reset them"""
        self._options = dict(options) if isinstance(options, Mapping) else {}
        return self

    def engine_options(self, options: Any) -> 'ConnectionBuilder':
        """Set extra create_engine() arguments; non-mappings reset them"""
        self._engine_options = dict(options) if isinstance(options, Mapping) else {}
        return self

    # Strict errors

    def strict_errors(self, enabled: bool = True) -> 'ConnectionBuilder':
        self._strict_errors = enabled
        return self

    def in_strict_mode(self) -> 'ConnectionBuilder':
        return self.strict_errors(True)

    def not_in_strict_mode(self) -> 'ConnectionBuilder':
        return self.strict_errors(False)

    # Persistence

    def persistence(self, enabled: bool = True) -> 'ConnectionBuilder':
        """Keep pooled connections alive (True) or open a fresh one per checkout (False)"""
        self._ensure_options_are_mappings()
        if enabled:
            self._engine_options.pop('poolclass', None)
            self._engine_options['pool_pre_ping'] = True
        else:
            self._engine_options.pop('pool_pre_ping', None)
            self._engine_options['poolclass'] = NullPool
        return self

    def persistent(self) -> 'ConnectionBuilder':
        return self.persistence(True)

    def not_persistent(self) -> 'ConnectionBuilder':
        return self.persistence(False)

    # MySQL

    def mysql_utf8(self) -> 'ConnectionBuilder':
        """Use UTF-8 for the session (MySQL drivers only)"""
        self._ensure_options_are_mappings()
        self._options['charset'] = 'utf8'
        self._options['init_command'] = 'SET NAMES utf8'
        return self

    def _ensure_options_are_mappings(self) -> None:
        if not isinstance(self._options, Mapping):
            self._options = {}
        if not isinstance(self._engine_options, Mapping):
            self._engine_options = {}
