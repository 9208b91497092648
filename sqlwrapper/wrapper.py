"""
CRUD helpers over a single SQLAlchemy connection
"""

from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union
import logging
import time
import warnings

import pandas as pd
from sqlalchemy import text
from sqlalchemy.engine import Connection, Result
from sqlalchemy.exc import SAWarning, StatementError

from .builder import STRICT_ERRORS_KEY
from .config.logging_config import DatabaseLoggerAdapter
from .dialect import Dialect, last_insert_id_sql, limit_offset_clause
from .errors import ExecutionError, InvalidArgumentError
from .mapping import make_object

logger = logging.getLogger(__name__)

Params = Union[Sequence[Any], Mapping]
RowToObject = Callable[..., Any]


class ConnectionWrapper:
    """
    Wrapper exposing common helpers over a live connection.

    Positional parameters (list/tuple) are bound with the driver's own
    placeholder style, e.g. ``?`` for SQLite and ``%s`` for MySQL and
    PostgreSQL drivers. Mapping parameters are bound to ``:name``
    placeholders.

    Outside of a transaction opened with ``begin_transaction()`` every
    statement is committed as soon as it runs.
    """

    def __init__(self, connection: Connection):
        """
        Initialize the wrapper

        Args:
            connection: Live SQLAlchemy Connection, usually from ConnectionBuilder.build()
        """
        self.connection = connection
        self.dialect = Dialect.from_driver_name(self.driver_name())
        self.logger = DatabaseLoggerAdapter(logger, {'driver_name': self.driver_name()})

    def get_connection(self) -> Connection:
        return self.connection

    def generate_id(self, table_name: str, id_field: str = 'id') -> int:
        """Generate an id for a table based on its current maximum"""
        return 1 + self.last_id(table_name, id_field)

    def last_id(self, table_name: str, id_field: str = 'id') -> int:
        """
        Get the greatest id of a table

        Args:
            table_name: Table name
            id_field: Name of the id column

        Returns:
            Maximum id, or 0 when the table has no rows
        """
        result = self.execute(f"SELECT MAX({id_field}) FROM {table_name}")
        value = result.scalar()
        return int(value) if value is not None else 0

    def delete_with_id(self, id_value: Any, table_name: str, id_field: str = 'id') -> int:
        """Delete the row with the given id and return the number of deleted rows"""
        command = f"DELETE FROM {table_name} WHERE {id_field} = :id"
        return self.run(command, {'id': id_value})

    def count_rows(self, table_name: str, id_field: str = 'id', where_clause: str = '',
                   params: Params = ()) -> int:
        """
        Count the rows of a table

        Args:
            table_name: Table name
            id_field: Column to count
            where_clause: Optional SQL WHERE clause, including the WHERE keyword
            params: Parameters for the where clause

        Returns:
            Number of rows
        """
        query = f"SELECT COUNT({id_field}) FROM {table_name} {where_clause}".strip()
        value = self.execute(query, params).scalar()
        return int(value) if value is not None else 0

    def make_limit_offset(self, limit: int = 0, offset: int = 0) -> str:
        """
        Make LIMIT and OFFSET clauses for the connection's dialect

        Supported: MySQL, PostgreSQL, SQLite, Firebird, DB2/ANSI-SQL 2008 and
        SQL Server (limit only).

        Args:
            limit: Maximum number of rows to retrieve
            offset: Number of rows to skip

        Returns:
            SQL fragment to append to a statement

        Raises:
            InvalidArgumentError: If limit or offset is not an integer
        """
        if not _is_integer(limit):
            raise InvalidArgumentError('Limit is not a number.')
        if not _is_integer(offset):
            raise InvalidArgumentError('Offset is not a number.')
        return limit_offset_clause(self.dialect, limit, offset)

    def fetch_objects(self, sql: str, params: Params = (), target_type: Optional[type] = None,
                      constructor_args: Sequence[Any] = ()) -> List[Any]:
        """
        Fetch objects from the rows returned by a query

        With a target class, each object is constructed with
        ``constructor_args`` and then receives the column values: an
        existing private attribute ``_column`` takes the value when present,
        otherwise a public attribute ``column`` is set. Without one, each row
        becomes a Record.

        Usage:
            users = wrapper.fetch_objects('SELECT * FROM user', target_type=User)
        """
        result = self.execute(sql, params)
        return self.fetch_objects_from_statement(result, target_type, constructor_args)

    def fetch_objects_from_statement(self, result: Result, target_type: Optional[type] = None,
                                     constructor_args: Sequence[Any] = ()) -> List[Any]:
        """Fetch objects from an already executed statement"""
        return [
            make_object(dict(row._mapping), target_type, constructor_args)
            for row in result
        ]

    def query_objects(self, row_to_object: RowToObject, sql: str, params: Params = (),
                      callback_args: Sequence[Any] = ()) -> List[Any]:
        """
        Run a query and transform each row into an object

        Args:
            row_to_object: Called as ``row_to_object(row, *callback_args)`` per row
            sql: Query to run
            params: Query parameters
            callback_args: Extra arguments for the callback

        Returns:
            Objects in row order

        Usage:
            class UserRepository:
                def _row_to_user(self, row):
                    return User(row['login'], row['password'])

                def all_users(self, limit=0, offset=0):
                    query = 'SELECT * FROM user' + self.wrapper.make_limit_offset(limit, offset)
                    return self.wrapper.query_objects(self._row_to_user, query)
        """
        return [row_to_object(row, *callback_args) for row in self.query(sql, params)]

    def object_with_id(self, row_to_object: RowToObject, id_value: Any, table_name: str,
                       id_field: str = 'id') -> Optional[Any]:
        """Return the object with the given id, or None if not found"""
        sql = f"SELECT * FROM {table_name} WHERE {id_field} = :id"
        objects = self.query_objects(row_to_object, sql, {'id': id_value})
        return objects[0] if objects else None

    def all_objects(self, row_to_object: RowToObject, table_name: str, limit: int = 0,
                    offset: int = 0) -> List[Any]:
        """Return the rows of a table as objects"""
        sql = f"SELECT * FROM {table_name}" + self.make_limit_offset(limit, offset)
        return self.query_objects(row_to_object, sql)

    def run(self, command: str, params: Params = ()) -> int:
        """Run a command and return the number of affected rows"""
        _, rowcount = self._execute(command, params)
        return rowcount if rowcount is not None and rowcount >= 0 else 0

    def query(self, sql: str, params: Params = ()) -> List[Dict[str, Any]]:
        """Run a query and return its rows as dictionaries"""
        result = self.execute(sql, params)
        return [dict(row._mapping) for row in result]

    def query_frame(self, sql: str, params: Params = ()) -> pd.DataFrame:
        """Run a query and return its rows as a DataFrame"""
        result = self.execute(sql, params)
        return pd.DataFrame([tuple(row) for row in result], columns=list(result.keys()))

    def execute(self, command: str, params: Params = ()) -> Result:
        """
        Execute a command with the supplied parameters

        Returns:
            Result of the statement

        Raises:
            ExecutionError: If the statement cannot be prepared or executed
        """
        result, _ = self._execute(command, params)
        return result

    def last_insert_id(self, sequence_name: Optional[str] = None) -> Optional[Any]:
        """
        Return the last id generated on this connection

        Args:
            sequence_name: Sequence name (PostgreSQL, Firebird, Oracle)

        Returns:
            Last generated id, or None when the dialect cannot report it
        """
        sql = last_insert_id_sql(self.dialect, sequence_name)
        if sql is None:
            return None
        return self.execute(sql).scalar()

    # Transaction

    def in_transaction(self) -> bool:
        return self.connection.in_transaction()

    def begin_transaction(self) -> None:
        if not self.in_transaction():
            self.connection.begin()
            self.logger.transaction('begin')

    def commit(self) -> None:
        if self.in_transaction():
            self.connection.commit()
            self.logger.transaction('commit')

    def roll_back(self) -> None:
        if self.in_transaction():
            self.connection.rollback()
            self.logger.transaction('rollback')

    # Attributes

    def driver_name(self) -> str:
        return self.connection.dialect.name

    def _is_dialect(self, expected: Dialect, driver_name: str = '') -> bool:
        return expected.matches(driver_name or self.driver_name())

    def is_mysql(self, driver_name: str = '') -> bool:
        return self._is_dialect(Dialect.MYSQL, driver_name)

    def is_postgresql(self, driver_name: str = '') -> bool:
        return self._is_dialect(Dialect.POSTGRESQL, driver_name)

    def is_sqlite(self, driver_name: str = '') -> bool:
        return self._is_dialect(Dialect.SQLITE, driver_name)

    def is_firebird(self, driver_name: str = '') -> bool:
        return self._is_dialect(Dialect.FIREBIRD, driver_name)

    def is_sqlserver(self, driver_name: str = '') -> bool:
        return self._is_dialect(Dialect.SQLSERVER, driver_name)

    def is_oracle(self, driver_name: str = '') -> bool:
        return self._is_dialect(Dialect.ORACLE, driver_name)

    def is_db2(self, driver_name: str = '') -> bool:
        return self._is_dialect(Dialect.DB2, driver_name)

    def is_odbc(self, driver_name: str = '') -> bool:
        return self._is_dialect(Dialect.ODBC, driver_name)

    # Private

    def _execute(self, command: str, params: Params) -> Tuple[Result, Optional[int]]:
        """Execute a statement, committing it unless a transaction is open"""
        autocommit = not self.connection.in_transaction()
        strict = self.connection.info.get(STRICT_ERRORS_KEY, False)
        start_time = time.time()

        try:
            with warnings.catch_warnings(record=not strict) as caught:
                if strict:
                    self._escalate_warnings()
                result = self._send(command, params)
                rowcount = result.rowcount
                if autocommit:
                    if result.returns_rows:
                        # Rows must be read before the implicit transaction ends
                        result = result.freeze()()
                    self.connection.commit()
        except (StatementError, Warning) as e:
            if autocommit and self.connection.in_transaction():
                self.connection.rollback()
            self.logger.error(f"Statement failed: {command}: {e}")
            raise ExecutionError(command, params, getattr(e, 'orig', None) or e) from e

        for warning in caught or []:
            self.logger.warning(f"{warning.category.__name__} while executing {command}: {warning.message}")

        self.logger.query(command, params, time.time() - start_time)
        return result, rowcount

    def _send(self, command: str, params: Params) -> Result:
        if isinstance(params, Mapping):
            return self.connection.execute(text(command), dict(params))
        if params:
            return self.connection.exec_driver_sql(command, tuple(params))
        return self.connection.exec_driver_sql(command)

    def _escalate_warnings(self) -> None:
        warnings.simplefilter('error', SAWarning)
        dbapi_warning = getattr(self.connection.dialect.dbapi, 'Warning', None)
        if isinstance(dbapi_warning, type) and issubclass(dbapi_warning, Warning):
            warnings.simplefilter('error', dbapi_warning)


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
