"""
SQL dialect identification and dialect-specific SQL fragments
"""

from enum import Enum
from typing import FrozenSet, Optional
import logging

logger = logging.getLogger(__name__)

# MySQL-family dialects refuse OFFSET without LIMIT
UNBOUNDED_LIMIT = 9999999999999


class Dialect(Enum):
    """SQL dialects known to the wrapper, keyed by reported driver names"""

    MYSQL = frozenset({'mysql', 'mariadb'})
    POSTGRESQL = frozenset({'postgresql', 'pgsql'})
    SQLITE = frozenset({'sqlite', 'sqlite2'})
    FIREBIRD = frozenset({'firebird'})
    SQLSERVER = frozenset({'mssql', 'sqlsrv'})
    ORACLE = frozenset({'oracle', 'oci'})
    DB2 = frozenset({'db2', 'ibm_db_sa', 'ibm'})
    ODBC = frozenset({'odbc'})
    ANSI = frozenset()

    @property
    def driver_names(self) -> FrozenSet[str]:
        return self.value

    def matches(self, driver_name: str) -> bool:
        """Check whether a driver name identifies this dialect"""
        return (driver_name or '').lower() in self.value

    @property
    def supports_limit_offset(self) -> bool:
        """True for dialects using the LIMIT n OFFSET m syntax"""
        return self in (Dialect.MYSQL, Dialect.POSTGRESQL, Dialect.SQLITE)

    @classmethod
    def from_driver_name(cls, driver_name: Optional[str]) -> 'Dialect':
        """
        Resolve a dialect from a driver name

        Args:
            driver_name: Name reported by the connection (e.g. 'sqlite', 'mssql')

        Returns:
            Matching Dialect, or Dialect.ANSI for unknown names
        """
        for dialect in cls:
            if dialect.matches(driver_name):
                return dialect
        return cls.ANSI


def limit_offset_clause(dialect: Dialect, limit: int = 0, offset: int = 0) -> str:
    """
    Build the LIMIT/OFFSET fragment for a dialect

    The fragment is meant to be appended right after a SELECT statement.
    The limit part always comes before the offset part.

    Args:
        dialect: Target dialect
        limit: Maximum number of rows, 0 for no limit
        offset: Number of rows to skip, 0 for no offset

    Returns:
        SQL fragment, empty when both values are 0
    """
    sql = ''

    if limit > 0:
        if dialect.supports_limit_offset:
            sql += f" LIMIT {limit} "
        elif dialect is Dialect.FIREBIRD:
            sql += f" FIRST {limit} "
        elif dialect is Dialect.SQLSERVER:
            sql += f" TOP {limit} "
        else:
            # IBM DB2, ANSI-SQL 2008
            sql += f" FETCH FIRST {limit} ROWS ONLY "

    if offset > 0:
        if dialect.supports_limit_offset:
            if limit > 0:
                sql += f" OFFSET {offset} "
            else:
                sql += f" LIMIT {UNBOUNDED_LIMIT} OFFSET {offset} "
        elif dialect is Dialect.FIREBIRD:
            sql += f" SKIP {offset} "
        else:
            if dialect is Dialect.SQLSERVER:
                logger.warning(
                    f"Offset is not supported for SQL Server, using ANSI OFFSET {offset} ROWS"
                )
            sql += f" OFFSET {offset} ROWS "

    return sql


def last_insert_id_sql(dialect: Dialect, sequence_name: Optional[str] = None) -> Optional[str]:
    """
    Get the query returning the last generated id for a dialect

    Args:
        dialect: Target dialect
        sequence_name: Sequence (generator) name, required by Firebird and Oracle

    Returns:
        SQL query text, or None when the dialect cannot report it
    """
    if dialect is Dialect.SQLITE:
        return "SELECT last_insert_rowid()"
    elif dialect is Dialect.MYSQL:
        return "SELECT LAST_INSERT_ID()"
    elif dialect is Dialect.POSTGRESQL:
        if sequence_name:
            return f"SELECT currval('{sequence_name}')"
        return "SELECT lastval()"
    elif dialect is Dialect.SQLSERVER:
        return "SELECT @@IDENTITY"
    elif dialect is Dialect.DB2:
        return "SELECT IDENTITY_VAL_LOCAL() FROM SYSIBM.SYSDUMMY1"
    elif dialect is Dialect.FIREBIRD and sequence_name:
        return f"SELECT GEN_ID({sequence_name}, 0) FROM RDB$DATABASE"
    elif dialect is Dialect.ORACLE and sequence_name:
        return f"SELECT {sequence_name}.CURRVAL FROM DUAL"

    logger.debug(f"No last insert id query for {dialect.name}")
    return None
