"""Unit tests for dialect resolution and dialect-specific SQL."""

import logging

import pytest

from sqlwrapper.dialect import (
    Dialect, UNBOUNDED_LIMIT, last_insert_id_sql, limit_offset_clause
)


class TestDialectResolution:
    """Test driver name to dialect resolution."""

    @pytest.mark.parametrize("name, expected", [
        ('mysql', Dialect.MYSQL),
        ('mariadb', Dialect.MYSQL),
        ('postgresql', Dialect.POSTGRESQL),
        ('pgsql', Dialect.POSTGRESQL),
        ('sqlite', Dialect.SQLITE),
        ('sqlite2', Dialect.SQLITE),
        ('firebird', Dialect.FIREBIRD),
        ('mssql', Dialect.SQLSERVER),
        ('sqlsrv', Dialect.SQLSERVER),
        ('oracle', Dialect.ORACLE),
        ('oci', Dialect.ORACLE),
        ('db2', Dialect.DB2),
        ('ibm', Dialect.DB2),
        ('odbc', Dialect.ODBC),
        ('SQLite', Dialect.SQLITE),
    ])
    def test_known_names(self, name, expected):
        """Test every known identifier resolves to its dialect."""
        assert Dialect.from_driver_name(name) is expected

    @pytest.mark.parametrize("name", ['', None, 'hsqldb', 'duckdb'])
    def test_unknown_names_fall_back_to_ansi(self, name):
        """Test unknown identifiers resolve to ANSI."""
        assert Dialect.from_driver_name(name) is Dialect.ANSI

    def test_ansi_matches_nothing(self):
        """Test the fallback dialect has no identifiers."""
        assert not Dialect.ANSI.matches('')
        assert Dialect.ANSI.driver_names == frozenset()


class TestLimitOffsetClause:
    """Test LIMIT/OFFSET fragments per dialect."""

    @pytest.mark.parametrize("dialect", [Dialect.MYSQL, Dialect.POSTGRESQL, Dialect.SQLITE])
    def test_limit_offset_family(self, dialect):
        """Test LIMIT n OFFSET m dialects."""
        assert limit_offset_clause(dialect, 10).strip() == 'LIMIT 10'
        assert limit_offset_clause(dialect, 10, 50).split() == ['LIMIT', '10', 'OFFSET', '50']
        assert limit_offset_clause(dialect, 0, 50).split() == [
            'LIMIT', str(UNBOUNDED_LIMIT), 'OFFSET', '50'
        ]

    def test_firebird(self):
        """Test FIRST/SKIP."""
        assert limit_offset_clause(Dialect.FIREBIRD, 10, 50).split() == ['FIRST', '10', 'SKIP', '50']
        assert limit_offset_clause(Dialect.FIREBIRD, 0, 5).strip() == 'SKIP 5'

    def test_sqlserver_limit(self):
        """Test TOP for SQL Server limits."""
        assert limit_offset_clause(Dialect.SQLSERVER, 10).strip() == 'TOP 10'

    def test_sqlserver_offset_falls_back_to_ansi(self, caplog):
        """Test SQL Server offsets use the ANSI form and warn."""
        with caplog.at_level(logging.WARNING, logger='sqlwrapper.dialect'):
            sql = limit_offset_clause(Dialect.SQLSERVER, 10, 50)
        assert sql.split() == ['TOP', '10', 'OFFSET', '50', 'ROWS']
        assert 'SQL Server' in caplog.text

    @pytest.mark.parametrize("dialect", [Dialect.DB2, Dialect.ORACLE, Dialect.ODBC, Dialect.ANSI])
    def test_ansi_family(self, dialect):
        """Test FETCH FIRST / OFFSET ROWS."""
        sql = limit_offset_clause(dialect, 10, 50)
        assert sql.split() == ['FETCH', 'FIRST', '10', 'ROWS', 'ONLY', 'OFFSET', '50', 'ROWS']

    def test_empty(self):
        """Test no fragment without limit or offset."""
        for dialect in Dialect:
            assert limit_offset_clause(dialect) == ''


class TestLastInsertIdSql:
    """Test last insert id queries."""

    def test_sqlite(self):
        assert last_insert_id_sql(Dialect.SQLITE) == "SELECT last_insert_rowid()"

    def test_postgresql_with_and_without_sequence(self):
        assert last_insert_id_sql(Dialect.POSTGRESQL) == "SELECT lastval()"
        assert last_insert_id_sql(Dialect.POSTGRESQL, 'person_id_seq') == \
            "SELECT currval('person_id_seq')"

    def test_sequence_required(self):
        """Test Firebird and Oracle need a sequence name."""
        assert last_insert_id_sql(Dialect.FIREBIRD) is None
        assert last_insert_id_sql(Dialect.ORACLE) is None
        assert 'GEN_ID(gen_person, 0)' in last_insert_id_sql(Dialect.FIREBIRD, 'gen_person')
        assert 'seq_person.CURRVAL' in last_insert_id_sql(Dialect.ORACLE, 'seq_person')

    def test_unsupported(self):
        assert last_insert_id_sql(Dialect.ODBC) is None
        assert last_insert_id_sql(Dialect.ANSI) is None
