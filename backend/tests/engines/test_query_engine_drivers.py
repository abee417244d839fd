"""QueryEngine SQL generation for MySQL and PostgreSQL with mocked driver connections."""

from collections.abc import Iterator
from unittest.mock import MagicMock, patch

import pymysql
import pytest

from dbquery import Configurator, ExecuteError, QueryEngine


def _settings(engine: str, **extra: object) -> dict:
    return {
        "engine": engine,
        "host": "localhost",
        "user": "root",
        "password": "",
        "database": "test_database",
        **extra,
    }


@pytest.fixture()
def mysql_conn() -> Iterator[MagicMock]:
    with patch("dbquery.core.connection.connect.pymysql.connect") as mock_connect:
        yield mock_connect.return_value


@pytest.fixture()
def pg_conn() -> Iterator[MagicMock]:
    with patch("dbquery.core.connection.connect.psycopg.connect") as mock_connect:
        yield mock_connect.return_value


def _executed(conn: MagicMock) -> list[tuple]:
    return [c.args for c in conn.cursor.return_value.execute.call_args_list]


class TestMySQL:
    def test_placeholders_are_rewritten(self, mysql_conn: MagicMock) -> None:
        db = QueryEngine(Configurator(_settings("mysql")))
        assert db.insert("INSERT INTO test (name, flag) VALUES (:name, :flag)", {"name": "A", "flag": True})

        assert _executed(mysql_conn) == [
            ("INSERT INTO test (name, flag) VALUES (%(name)s, %(flag)s)", {"name": "A", "flag": 1}),
        ]

    def test_last_insert_id_from_cursor(self, mysql_conn: MagicMock) -> None:
        mysql_conn.cursor.return_value.lastrowid = 7
        db = QueryEngine(Configurator(_settings("mysql")))
        assert db.insert("INSERT INTO test (name) VALUES (:n)", {"n": "A"}, get_last_insert_id=True) == 7

    def test_parameterless_sql_is_passed_verbatim(self, mysql_conn: MagicMock) -> None:
        db = QueryEngine(Configurator(_settings("mysql")))
        db.exec("SELECT * FROM test WHERE name LIKE '%a%'")
        assert _executed(mysql_conn) == [("SELECT * FROM test WHERE name LIKE '%a%'",)]

    def test_percent_is_escaped_with_parameters(self, mysql_conn: MagicMock) -> None:
        db = QueryEngine(Configurator(_settings("mysql")))
        db.exec("SELECT * FROM test WHERE name LIKE '%a' AND id = :id", {"id": 1})
        assert _executed(mysql_conn) == [
            ("SELECT * FROM test WHERE name LIKE '%%a' AND id = %(id)s", {"id": 1}),
        ]

    def test_select_all_maps_columns(self, mysql_conn: MagicMock) -> None:
        cursor = mysql_conn.cursor.return_value
        cursor.description = [("id",), ("name",)]
        cursor.fetchall.return_value = [(1, "A"), (2, "B")]

        db = QueryEngine(Configurator(_settings("mysql")))
        assert db.select_all("SELECT id, name FROM test") == [
            {"id": 1, "name": "A"},
            {"id": 2, "name": "B"},
        ]
        cursor.close.assert_called()

    def test_schema_statements(self, mysql_conn: MagicMock) -> None:
        db = QueryEngine(Configurator(_settings("mysql")))
        db.drop_tables("a", "b")
        db.truncate_tables("a", "b")
        db.optimize_tables("a", "b")
        assert _executed(mysql_conn) == [
            ("DROP TABLE IF EXISTS `a`, `b`",),
            ("TRUNCATE TABLE `a`",),
            ("TRUNCATE TABLE `b`",),
            ("OPTIMIZE TABLE `a`, `b`",),
        ]

    def test_transaction_statements(self, mysql_conn: MagicMock) -> None:
        db = QueryEngine(Configurator(_settings("mysql")))
        db.start_transaction()
        db.commit_transaction()
        db.start_transaction()
        db.rollback_transaction()
        assert _executed(mysql_conn) == [
            ("START TRANSACTION",),
            ("COMMIT",),
            ("START TRANSACTION",),
            ("ROLLBACK",),
        ]

    def test_driver_error_is_described(self, mysql_conn: MagicMock) -> None:
        mysql_conn.cursor.return_value.execute.side_effect = pymysql.err.OperationalError(
            1054, "Unknown column 'namebbb' in 'field list'"
        )
        db = QueryEngine(Configurator(_settings("mysql")))

        with pytest.raises(ExecuteError):
            db.select_all("SELECT namebbb FROM test")

        record = db.get_last_error()
        assert record.query_error.code == 1054
        assert record.query_error.message == "Unknown column 'namebbb' in 'field list'"
        assert record.driver_error.startswith("pymysql.err.OperationalError")

    def test_sql_file_runs_as_one_script(self, mysql_conn: MagicMock, tmp_path) -> None:
        path = tmp_path / "dump.sql"
        script = "CREATE TABLE a (id INT);\nINSERT INTO a VALUES (1);\n"
        path.write_text(script, encoding="utf-8")

        db = QueryEngine(Configurator(_settings("mysql")))
        assert db.use_sql_file(path) is True
        assert _executed(mysql_conn) == [(script,)]


class TestPostgreSQL:
    def test_placeholders_and_bool(self, pg_conn: MagicMock) -> None:
        db = QueryEngine(Configurator(_settings("pgsql")))
        db.update("UPDATE test SET flag = :flag WHERE id = :id::int", {"flag": False, "id": 3})
        assert _executed(pg_conn) == [
            ("UPDATE test SET flag = %(flag)s WHERE id = %(id)s::int", {"flag": "0", "id": 3}),
        ]

    def test_float_is_sent_as_text(self, pg_conn: MagicMock) -> None:
        db = QueryEngine(Configurator(_settings("pgsql")))
        db.exec("INSERT INTO test (value) VALUES (:value)", {"value": 1.2})
        assert _executed(pg_conn) == [
            ("INSERT INTO test (value) VALUES (%(value)s)", {"value": "1.2"}),
        ]

    def test_last_insert_id_uses_lastval(self, pg_conn: MagicMock) -> None:
        cursor = pg_conn.cursor.return_value
        cursor.description = [("lastval",)]
        cursor.fetchone.return_value = (12,)

        db = QueryEngine(Configurator(_settings("pgsql")))
        new_id = db.insert("INSERT INTO test (name) VALUES (:n)", {"n": "A"}, get_last_insert_id=True)

        assert new_id == 12
        assert _executed(pg_conn)[-1] == ("SELECT LASTVAL()",)

    def test_affected_rows(self, pg_conn: MagicMock) -> None:
        pg_conn.cursor.return_value.rowcount = 4
        db = QueryEngine(Configurator(_settings("pgsql")))
        assert db.delete("DELETE FROM test", get_affected_rows_count=True) == 4

        pg_conn.cursor.return_value.rowcount = -1
        assert db.update("UPDATE test SET a = 1", get_affected_rows_count=True) == 0

    def test_schema_statements(self, pg_conn: MagicMock) -> None:
        db = QueryEngine(Configurator(_settings("pgsql")))
        db.drop_tables("a", "b")
        db.optimize_table("a")
        assert _executed(pg_conn) == [
            ('DROP TABLE IF EXISTS "a", "b"',),
            ('VACUUM ANALYZE "a"',),
        ]

    def test_begin(self, pg_conn: MagicMock) -> None:
        db = QueryEngine(Configurator(_settings("pgsql")))
        db.start_transaction()
        db.complete_transaction()
        assert _executed(pg_conn) == [("BEGIN",), ("COMMIT",)]
