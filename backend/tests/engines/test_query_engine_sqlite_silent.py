"""QueryEngine in report_error="silent" mode: failures are journaled, never raised."""

from pathlib import Path

from dbquery import QueryEngine, ReportErrorEnum

INSERT = "INSERT INTO test (name, value) VALUES (:name, :value)"
BAD_SQL = "SELECT * FROM test WHERE namebbb = :n"


def test_neutral_values(silent_db: QueryEngine) -> None:
    assert silent_db.select(BAD_SQL, {"n": 1}) is None
    assert silent_db.select_all(BAD_SQL, {"n": 1}) == []
    assert silent_db.select_row(BAD_SQL, {"n": 1}) is None
    assert silent_db.select_col(BAD_SQL, {"n": 1}) == []
    assert silent_db.select_var(BAD_SQL, {"n": 1}) is None
    assert silent_db.count(BAD_SQL, {"n": 1}) is None
    assert silent_db.exec(BAD_SQL, {"n": 1}) is False
    assert len(silent_db.get_errors()) == 7


def test_flagged_verbs_neutral_values(silent_db: QueryEngine) -> None:
    bad_insert = "INSERT INTO test (namebbb) VALUES (:n)"
    assert silent_db.insert(bad_insert, {"n": "A"}) is False
    assert silent_db.insert(bad_insert, {"n": "A"}, get_last_insert_id=True) is None

    bad_update = "UPDATE test SET namebbb = :n"
    assert silent_db.update(bad_update, {"n": "A"}) is False
    assert silent_db.update(bad_update, {"n": "A"}, get_affected_rows_count=True) is None
    assert silent_db.delete("DELETE FROM nope") is False
    assert silent_db.delete("DELETE FROM nope", get_affected_rows_count=True) is None


def test_errors_are_accessible(silent_db: QueryEngine) -> None:
    assert silent_db.has_errors() is False
    silent_db.exec("SELECT * FROM first_missing")
    silent_db.exec("SELECT * FROM second_missing")

    assert silent_db.has_errors() is True
    assert [e.query for e in silent_db.get_errors()] == [
        "SELECT * FROM first_missing",
        "SELECT * FROM second_missing",
    ]
    assert silent_db.get_last_error().query == "SELECT * FROM second_missing"
    assert "second_missing" in silent_db.get_last_error().query_error.message

    silent_db.clean_errors()
    assert silent_db.has_errors() is False


def test_engine_keeps_working_after_failure(silent_db: QueryEngine) -> None:
    assert silent_db.exec("NOT SQL AT ALL") is False
    assert silent_db.insert(INSERT, {"name": "A", "value": None}, get_last_insert_id=True) == 1
    assert silent_db.select_var("SELECT name FROM test") == "A"


def test_bind_error_records_and_continues(silent_db: QueryEngine) -> None:
    assert silent_db.insert(INSERT, {"name": "A", "value": [1]}) is False

    errors = silent_db.get_errors()
    # one for the rejected value, one for executing without it
    assert len(errors) == 2
    assert "UnsupportedValueError" in errors[0].driver_error
    assert errors[1].query_error is not None
    assert silent_db.count("SELECT COUNT(*) FROM test") == 0


def test_connection_failure(make_engine, tmp_path: Path) -> None:
    engine = make_engine(
        report_error="silent", database=str(tmp_path / "missing" / "x.db")
    )
    assert engine.connect() is False
    assert engine.select_all("SELECT 1") == []
    assert engine.get_connection() is None
    assert len(engine.get_errors()) == 2
    assert engine.get_last_error().query_error is None


def test_schema_utilities_return_false(silent_db: QueryEngine, tmp_path: Path) -> None:
    assert silent_db.truncate_table("missing_table") is False
    assert silent_db.optimize_tables("missing_table", "test") is False

    path = tmp_path / "broken.sql"
    path.write_text("CREATE TABLE test (id INTEGER);", encoding="utf-8")
    assert silent_db.use_sql_file(path) is False
    assert len(silent_db.get_errors()) == 3


def test_switching_policy_at_runtime(silent_db: QueryEngine) -> None:
    silent_db.configurator.report_error = ReportErrorEnum.EXCEPTION
    assert silent_db.configurator.has_throw_on_error() is True
