from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from dbquery import Configurator, QueryEngine
from dbquery.registry import get_registry

CREATE_TEST_TABLE = """
CREATE TABLE test (
    id    INTEGER      PRIMARY KEY AUTOINCREMENT,
    name  VARCHAR(255) NOT NULL,
    value VARCHAR(255) NULL
)
"""


@pytest.fixture()
def sqlite_settings(tmp_path: Path) -> dict[str, Any]:
    return {
        "engine": "sqlite",
        "host": "127.0.0.1",
        "user": "",
        "password": "",
        "database": str(tmp_path / "test_database.db"),
        "report_error": "exception",
    }


@pytest.fixture()
def make_engine(
    sqlite_settings: dict[str, Any],
) -> Iterator[Callable[..., QueryEngine]]:
    """Factory for sqlite QueryEngines; every engine is disconnected on teardown."""
    engines: list[QueryEngine] = []

    def _make(**overrides: Any) -> QueryEngine:
        engine = QueryEngine(Configurator({**sqlite_settings, **overrides}))
        engines.append(engine)
        return engine

    yield _make
    for engine in engines:
        engine.disconnect()


@pytest.fixture()
def db(make_engine: Callable[..., QueryEngine]) -> QueryEngine:
    """sqlite engine in exception mode with an empty ``test`` table."""
    engine = make_engine()
    engine.exec(CREATE_TEST_TABLE)
    return engine


@pytest.fixture()
def silent_db(make_engine: Callable[..., QueryEngine]) -> QueryEngine:
    """sqlite engine in silent mode with an empty ``test`` table."""
    engine = make_engine(report_error="silent")
    engine.exec(CREATE_TEST_TABLE)
    return engine


@pytest.fixture()
def registry() -> Iterator[None]:
    get_registry().clear()
    yield
    get_registry().clear()
