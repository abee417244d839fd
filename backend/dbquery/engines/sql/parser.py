"""
Quote- and comment-aware SQL scanning.

- split_statements: split an SQLite script into complete statements (SQL files
  on SQLite, whose driver runs one statement per execute).
- to_pyformat: rewrite ``:name`` placeholders as ``%(name)s`` for psycopg and
  pymysql.
"""

import re
import sqlite3
from collections.abc import Iterator

_PLACEHOLDER = re.compile(r"(?<!:):([A-Za-z_][A-Za-z0-9_]*)")


def _scan(sql: str, *, backslash_escapes: bool = False) -> Iterator[tuple[bool, str]]:
    """Yield ``(is_code, chunk)`` pairs.

    Single-quoted (``'...'``), double-quoted (``"..."``), backtick-quoted and
    dollar-quoted (``$$...$$``) literals as well as ``--`` and ``/* */`` comments
    are yielded with ``is_code=False`` so callers never look inside them.
    backslash_escapes: ``\\`` escapes the next character inside quoted strings
    (MySQL only; SQLite and standard PostgreSQL strings have no escapes).
    """
    current: list[str] = []
    i = 0
    length = len(sql)

    def flush() -> Iterator[tuple[bool, str]]:
        if current:
            yield True, "".join(current)
            current.clear()

    while i < length:
        ch = sql[i]

        if ch in ("'", '"', "`"):
            yield from flush()
            quote = ch
            start = i
            i += 1
            while i < length:
                c = sql[i]
                if c == quote:
                    if i + 1 < length and sql[i + 1] == quote:
                        i += 2
                        continue
                    i += 1
                    break
                if backslash_escapes and c == "\\" and quote != "`" and i + 1 < length:
                    i += 2
                    continue
                i += 1
            yield False, sql[start:i]
            continue

        if ch == "$" and i + 1 < length and sql[i + 1] == "$":
            yield from flush()
            tag_end = sql.find("$$", i + 2)
            end = length if tag_end == -1 else tag_end + 2
            yield False, sql[i:end]
            i = end
            continue

        if ch == "-" and i + 1 < length and sql[i + 1] == "-":
            yield from flush()
            nl = sql.find("\n", i)
            end = length if nl == -1 else nl + 1
            yield False, sql[i:end]
            i = end
            continue

        if ch == "/" and i + 1 < length and sql[i + 1] == "*":
            yield from flush()
            close = sql.find("*/", i + 2)
            end = length if close == -1 else close + 2
            yield False, sql[i:end]
            i = end
            continue

        current.append(ch)
        i += 1

    yield from flush()


def _has_code(sql: str) -> bool:
    return any(is_code and chunk.replace(";", "").strip() for is_code, chunk in _scan(sql))


def split_statements(sql: str) -> list[str]:
    """Split an SQLite script into statements, without their terminating ``;``.

    A statement ends at the first ``;`` for which sqlite3.complete_statement()
    agrees, so semicolons inside literals, comments and trigger bodies never
    cut it. Empty and comment-only statements are dropped.
    """
    stmts: list[str] = []
    parts = sql.split(";")
    buf = ""

    for part in parts[:-1]:
        buf += part + ";"
        if sqlite3.complete_statement(buf):
            if _has_code(buf):
                stmts.append(buf[:-1].strip())
            buf = ""

    buf += parts[-1]
    if _has_code(buf):
        stmts.append(buf.strip())
    return stmts


def to_pyformat(sql: str, *, backslash_escapes: bool = False) -> str:
    """Rewrite ``:name`` as ``%(name)s`` and escape literal ``%`` as ``%%``.

    PostgreSQL ``::type`` casts are left untouched.
    """
    out: list[str] = []
    for is_code, chunk in _scan(sql, backslash_escapes=backslash_escapes):
        chunk = chunk.replace("%", "%%")
        if is_code:
            chunk = _PLACEHOLDER.sub(r"%(\1)s", chunk)
        out.append(chunk)
    return "".join(out)
