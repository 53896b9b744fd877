"""SQLite catalog adapter.

Implements the core CatalogPort on top of a single ``files`` table and
compiles the core clause tree into parameterized SQL.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Iterable, List, Optional, Sequence, Tuple

from romscope.core.errors import QueryError
from romscope.core.filters import AllOf, AnyOf, Clause, Contains, Not
from romscope.core.models import CATALOG_FIELDS, CatalogRecord

LOGGER = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"
PROGRESS_EVERY = 10000


def _lower(value: Optional[str]) -> Optional[str]:
    # Same folding as the filter compiler, so non-ASCII needles match too.
    return value.lower() if isinstance(value, str) else value


def _like_pattern(needle: str) -> str:
    for ch in (LIKE_ESCAPE, "%", "_"):
        needle = needle.replace(ch, LIKE_ESCAPE + ch)
    return f"%{needle}%"


def compile_clause(clause: Clause) -> Tuple[str, List[str]]:
    """Translate a core clause into an SQL expression and its parameters."""

    if isinstance(clause, Contains):
        if clause.field not in CATALOG_FIELDS:
            raise QueryError(f"Unknown catalog field: {clause.field}")
        return f"py_lower({clause.field}) LIKE ? ESCAPE '{LIKE_ESCAPE}'", [_like_pattern(clause.needle)]
    if isinstance(clause, Not):
        sql, params = compile_clause(clause.clause)
        return f"NOT ({sql})", params
    if isinstance(clause, (AnyOf, AllOf)):
        if not clause.clauses:
            # Empty disjunction is false, empty conjunction is true.
            return ("1" if isinstance(clause, AllOf) else "0"), []
        joiner = " AND " if isinstance(clause, AllOf) else " OR "
        parts: List[str] = []
        params: List[str] = []
        for child in clause.clauses:
            sql, child_params = compile_clause(child)
            parts.append(sql)
            params.extend(child_params)
        return "(" + joiner.join(parts) + ")", params
    raise QueryError(f"Unsupported clause: {clause!r}")


def _where_sql(where: AllOf) -> Tuple[str, List[str]]:
    if not where.clauses:
        return "", []
    sql, params = compile_clause(where)
    return f" WHERE {sql}", params


class SQLiteCatalog:
    """Thin SQLite wrapper that satisfies the CatalogPort contract."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.create_function("py_lower", 1, _lower, deterministic=True)
        return conn

    def init_db(self) -> None:
        """Create the catalog table if it does not exist.

        Fields:
        - section: top-level collection the file belongs to
        - console: platform directory inside the section
        - file: file name, possibly with sub-directories
        - rawurl: resource URL, natural key (PRIMARY KEY)
        """

        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS files (
                    section TEXT,
                    console TEXT,
                    file TEXT,
                    rawurl TEXT PRIMARY KEY
                )
                """
            )

    def ingest(self, records: Iterable[CatalogRecord]) -> int:
        """Insert records in one transaction; return how many were new."""

        inserted = 0
        processed = 0
        with self._connect() as conn:
            for record in records:
                cur = conn.execute(
                    "INSERT OR IGNORE INTO files (section, console, file, rawurl) VALUES (?, ?, ?, ?)",
                    (record.section, record.console, record.file, record.resource_url),
                )
                inserted += cur.rowcount
                processed += 1
                if processed % PROGRESS_EVERY == 0:
                    LOGGER.info("Processed %s links (%s new)...", processed, inserted)
        LOGGER.info("Ingested %s links: %s new, %s already present", processed, inserted, processed - inserted)
        return inserted

    def query(
        self, where: AllOf, order_by: Tuple[str, ...], limit: int
    ) -> List[Sequence[object]]:
        """Return (section, console, file, rawurl) rows matching ``where``."""

        unknown = [column for column in order_by if column not in CATALOG_FIELDS]
        if unknown:
            raise QueryError(f"Cannot order by {', '.join(unknown)}")
        where_sql, params = _where_sql(where)
        sql = "SELECT section, console, file, rawurl FROM files" + where_sql
        if order_by:
            sql += " ORDER BY " + ", ".join(order_by)
        sql += " LIMIT ?"
        try:
            with self._connect() as conn:
                return conn.execute(sql, [*params, limit]).fetchall()
        except sqlite3.Error as exc:
            raise QueryError(str(exc)) from exc

    def count(self, where: AllOf) -> int:
        """Return how many rows match ``where``."""

        where_sql, params = _where_sql(where)
        try:
            with self._connect() as conn:
                row = conn.execute("SELECT COUNT(*) FROM files" + where_sql, params).fetchone()
        except sqlite3.Error as exc:
            raise QueryError(str(exc)) from exc
        return int(row[0])
