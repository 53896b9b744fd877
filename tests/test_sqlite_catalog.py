from __future__ import annotations

import sqlite3

import pytest

from romscope.adapters.sqlite_catalog import SQLiteCatalog, compile_clause
from romscope.core.errors import QueryError
from romscope.core.executor import CatalogQueryExecutor
from romscope.core.filters import AllOf, compile_filter
from romscope.core.models import CatalogRecord
from romscope.core.terms import parse_terms

RECORDS = [
    CatalogRecord("Redump", "Sony - PlayStation", "Crash Bandicoot (USA).zip", "u4"),
    CatalogRecord("No-Intro", "Nintendo - SNES", "Super Mario World (USA).zip", "u1"),
    CatalogRecord("No-Intro", "Nintendo - SNES", "Super Mario World (Demo).zip", "u2"),
    CatalogRecord("No-Intro", "Sega - Mega Drive", "Sonic 100% (Europe).zip", "u3"),
    CatalogRecord("No-Intro", "Nintendo - SNES", "Pokémon_Stadium.zip", "u6"),
    CatalogRecord("Redump", "Sony - PlayStation", "ÉCOLE Mario.zip", "u7"),
]


@pytest.fixture()
def catalog(tmp_path) -> SQLiteCatalog:
    store = SQLiteCatalog(str(tmp_path / "links.db"))
    store.init_db()
    store.ingest(RECORDS)
    return store


def _search(catalog: SQLiteCatalog, query: str, max_results: int = 100):
    terms = parse_terms(query)
    spec = compile_filter(terms.positives, terms.negatives, max_results)
    return CatalogQueryExecutor(catalog).execute(spec)


def test_ingest_ignores_duplicate_urls(tmp_path) -> None:
    store = SQLiteCatalog(str(tmp_path / "links.db"))
    store.init_db()
    assert store.ingest(RECORDS) == len(RECORDS)
    assert store.ingest(RECORDS[:2]) == 0
    assert store.count(AllOf(())) == len(RECORDS)


def test_results_are_sorted_by_section_console_file(catalog: SQLiteCatalog) -> None:
    results = _search(catalog, "")
    keys = [record.sort_key() for record in results]
    assert keys == sorted(keys)
    assert [record.resource_url for record in results][:3] == ["u6", "u2", "u1"]


def test_positive_and_negative_terms(catalog: SQLiteCatalog) -> None:
    results = _search(catalog, "mario -demo")
    assert [record.resource_url for record in results] == ["u1", "u7"]


def test_like_wildcards_are_literal(catalog: SQLiteCatalog) -> None:
    assert [record.resource_url for record in _search(catalog, "100%")] == ["u3"]
    assert [record.resource_url for record in _search(catalog, "o_w")] == []
    assert [record.resource_url for record in _search(catalog, "mon_st")] == ["u6"]


def test_non_ascii_is_case_folded(catalog: SQLiteCatalog) -> None:
    assert [record.resource_url for record in _search(catalog, "école")] == ["u7"]
    assert [record.resource_url for record in _search(catalog, "POKÉMON")] == ["u6"]


def test_limit_and_true_count(catalog: SQLiteCatalog) -> None:
    results = _search(catalog, "no-intro", max_results=2)
    assert len(results) == 3
    assert results.total_matches == 4

    results = _search(catalog, "no-intro", max_results=4)
    assert len(results) == 4
    assert results.total_matches == 4


def test_compile_clause_parameters() -> None:
    spec = compile_filter(["a%b"], [], max_results=1)
    sql, params = compile_clause(spec.where)
    assert sql.count("LIKE") == 3
    assert params == ["%a\\%b%"] * 3


def test_missing_table_raises_query_error(tmp_path) -> None:
    store = SQLiteCatalog(str(tmp_path / "empty.db"))
    spec = compile_filter(["mario"], [], max_results=10)
    with pytest.raises(QueryError):
        store.query(spec.where, spec.order_by, spec.limit)
    with pytest.raises(QueryError):
        store.count(spec.where)


def test_unknown_order_column_is_rejected(catalog: SQLiteCatalog) -> None:
    with pytest.raises(QueryError):
        catalog.query(AllOf(()), ("rawurl; DROP TABLE files",), 10)


def test_undecodable_rows_are_skipped(tmp_path) -> None:
    path = str(tmp_path / "links.db")
    store = SQLiteCatalog(path)
    store.init_db()
    store.ingest(RECORDS[:1])
    with sqlite3.connect(path) as conn:
        conn.execute("INSERT INTO files (section, console, file, rawurl) VALUES (NULL, 'x', 'y', 'bad')")
    results = _search(store, "")
    assert [record.resource_url for record in results] == ["u4"]
