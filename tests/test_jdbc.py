import pytest

from cdckit.cdc.wal import NullValueError
from cdckit.jdbc import (
    Chunk,
    Reader,
    Stream,
    build_chunk_condition,
    map_scan,
    min_max_query,
    mysql_chunk_scan_query,
    mysql_discover_tables_query,
    mysql_master_status_query,
    mysql_primary_key_query,
    mysql_table_columns_query,
    mysql_table_rows_query,
    mysql_table_schema_query,
    next_chunk_end_query,
    postgres_chunk_scan_query,
    postgres_min_query,
    postgres_next_chunk_end_query,
    postgres_rel_page_count,
    postgres_row_count_query,
    postgres_wal_lsn_query,
    postgres_with_state,
    postgres_without_state,
)

STREAM = Stream(namespace="db", name="users", cursor="updated_at")


class FakeCursor:
    def __init__(self, description):
        self.description = description


def test_stream_id():
    assert STREAM.id == "db.users"


def test_min_max_query():
    assert min_max_query(STREAM, "id") == (
        "SELECT MIN(id) AS min_value, MAX(id) AS max_value FROM db.users"
    )


def test_next_chunk_end_query_parts():
    query = next_chunk_end_query(STREAM, "id", 100)
    assert "FROM db.users" in query
    assert "WHERE id > ?" in query
    assert query.endswith("LIMIT 100) AS subquery")


def test_chunk_condition_both_bounds():
    assert build_chunk_condition("id", Chunk(min=1, max=10)) == "id >= 1 AND id <= 10"


def test_chunk_condition_single_bounds():
    assert build_chunk_condition("id", Chunk(min=5)) == "id >= 5"
    assert build_chunk_condition("id", Chunk(max=9)) == "id <= 9"


def test_mysql_chunk_scan_query_quotes_table():
    query = mysql_chunk_scan_query(STREAM, "id", Chunk(min=1, max=10))
    assert query.startswith("SELECT * FROM `db`.`users` WHERE ")
    assert query.endswith(build_chunk_condition("id", Chunk(min=1, max=10)))


def test_postgres_chunk_scan_query_quotes_table():
    query = postgres_chunk_scan_query(STREAM, "id", Chunk(max=3))
    assert query.startswith('SELECT * FROM "db"."users" WHERE ')
    assert query.endswith(build_chunk_condition("id", Chunk(max=3)))


def test_postgres_state_queries():
    assert postgres_without_state(STREAM).endswith("ORDER BY updated_at")
    with_state = postgres_with_state(STREAM)
    assert '"updated_at">$1' in with_state
    assert with_state.endswith("ASC NULLS FIRST")


def test_postgres_catalog_queries_name_table_and_schema():
    for query in (postgres_row_count_query(STREAM), postgres_rel_page_count(STREAM)):
        assert "'users'" in query
        assert "'db'" in query


def test_postgres_chunk_boundary_queries():
    end = postgres_next_chunk_end_query(STREAM, "id", 42, 500)
    assert "WHERE id > 42" in end
    assert end.endswith("LIMIT 500) AS T")
    minimum = postgres_min_query(STREAM, "id", 7)
    assert minimum.startswith("SELECT MIN(id)")
    assert minimum.endswith("WHERE id > 7")


def test_fixed_queries():
    assert postgres_wal_lsn_query() == "SELECT pg_current_wal_lsn()::text::pg_lsn"
    assert mysql_master_status_query() == "SHOW MASTER STATUS"


@pytest.mark.parametrize(
    "query",
    [
        mysql_discover_tables_query(),
        mysql_table_schema_query(),
        mysql_primary_key_query(),
        mysql_table_rows_query(),
        mysql_table_columns_query(),
    ],
)
def test_mysql_information_schema_queries(query):
    assert "INFORMATION_SCHEMA" in query
    assert "?" in query


def test_reader_rejects_trailing_semicolon():
    reader = Reader("SELECT 1;", 10, lambda query, *args: [])
    with pytest.raises(ValueError):
        reader.capture(lambda row: None)


def test_reader_passes_args_and_rows():
    seen_calls = []

    def execute(query, *args):
        seen_calls.append((query, args))
        return iter([(1,), (2,), (3,)])

    rows = []
    Reader("SELECT id FROM t WHERE x > ?", 10, execute, 5).capture(rows.append)
    assert seen_calls == [("SELECT id FROM t WHERE x > ?", (5,))]
    assert rows == [(1,), (2,), (3,)]


def test_reader_callback_error_stops_capture():
    rows = []

    def on_capture(row):
        rows.append(row)
        raise RuntimeError("stop")

    reader = Reader("SELECT 1", 10, lambda query, *args: [(1,), (2,)])
    with pytest.raises(RuntimeError):
        reader.capture(on_capture)
    assert rows == [(1,)]


def test_map_scan_without_converter():
    cursor = FakeCursor([("id", "INT"), ("name", "TEXT")])
    assert map_scan(cursor, (1, "a")) == {"id": 1, "name": "a"}


def test_map_scan_with_converter_gets_type_names():
    calls = []

    def converter(value, type_name):
        calls.append(type_name)
        return value

    cursor = FakeCursor([("id", "INT"), ("name", "TEXT")])
    assert map_scan(cursor, (1, "a"), converter) == {"id": 1, "name": "a"}
    assert calls == ["INT", "TEXT"]


def test_map_scan_null_value_becomes_none():
    def converter(value, type_name):
        if value is None:
            raise NullValueError("null")
        return value

    cursor = FakeCursor([("id", "INT"), ("name", "TEXT")])
    assert map_scan(cursor, (1, None), converter) == {"id": 1, "name": None}


def test_map_scan_converter_error_propagates():
    def converter(value, type_name):
        raise TypeError("bad")

    with pytest.raises(TypeError):
        map_scan(FakeCursor([("id", "INT")]), (1,), converter)