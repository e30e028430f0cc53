"""SQL text for chunked snapshot reads, and helpers for running and scanning queries."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from cdckit.cdc.wal import NullValueError

Converter = Callable[[Any, str], Any]


@dataclass(frozen=True)
class Stream:
    """A table to read from: its namespace (schema), name and cursor column."""

    namespace: str
    name: str
    cursor: str = ""

    @property
    def id(self) -> str:
        """Identifier of the stream, ``namespace.name``."""
        return f"{self.namespace}.{self.name}"


@dataclass(frozen=True)
class Chunk:
    """A range of values of the filter column; either bound may be open (None)."""

    min: Any = None
    max: Any = None


class Reader:
    """Runs a base query and hands every row it yields to a callback."""

    def __init__(
        self,
        query: str,
        batch_size: int,
        execute: Callable[..., Iterable[Any]],
        *args: Any,
    ) -> None:
        self.query = query
        self.batch_size = batch_size
        self.args = args
        self._execute = execute

    def capture(self, on_capture: Callable[[Any], None]) -> None:
        """Execute the query and call ``on_capture`` for each row.

        Raises ValueError if the base query ends with ``;``. Errors from
        the executor or the callback propagate unchanged.
        """
        if self.query.endswith(";"):
            raise ValueError(f"base query ends with ';': {self.query}")
        for row in self._execute(self.query, *self.args):
            on_capture(row)


def _type_name(type_code: Any) -> str:
    if type_code is None:
        return ""
    return type_code if isinstance(type_code, str) else str(type_code)


def map_scan(
    cursor: Any, row: Sequence[Any], converter: Converter | None = None
) -> dict[str, Any]:
    """Map a fetched row to ``{column: value}`` using the cursor's description.

    When ``converter`` is given each value goes through it together with
    the column's database type name; a :class:`NullValueError` from it
    yields None for that column.
    """
    description = cursor.description or ()
    if len(description) != len(row):
        raise ValueError(
            f"column count mismatch: expected {len(description)}, got {len(row)}"
        )
    result: dict[str, Any] = {}
    for column, value in zip(description, row):
        name = column[0]
        if converter is None:
            result[name] = value
            continue
        try:
            result[name] = converter(value, _type_name(column[1]))
        except NullValueError:
            result[name] = None
    return result


def min_max_query(stream: Stream, column: str) -> str:
    """Query for the MIN and MAX of a column."""
    return (
        f"SELECT MIN({column}) AS min_value, MAX({column}) AS max_value "
        f"FROM {stream.namespace}.{stream.name}"
    )


def next_chunk_end_query(stream: Stream, column: str, chunk_size: int) -> str:
    """Query for the end of the next chunk after a bound given as a parameter."""
    return (
        f"SELECT MAX({column}) FROM (SELECT {column} FROM {stream.namespace}.{stream.name} "
        f"WHERE {column} > ? ORDER BY {column} LIMIT {chunk_size}) AS subquery"
    )


def build_chunk_condition(filter_column: str, chunk: Chunk) -> str:
    """WHERE condition selecting the rows of a chunk."""
    if chunk.min is not None and chunk.max is not None:
        return f"{filter_column} >= {chunk.min} AND {filter_column} <= {chunk.max}"
    if chunk.min is not None:
        return f"{filter_column} >= {chunk.min}"
    return f"{filter_column} <= {chunk.max}"


def postgres_without_state(stream: Stream) -> str:
    """Full-table read ordered by the cursor column."""
    return f'SELECT * FROM "{stream.namespace}"."{stream.name}" ORDER BY {stream.cursor}'


def postgres_with_state(stream: Stream) -> str:
    """Read of rows past a cursor value given as ``$1``."""
    return (
        f'SELECT * FROM "{stream.namespace}"."{stream.name}" where "{stream.cursor}">$1 '
        f'ORDER BY "{stream.cursor}" ASC NULLS FIRST'
    )


def postgres_row_count_query(stream: Stream) -> str:
    """Query for the estimated row count of a table."""
    return (
        "SELECT reltuples::bigint AS approx_row_count FROM pg_class c "
        "JOIN pg_namespace n ON n.oid = c.relnamespace "
        f"WHERE c.relname = '{stream.name}' AND n.nspname = '{stream.namespace}';"
    )


def postgres_rel_page_count(stream: Stream) -> str:
    """Query for the page count of a table."""
    return (
        f"SELECT relpages FROM pg_class WHERE relname = '{stream.name}' AND relnamespace = "
        f"(SELECT oid FROM pg_namespace WHERE nspname = '{stream.namespace}')"
    )


def postgres_wal_lsn_query() -> str:
    """Query for the current WAL LSN."""
    return "SELECT pg_current_wal_lsn()::text::pg_lsn"


def postgres_next_chunk_end_query(
    stream: Stream, filter_column: str, filter_value: Any, batch_size: int
) -> str:
    """Query for the end of the next chunk after ``filter_value``."""
    return (
        f"SELECT MAX({filter_column}) FROM (SELECT {filter_column} "
        f'FROM "{stream.namespace}"."{stream.name}" WHERE {filter_column} > {filter_value} '
        f"ORDER BY {filter_column} ASC LIMIT {batch_size}) AS T"
    )


def postgres_min_query(stream: Stream, filter_column: str, filter_value: Any) -> str:
    """Query for the smallest value of a column above ``filter_value``."""
    return (
        f'SELECT MIN({filter_column}) FROM "{stream.namespace}"."{stream.name}" '
        f"WHERE {filter_column} > {filter_value}"
    )


def postgres_chunk_scan_query(stream: Stream, filter_column: str, chunk: Chunk) -> str:
    """Read of the rows of one chunk."""
    condition = build_chunk_condition(filter_column, chunk)
    return f'SELECT * FROM "{stream.namespace}"."{stream.name}" WHERE {condition}'


def mysql_chunk_scan_query(stream: Stream, filter_column: str, chunk: Chunk) -> str:
    """Read of the rows of one chunk."""
    condition = build_chunk_condition(filter_column, chunk)
    return f"SELECT * FROM `{stream.namespace}`.`{stream.name}` WHERE {condition}"


def mysql_discover_tables_query() -> str:
    """Query listing the base tables of a schema given as a parameter."""
    return """
		SELECT 
			TABLE_NAME, 
			TABLE_SCHEMA 
		FROM 
			INFORMATION_SCHEMA.TABLES 
		WHERE 
			TABLE_SCHEMA = ? 
			AND TABLE_TYPE = 'BASE TABLE'
	"""


def mysql_table_schema_query() -> str:
    """Query for the column definitions of a table."""
    return """
		SELECT 
			COLUMN_NAME, 
			COLUMN_TYPE,
			DATA_TYPE, 
			IS_NULLABLE,
			COLUMN_KEY
		FROM 
			INFORMATION_SCHEMA.COLUMNS 
		WHERE 
			TABLE_SCHEMA = ? AND TABLE_NAME = ?
		ORDER BY 
			ORDINAL_POSITION
	"""


def mysql_primary_key_query() -> str:
    """Query for the primary-key column of a table."""
    return """
        SELECT COLUMN_NAME 
        FROM INFORMATION_SCHEMA.KEY_COLUMN_USAGE 
        WHERE TABLE_SCHEMA = DATABASE() 
        AND TABLE_NAME = ? 
        AND CONSTRAINT_NAME = 'PRIMARY' 
        LIMIT 1
	"""


def mysql_table_rows_query() -> str:
    """Query for the estimated row count of a table."""
    return """
		SELECT TABLE_ROWS
		FROM INFORMATION_SCHEMA.TABLES
		WHERE TABLE_SCHEMA = DATABASE()
		AND TABLE_NAME = ?
	"""


def mysql_master_status_query() -> str:
    """Query for the current binlog position."""
    return "SHOW MASTER STATUS"


def mysql_table_columns_query() -> str:
    """Query for the column names of a table, in order."""
    return """
		SELECT COLUMN_NAME 
		FROM INFORMATION_SCHEMA.COLUMNS 
		WHERE TABLE_SCHEMA = ? AND TABLE_NAME = ? 
		ORDER BY ORDINAL_POSITION
	"""