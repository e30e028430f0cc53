"""Filtering of MySQL binlog row events into change records."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any


class EventType(IntEnum):
    """Binlog event type codes."""

    UNKNOWN_EVENT = 0
    START_EVENT_V3 = 1
    QUERY_EVENT = 2
    STOP_EVENT = 3
    ROTATE_EVENT = 4
    FORMAT_DESCRIPTION_EVENT = 15
    XID_EVENT = 16
    TABLE_MAP_EVENT = 19
    WRITE_ROWS_EVENT_V0 = 20
    UPDATE_ROWS_EVENT_V0 = 21
    DELETE_ROWS_EVENT_V0 = 22
    WRITE_ROWS_EVENT_V1 = 23
    UPDATE_ROWS_EVENT_V1 = 24
    DELETE_ROWS_EVENT_V1 = 25
    HEARTBEAT_EVENT = 27
    WRITE_ROWS_EVENT_V2 = 30
    UPDATE_ROWS_EVENT_V2 = 31
    DELETE_ROWS_EVENT_V2 = 32
    GTID_EVENT = 33


_OPERATIONS = {
    EventType.WRITE_ROWS_EVENT_V1: "insert",
    EventType.WRITE_ROWS_EVENT_V2: "insert",
    EventType.UPDATE_ROWS_EVENT_V1: "update",
    EventType.UPDATE_ROWS_EVENT_V2: "update",
    EventType.DELETE_ROWS_EVENT_V1: "delete",
    EventType.DELETE_ROWS_EVENT_V2: "delete",
}


@dataclass(frozen=True)
class BinlogPosition:
    """A position in the binlog: file name and offset."""

    name: str = ""
    pos: int = 0


@dataclass
class RowsEvent:
    """A decoded rows event: the table it touches, its columns and row images."""

    schema: str
    table: str
    columns: list[str]
    rows: list[list[Any]]
    event_type: EventType
    timestamp: int = 0


@dataclass
class BinlogChange:
    """One changed row captured from the binlog."""

    stream: Any
    timestamp: datetime
    position: BinlogPosition
    kind: str
    schema: str
    table: str
    data: dict[str, Any] = field(default_factory=dict)


OnChange = Callable[[BinlogChange], None]


def convert_row_to_map(row: Sequence[Any], columns: Sequence[str]) -> dict[str, Any]:
    """Pair column names with row values; raises ValueError if the counts differ."""
    if len(columns) != len(row):
        raise ValueError(f"column count mismatch: expected {len(columns)}, got {len(row)}")
    return dict(zip(columns, row))


class BinlogChangeFilter:
    """Passes on row changes of the configured streams only.

    Streams are matched by ``namespace.name`` against the event's
    ``schema.table``.
    """

    def __init__(self, *streams: Any) -> None:
        self._streams = {f"{stream.namespace}.{stream.name}": stream for stream in streams}

    def filter_rows_event(self, event: RowsEvent, on_change: OnChange) -> None:
        """Call ``on_change`` for every row of ``event`` that belongs to a known stream.

        For updates only the after-images are passed on. Events of other
        types, and tables with no stream, are ignored.
        """
        stream = self._streams.get(f"{event.schema}.{event.table}")
        if stream is None:
            return
        try:
            operation = _OPERATIONS[EventType(event.event_type)]
        except (KeyError, ValueError):
            return

        rows = event.rows[1::2] if operation == "update" else event.rows
        timestamp = datetime.fromtimestamp(event.timestamp, tz=timezone.utc)
        for row in rows:
            record = convert_row_to_map(row, event.columns)
            record["cdc_type"] = operation
            on_change(
                BinlogChange(
                    stream=stream,
                    timestamp=timestamp,
                    position=BinlogPosition(),
                    kind=operation,
                    schema=event.schema,
                    table=event.table,
                    data=record,
                )
            )