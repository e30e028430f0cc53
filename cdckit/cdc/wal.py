"""Filtering of wal2json logical-replication messages into change records."""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

Converter = Callable[[Any, str], Any]

_TIMESTAMP = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[ T](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?"
    r"(?:([+-])(\d{2})(?::?(\d{2}))?|Z)?"
)


class NullValueError(Exception):
    """Raised by a type converter when the value is SQL NULL."""


@dataclass
class WALState:
    """Saved replication state: the last confirmed LSN."""

    lsn: str = ""

    def is_empty(self) -> bool:
        """Tell whether no LSN has been recorded."""
        return not self.lsn


@dataclass
class WALChange:
    """One changed row captured from the write-ahead log."""

    stream: Any
    timestamp: datetime | None
    lsn: int
    kind: str
    schema: str
    table: str
    data: dict[str, Any] = field(default_factory=dict)


OnChange = Callable[[WALChange], None]


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValueError(f"timestamp must be a string, got {value!r}")
    match = _TIMESTAMP.fullmatch(value.strip())
    if match is None:
        raise ValueError(f"unrecognised timestamp {value!r}")
    year, month, day, hour, minute, second, fraction, sign, off_h, off_m = match.groups()
    micros = int((fraction or "0")[:6].ljust(6, "0"))
    tz = timezone.utc
    if sign:
        offset = timedelta(hours=int(off_h), minutes=int(off_m or 0))
        tz = timezone(offset if sign == "+" else -offset)
    return datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second), micros, tzinfo=tz
    )


class WALChangeFilter:
    """Passes on changes of the configured streams only, converting column values.

    Streams are matched by their ``id`` against the change's ``schema.table``.
    """

    def __init__(self, converter: Converter, *streams: Any) -> None:
        self._converter = converter
        self._tables = {stream.id: stream for stream in streams}

    def _build(self, values: Sequence[Any], types: Sequence[str], names: Sequence[str]) -> dict:
        data: dict[str, Any] = {}
        for value, column_type, name in zip(values, types, names, strict=True):
            try:
                data[name] = self._converter(value, column_type)
            except NullValueError:
                data[name] = None
        return data

    def filter_change(self, lsn: int, payload: str | bytes, on_change: OnChange) -> None:
        """Decode a wal2json message and call ``on_change`` for each matching change.

        Deletes carry the old key values; other kinds carry the new
        column values. Raises ValueError when the message cannot be
        parsed or a value cannot be converted.
        """
        try:
            message = json.loads(payload)
            timestamp = _parse_timestamp(message.get("timestamp"))
        except (ValueError, AttributeError) as exc:
            raise ValueError(f"failed to parse change received from wal logs: {exc}") from exc

        for change in message.get("change") or []:
            schema = change.get("schema", "")
            table = change.get("table", "")
            stream = self._tables.get(f"{schema}.{table}")
            if stream is None:
                continue

            kind = change.get("kind", "")
            try:
                if kind == "delete":
                    old = change.get("oldkeys") or {}
                    data = self._build(
                        old.get("keyvalues") or [],
                        old.get("keytypes") or [],
                        old.get("keynames") or [],
                    )
                else:
                    data = self._build(
                        change.get("columnvalues") or [],
                        change.get("columntypes") or [],
                        change.get("columnnames") or [],
                    )
            except NullValueError:
                raise
            except Exception as exc:
                raise ValueError(f"failed to convert change data: {exc}") from exc

            on_change(
                WALChange(
                    stream=stream,
                    timestamp=timestamp,
                    lsn=lsn,
                    kind=kind,
                    schema=schema,
                    table=table,
                    data=data,
                )
            )