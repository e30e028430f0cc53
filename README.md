# cdckit

Building blocks for change-data-capture (CDC) pipelines that move rows out of
MySQL and PostgreSQL.

## What is inside

- **`cdckit.schema`** is a small JSON Schema object model.
  - `cdckit.schema.base` defines `BasicSchema`, `StringOrArray` and `SpecVersion`.
  - `cdckit.schema.simple` defines `SimpleSchema` and `NumericSchema`.
  - `cdckit.schema.containers` defines `ArraySchema`, `ObjectSchema`, `BoolOrSchema` and `new_map_schema`.
  - `cdckit.schema.loading` provides `from_json`, `from_dict` and `to_json` for reading and writing schema documents.
- **`cdckit.annotation`** validates a set of `@jsonSchema` attributes with
  `create_annotation` and returns a `SchemaAnnotation`. It raises
  `AnnotationError` (a `ValueError`) when an attribute is unknown or holds a bad
  value.
- **`cdckit.naming`** has helpers for identifiers, package/type paths and
  definition keys. Examples are `is_ident`, `is_package_type`,
  `def_key_from_path`, `ref_to_filename` and `ref_to_var_name`.
- **`cdckit.jdbc`** covers SQL snapshot reads.
  - It builds the SQL text for chunked snapshot scans, row counts and table discovery on MySQL and PostgreSQL.
  - `Reader` runs a query through an executor callable and passes each row to a callback.
  - `map_scan` turns a DB-API row into a `{column: value}` dict.
- **`cdckit.cdc.binlog`**: `BinlogChangeFilter` turns `RowsEvent`s into
  `BinlogChange` records, and only for the configured streams. Streams are
  matched by `namespace.name`. For updates, only the after-images are passed on.
- **`cdckit.cdc.wal`**: `WALChangeFilter` decodes wal2json messages into
  `WALChange` records. It passes every value through a converter you supply. A
  converter that raises `NullValueError` gives `None` for that column.
- **`cdckit.logger`** covers logging and progress reporting.
  - `configure` logs to a coloured console. Given a folder, it also writes to a rotating JSON-lines file under `<folder>/logs/sync_<UTC timestamp>/`.
  - It has `info`, `debug`, `warn` and `error`. `fatal` logs and then raises `SystemExit(1)`.
  - `file_logger` writes JSON state files.
  - `stats_logger` writes a `stats.json` progress snapshot at a fixed interval, with memory taken from psutil.
  - `ProcessOutputReader` sorts a process's output lines into info and error, and keeps following Java stack traces.

## Installation

```
pip install cdckit
```

## Examples

Building a chunk scan query:

```python
from cdckit.jdbc import Chunk, Stream, postgres_chunk_scan_query

stream = Stream(namespace="public", name="orders", cursor="id")
print(postgres_chunk_scan_query(stream, "id", Chunk(min=1, max=1000)))
# SELECT * FROM "public"."orders" WHERE id >= 1 AND id <= 1000
```

Filtering WAL changes:

```python
from cdckit.cdc.wal import WALChangeFilter

changes = []
wal_filter = WALChangeFilter(lambda value, column_type: value, stream)
wal_filter.filter_change(lsn, payload_bytes, changes.append)
```

Round-tripping a schema:

```python
from cdckit.schema.loading import from_json, to_json

schema = from_json('{"type": "string", "format": "email"}')
print(to_json(schema, indent=2))
```

Validating annotation attributes:

```python
from cdckit.annotation import create_annotation

anno = create_annotation({"required": "true", "maxLength": "200"})
assert anno.required and anno.max_length == 200
```

## What it does not do

cdckit works on data you hand it. It has these limits:

- It opens no database or replication connections. Binlog events and WAL payloads must be read by your own client and passed to the filters.
- It does not generate schemas from type definitions. `cdckit.annotation` only validates annotation attributes.
- It provides no command-line tool.

## Running the tests

```
pip install -e ".[test]"
pytest
```