"""Change filters for MySQL binlog row events and PostgreSQL wal2json messages."""