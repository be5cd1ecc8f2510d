"""Append-only log record stores, ordered by timestamp within a partition."""

import bisect
import itertools
import logging
import threading

from sqlalchemy import Column, Index, Integer, MetaData, String, Table, Text, create_engine, desc, insert, select
from sqlalchemy.exc import SQLAlchemyError

from log_service.errors import ConfigurationError, StoreUnavailable
from log_service.models import LogRecord

logger = logging.getLogger(__name__)


class LogStore:
    """Interface shared by the store backends.

    Records are immutable once written; there is no update or delete.
    """

    def put(self, record: LogRecord) -> None:
        raise NotImplementedError

    def query_recent(self, partition_key: str, limit: int) -> list[LogRecord]:
        """Up to *limit* records of *partition_key*, newest first."""
        raise NotImplementedError

    def close(self) -> None:
        pass


class InMemoryLogStore(LogStore):
    """Thread-safe in-memory store keyed by (partition, timestamp)."""

    def __init__(self, name="logs"):
        self.name = name
        self._partitions: dict[str, list] = {}
        self._seq = itertools.count()
        self._lock = threading.Lock()

    def put(self, record):
        # The insertion counter breaks timestamp ties so equal timestamps
        # come back newest-insertion first.
        key = (record.date_time, next(self._seq))
        with self._lock:
            bisect.insort(self._partitions.setdefault(record.log_partition, []), (key, record))

    def query_recent(self, partition_key, limit):
        with self._lock:
            entries = self._partitions.get(partition_key, [])
            return [record for _, record in reversed(entries[-limit:])] if limit > 0 else []

    @property
    def current_size(self) -> int:
        with self._lock:
            return sum(len(entries) for entries in self._partitions.values())


def build_log_table(table_name: str, metadata: MetaData) -> Table:
    """Table layout for one log table. ``seq`` breaks timestamp ties."""
    table = Table(
        table_name,
        metadata,
        Column("seq", Integer, primary_key=True, autoincrement=True),
        Column("id", String(36), nullable=False, unique=True),
        Column("log_partition", String(64), nullable=False),
        Column("date_time", String(32), nullable=False),
        Column("severity", String(16), nullable=False),
        Column("message", Text, nullable=False),
    )
    Index(f"ix_{table_name}_partition_time", table.c.log_partition, table.c.date_time)
    return table


class SqliteLogStore(LogStore):
    """Durable store backed by a single SQLite table."""

    def __init__(self, database_path: str, table_name: str):
        self.name = table_name
        self._metadata = MetaData()
        self._table = build_log_table(table_name, self._metadata)
        self._engine = create_engine(f"sqlite:///{database_path}")
        try:
            self._metadata.create_all(self._engine)
        except SQLAlchemyError as e:
            self._engine.dispose()
            raise StoreUnavailable(f"Cannot open {database_path}: {e}") from e

    def put(self, record):
        try:
            with self._engine.begin() as conn:
                conn.execute(
                    insert(self._table).values(
                        id=record.id,
                        log_partition=record.log_partition,
                        date_time=record.date_time,
                        severity=record.severity,
                        message=record.message,
                    )
                )
        except SQLAlchemyError as e:
            raise StoreUnavailable(str(e)) from e

    def query_recent(self, partition_key, limit):
        table = self._table
        stmt = (
            select(table.c.log_partition, table.c.date_time, table.c.id, table.c.severity, table.c.message)
            .where(table.c.log_partition == partition_key)
            .order_by(desc(table.c.date_time), desc(table.c.seq))
            .limit(limit)
        )
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(stmt).all()
        except SQLAlchemyError as e:
            raise StoreUnavailable(str(e)) from e
        return [LogRecord(*row) for row in rows]

    def close(self):
        self._engine.dispose()


def create_store(config) -> LogStore:
    """Build the store backend named by ``config.store_backend``."""
    if config.store_backend == "memory":
        logger.warning("Using in-memory store %r; records are lost on restart", config.table_name)
        return InMemoryLogStore(name=config.table_name)
    if config.store_backend == "sqlite":
        logger.info("Using SQLite store %s table %r", config.database_path, config.table_name)
        return SqliteLogStore(config.database_path, config.table_name)
    raise ConfigurationError(f"Unknown store backend {config.store_backend!r}")
