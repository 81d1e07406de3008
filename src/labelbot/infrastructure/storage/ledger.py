"""
Label ledger implementations.

SQLite keeps the ledger on disk; the in-memory variant backs tests.
"""

from __future__ import annotations

import sqlite3
import threading
from datetime import date, datetime, time, timezone
from decimal import Decimal
from pathlib import Path
from typing import Iterable, Optional

from labelbot.core.exceptions import StoreException
from labelbot.core.interfaces import LabelLedger
from labelbot.core.models import LabelRecord, LabelStats, format_timestamp, utcnow
from labelbot.core.models.session import parse_timestamp
from labelbot.infrastructure.logging import get_logger


def day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def summarize(records: Iterable[LabelRecord]) -> LabelStats:
    """Aggregate records into counts of shipments, accounts and types."""

    records = list(records)
    return LabelStats(
        number_of_shipments=len(records),
        accounts_used=len({r.account_used for r in records}),
        balance_used=sum((r.balance_used for r in records), Decimal("0")),
        shipment_types=len({r.shipment_type for r in records if r.shipment_type}),
    )


class InMemoryLabelLedger(LabelLedger):
    """Process-local ledger."""

    def __init__(self):
        self._records: list[LabelRecord] = []
        self._lock = threading.Lock()

    @property
    def records(self) -> list[LabelRecord]:
        return list(self._records)

    def append(self, record: LabelRecord) -> LabelRecord:
        with self._lock:
            stored = record.with_id(len(self._records) + 1)
            self._records.append(stored)
            return stored

    def query(self, start: datetime, end: datetime) -> list[LabelRecord]:
        return [r for r in self._records if start <= r.created_at < end]

    def stats(self, day: date, now: Optional[datetime] = None) -> LabelStats:
        return summarize(self.query(day_start(day), now or utcnow()))


class SQLiteLabelLedger(LabelLedger):
    """Ledger stored in a local SQLite database."""

    def __init__(self, db_path: str | Path = "data/labels.db", logger=None):
        """
        Args:
            db_path: Database file, created on first use.
            logger: Optional logger.
        """
        self.db_path = str(db_path)
        self.logger = logger or get_logger()
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(self.db_path)
            conn.row_factory = sqlite3.Row
            return conn
        except sqlite3.Error as e:
            raise StoreException(f"Could not open SQLite ledger: {e}", details={"path": self.db_path}, cause=e) from e

    def _init_db(self) -> None:
        create_table_sql = """
        CREATE TABLE IF NOT EXISTS labels (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            shipment_date TEXT NOT NULL,
            account_used TEXT NOT NULL,
            balance_used TEXT NOT NULL DEFAULT '0',
            shipment_type TEXT NOT NULL DEFAULT '',
            file_id TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """
        create_index_sql = "CREATE INDEX IF NOT EXISTS idx_labels_created_at ON labels (created_at);"
        conn = self._get_connection()
        try:
            with conn:
                conn.execute(create_table_sql)
                conn.execute(create_index_sql)
        finally:
            conn.close()

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> LabelRecord:
        return LabelRecord(
            id=row["id"],
            shipment_date=parse_timestamp(row["shipment_date"]),
            account_used=row["account_used"],
            balance_used=Decimal(row["balance_used"]),
            shipment_type=row["shipment_type"],
            file_id=row["file_id"],
            created_at=parse_timestamp(row["created_at"]),
            updated_at=parse_timestamp(row["updated_at"]),
        )

    def append(self, record: LabelRecord) -> LabelRecord:
        sql = """
        INSERT INTO labels (shipment_date, account_used, balance_used, shipment_type, file_id, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """
        conn = self._get_connection()
        try:
            with conn:
                cursor = conn.execute(sql, (
                    format_timestamp(record.shipment_date),
                    record.account_used,
                    str(record.balance_used),
                    record.shipment_type,
                    record.file_id,
                    format_timestamp(record.created_at),
                    format_timestamp(record.updated_at),
                ))
                record_id = cursor.lastrowid
        except sqlite3.Error as e:
            raise StoreException(f"Could not append label record: {e}", details={"file_id": record.file_id}, cause=e) from e
        finally:
            conn.close()
        self.logger.debug("Label recorded", id=record_id, file=record.file_id)
        return record.with_id(record_id)

    def query(self, start: datetime, end: datetime) -> list[LabelRecord]:
        sql = "SELECT * FROM labels WHERE created_at >= ? AND created_at < ? ORDER BY created_at"
        conn = self._get_connection()
        try:
            rows = conn.execute(sql, (format_timestamp(start), format_timestamp(end))).fetchall()
        except sqlite3.Error as e:
            raise StoreException(f"Could not query label ledger: {e}", cause=e) from e
        finally:
            conn.close()
        return [self._row_to_record(row) for row in rows]

    def stats(self, day: date, now: Optional[datetime] = None) -> LabelStats:
        return summarize(self.query(day_start(day), now or utcnow()))


__all__ = ["InMemoryLabelLedger", "SQLiteLabelLedger", "summarize", "day_start"]
