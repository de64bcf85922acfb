"""Processing log store backed by SQLite."""

import logging
import sqlite3
from contextlib import closing
from datetime import datetime, timezone
from pathlib import Path

from ...domain.models import LogStatus, ProcessingLogEntry
from ...ports.log_store import LogStorePort

logger = logging.getLogger(__name__)

_SCHEMA = """
    CREATE TABLE IF NOT EXISTS processing_log (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        source_system_id INTEGER NOT NULL,
        file_name TEXT NOT NULL,
        status TEXT NOT NULL,
        voucher_count INTEGER,
        transaction_count INTEGER,
        error_message TEXT,
        duration_ms INTEGER,
        execution_id TEXT NOT NULL,
        processed_at TEXT NOT NULL
    )
"""
_INDEX = """
    CREATE INDEX IF NOT EXISTS idx_processing_log_execution
    ON processing_log(execution_id)
"""


def _to_utc_text(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat()


class SqliteLogStore(LogStorePort):
    """Append-only log of file outcomes in a `processing_log` table."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._init_db()

    def connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        with closing(self.connect()) as conn, conn:
            conn.execute(_SCHEMA)
            conn.execute(_INDEX)

    def add_batch(self, entries: list[ProcessingLogEntry]) -> None:
        if not entries:
            return
        rows = [
            (
                e.source_system_id,
                e.file_name,
                e.status.value,
                e.voucher_count,
                e.transaction_count,
                e.error_message,
                e.duration_ms,
                e.execution_id,
                _to_utc_text(e.processed_at),
            )
            for e in entries
        ]
        with closing(self.connect()) as conn, conn:
            conn.executemany(
                """
                INSERT INTO processing_log (
                    source_system_id, file_name, status, voucher_count,
                    transaction_count, error_message, duration_ms,
                    execution_id, processed_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                rows,
            )
        logger.debug(f"Saved {len(rows)} log entries")

    def get_by_execution(self, execution_id: str) -> list[ProcessingLogEntry]:
        with closing(self.connect()) as conn:
            rows = conn.execute(
                "SELECT * FROM processing_log WHERE execution_id = ? ORDER BY id",
                (execution_id,),
            ).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def delete_older_than(self, cutoff: datetime) -> int:
        with closing(self.connect()) as conn, conn:
            cursor = conn.execute(
                "DELETE FROM processing_log WHERE processed_at < ?",
                (_to_utc_text(cutoff),),
            )
            return cursor.rowcount

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> ProcessingLogEntry:
        return ProcessingLogEntry(
            source_system_id=row["source_system_id"],
            file_name=row["file_name"],
            execution_id=row["execution_id"],
            status=LogStatus(row["status"]),
            voucher_count=row["voucher_count"],
            transaction_count=row["transaction_count"],
            error_message=row["error_message"],
            duration_ms=row["duration_ms"],
            processed_at=datetime.fromisoformat(row["processed_at"]),
        )
