"""
Zone History Store

Append-only log of past zone entries/exits. Feeds historical accuracy
back into the confidence scorer. Records older than the retention
window (7 days) are pruned on every insert.

Two backends with the same interface:
- InMemoryHistoryStore: process lifetime only
- SQLiteHistoryStore: durable, one table
"""

import sqlite3
from pathlib import Path
from typing import List, Optional

import structlog

from config import settings
from src.core.models import HistoryRecord, AccuracyReport, now_ms

logger = structlog.get_logger(__name__)

DAY_MS = 24 * 60 * 60 * 1000


def _cutoff_ms(days: float, now: Optional[int] = None) -> int:
    return (now if now is not None else now_ms()) - int(days * DAY_MS)


class InMemoryHistoryStore:
    """List-backed history, lost on restart"""

    def __init__(self, retention_days: float = settings.HISTORY_RETENTION_DAYS):
        self.retention_days = retention_days
        self._records: List[HistoryRecord] = []

    def record(self, entry: HistoryRecord) -> None:
        """Append a record and drop anything past retention"""
        self._records.append(entry)
        cutoff = _cutoff_ms(self.retention_days)
        self._records = [r for r in self._records if r.timestamp > cutoff]

    def query(self, symbol: Optional[str] = None, since_days: Optional[float] = None) -> List[HistoryRecord]:
        """Records ordered by timestamp, optionally filtered by symbol and age"""
        records = self._records
        if symbol is not None:
            records = [r for r in records if r.symbol == symbol]
        if since_days is not None:
            cutoff = _cutoff_ms(since_days)
            records = [r for r in records if r.timestamp > cutoff]
        return sorted(records, key=lambda r: r.timestamp)

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)


class SQLiteHistoryStore:
    """
    SQLite-backed history

    Table entry_zone_history, one row per zone entry.
    """

    def __init__(
        self,
        db_path: Path = settings.DB_PATH,
        retention_days: float = settings.HISTORY_RETENTION_DAYS,
        reset: bool = False,
    ):
        self.db_path = Path(db_path)
        self.retention_days = retention_days

        if str(db_path) != ":memory:":
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self.conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self.conn.row_factory = sqlite3.Row

        if reset:
            self._drop_tables()

        self._create_tables()

        logger.info("history_store_initialized", path=str(db_path), reset=reset)

    def _drop_tables(self):
        cursor = self.conn.cursor()
        cursor.execute("DROP TABLE IF EXISTS entry_zone_history")
        self.conn.commit()

    def _create_tables(self):
        cursor = self.conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS entry_zone_history (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                symbol TEXT NOT NULL,
                timestamp INTEGER NOT NULL,
                entry_price REAL NOT NULL,
                exit_price REAL,
                profit_loss REAL,
                accuracy REAL DEFAULT 0,
                trade_success_probability REAL DEFAULT 0
            )
        """)
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_history_symbol_ts
            ON entry_zone_history (symbol, timestamp)
        """)
        self.conn.commit()

    def record(self, entry: HistoryRecord) -> int:
        """Insert a record, prune past retention, return the row id"""
        cursor = self.conn.cursor()
        cursor.execute("""
            INSERT INTO entry_zone_history (
                symbol, timestamp, entry_price, exit_price, profit_loss,
                accuracy, trade_success_probability
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
        """, (
            entry.symbol, entry.timestamp, entry.entry_price, entry.exit_price,
            entry.profit_loss, entry.accuracy, entry.trade_success_probability,
        ))
        row_id = cursor.lastrowid

        cursor.execute(
            "DELETE FROM entry_zone_history WHERE timestamp <= ?",
            (_cutoff_ms(self.retention_days),),
        )
        pruned = cursor.rowcount
        self.conn.commit()

        if pruned > 0:
            logger.debug("history_pruned", rows=pruned)

        return row_id

    def query(self, symbol: Optional[str] = None, since_days: Optional[float] = None) -> List[HistoryRecord]:
        """Records ordered by timestamp, optionally filtered by symbol and age"""
        clauses = []
        params: list = []
        if symbol is not None:
            clauses.append("symbol = ?")
            params.append(symbol)
        if since_days is not None:
            clauses.append("timestamp > ?")
            params.append(_cutoff_ms(since_days))

        sql = "SELECT * FROM entry_zone_history"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY timestamp ASC, id ASC"

        cursor = self.conn.cursor()
        cursor.execute(sql, params)
        return [self._row_to_record(row) for row in cursor.fetchall()]

    def _row_to_record(self, row: sqlite3.Row) -> HistoryRecord:
        return HistoryRecord(
            symbol=row["symbol"],
            timestamp=row["timestamp"],
            entry_price=row["entry_price"],
            exit_price=row["exit_price"],
            profit_loss=row["profit_loss"],
            accuracy=row["accuracy"],
            trade_success_probability=row["trade_success_probability"],
        )

    def close(self):
        self.conn.close()


def entry_zone_accuracy(store, symbol: str, days: float = 7) -> AccuracyReport:
    """
    Accuracy of closed zone trades for a symbol over the last `days`.
    Open trades (no exit price) are ignored.
    """
    closed = [r for r in store.query(symbol, since_days=days) if r.is_closed]

    if not closed:
        return AccuracyReport()

    wins = sum(1 for r in closed if r.is_win)
    return AccuracyReport(
        accuracy=wins / len(closed) * 100,
        total_entries=len(closed),
        successful_entries=wins,
    )
