"""
Repository pattern for data access.

Handles the append-only history ledger: one row per generation attempt,
never updated or deleted.
"""

import logging
import sqlite3
from datetime import datetime
from typing import Callable, List, Optional, TypeVar

from ..core.errors import StorageError, StorageReadDegradation
from ..core.models import GenerationOutcome
from .db import DEFAULT_DB_PATH, get_connection
from .models import HistoryRecord, LanguageUsageStat, StoreResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

_COLUMNS = """
    id, created_at, user_prompt, programming_language, success,
    execution_time_ms, generated_code, error_message
"""

_MOST_RECENT_FIRST = " ORDER BY created_at DESC, id DESC"


class HistoryRepository:
    """Repository for the history ledger.

    Writes raise StorageError. Reads never raise: a failing query degrades
    to an empty result wrapped in a StoreResult that names the failure.
    """

    def __init__(
        self,
        db_path: str = DEFAULT_DB_PATH,
        now: Callable[[], datetime] = datetime.now
    ):
        """Initialize the repository with a database path.

        Args:
            db_path: Path to SQLite database file
            now: Source of creation timestamps
        """
        self.db_path = db_path
        self._now = now

    def initialize(self) -> None:
        initialize_schema(self.db_path)

    def save(self, outcome: GenerationOutcome) -> int:
        """Append one generation attempt to the ledger.

        Args:
            outcome: The attempt to record

        Returns:
            Store-assigned record id

        Raises:
            StorageError: If the write fails
        """
        created_at = self._now()
        try:
            conn = get_connection(self.db_path)
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"Failed to open history database: {e}") from e
        try:
            cursor = conn.execute("""
                INSERT INTO code_history
                (created_at, user_prompt, programming_language, success,
                 execution_time_ms, generated_code, error_message)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            """, (
                created_at.isoformat(timespec="microseconds"),
                outcome.prompt,
                outcome.language,
                1 if outcome.success else 0,
                outcome.execution_time_ms,
                outcome.generated_code,
                outcome.error_message
            ))
            conn.commit()
            return cursor.lastrowid
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageError(f"Failed to save generation history: {e}") from e
        finally:
            conn.close()

    def get(self, record_id: int) -> StoreResult[Optional[HistoryRecord]]:
        def query(conn):
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM code_history WHERE id = ?", (record_id,)
            ).fetchone()
            return _row_to_record(row) if row else None

        return self._read("get", None, query)

    def all(self) -> StoreResult[List[HistoryRecord]]:
        """Every record in store order (insertion order)."""
        return self._list("all", f"SELECT {_COLUMNS} FROM code_history ORDER BY id")

    def recent(self, limit: int) -> StoreResult[List[HistoryRecord]]:
        """Most recent records first. The caller bounds the limit."""
        return self._list(
            "recent",
            f"SELECT {_COLUMNS} FROM code_history" + _MOST_RECENT_FIRST + " LIMIT ?",
            (limit,)
        )

    def since(self, cutoff: datetime) -> StoreResult[List[HistoryRecord]]:
        """Records created at or after cutoff, most recent first."""
        return self._list(
            "since",
            f"SELECT {_COLUMNS} FROM code_history WHERE created_at >= ?" + _MOST_RECENT_FIRST,
            (cutoff.isoformat(timespec="microseconds"),)
        )

    def by_language(self, language: str) -> StoreResult[List[HistoryRecord]]:
        """Records for one language, matched case-insensitively, most recent first."""
        return self._list(
            "by_language",
            f"SELECT {_COLUMNS} FROM code_history "
            "WHERE programming_language = ? COLLATE NOCASE" + _MOST_RECENT_FIRST,
            (language,)
        )

    def search(self, keyword: str) -> StoreResult[List[HistoryRecord]]:
        """Records whose prompt contains keyword, ignoring case, most recent first."""
        return self._list(
            "search",
            f"SELECT {_COLUMNS} FROM code_history "
            "WHERE instr(lower(user_prompt), lower(?)) > 0" + _MOST_RECENT_FIRST,
            (keyword,)
        )

    def count_total(self) -> StoreResult[int]:
        return self._scalar("count_total", "SELECT COUNT(*) FROM code_history")

    def count_successful(self) -> StoreResult[int]:
        return self._scalar(
            "count_successful", "SELECT COUNT(*) FROM code_history WHERE success = 1"
        )

    def count_failed(self) -> StoreResult[int]:
        return self._scalar(
            "count_failed", "SELECT COUNT(*) FROM code_history WHERE success = 0"
        )

    def average_execution_time_of_successful(self) -> StoreResult[Optional[float]]:
        """Mean execution time of successful attempts, None when there are none."""
        def query(conn):
            row = conn.execute("""
                SELECT AVG(execution_time_ms) FROM code_history
                WHERE success = 1 AND execution_time_ms IS NOT NULL
            """).fetchone()
            return float(row[0]) if row[0] is not None else None

        return self._read("average_execution_time_of_successful", None, query)

    def language_usage_stats(self) -> StoreResult[List[LanguageUsageStat]]:
        """Successful attempts grouped by language, busiest first."""
        def query(conn):
            cursor = conn.execute("""
                SELECT programming_language, COUNT(*), AVG(execution_time_ms)
                FROM code_history
                WHERE success = 1
                GROUP BY programming_language
                ORDER BY COUNT(*) DESC, programming_language ASC
            """)
            return [
                LanguageUsageStat(
                    language=row[0],
                    count=row[1],
                    average_execution_time_ms=float(row[2] or 0)
                )
                for row in cursor.fetchall()
            ]

        return self._read("language_usage_stats", [], query)

    def _list(self, operation: str, sql: str, params: tuple = ()) -> StoreResult[List[HistoryRecord]]:
        def query(conn):
            return [_row_to_record(row) for row in conn.execute(sql, params).fetchall()]

        return self._read(operation, [], query)

    def _scalar(self, operation: str, sql: str) -> StoreResult[int]:
        def query(conn):
            row = conn.execute(sql).fetchone()
            return int(row[0] or 0)

        return self._read(operation, 0, query)

    def _read(
        self,
        operation: str,
        default: T,
        query: Callable[[sqlite3.Connection], T]
    ) -> StoreResult[T]:
        try:
            conn = get_connection(self.db_path)
            try:
                return StoreResult(value=query(conn))
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as e:
            degradation = StorageReadDegradation(f"{operation} failed: {e}")
            logger.warning("History read degraded to empty result: %s", degradation)
            return StoreResult.degraded(default, str(degradation))


def initialize_schema(db_path: str = DEFAULT_DB_PATH) -> None:
    """Create the code_history table if it doesn't exist.

    This creates an append-only ledger of generation attempts.
    No UPDATE or DELETE operations are ever performed on this table.

    Args:
        db_path: Path to SQLite database file
    """
    conn = get_connection(db_path)
    try:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS code_history (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                created_at TEXT NOT NULL,
                user_prompt TEXT NOT NULL,
                programming_language TEXT NOT NULL,
                success INTEGER NOT NULL DEFAULT 1,
                execution_time_ms INTEGER,
                generated_code TEXT,
                error_message TEXT
            )
        """)
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_code_history_created_at ON code_history (created_at)"
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_code_history_language "
            "ON code_history (programming_language COLLATE NOCASE)"
        )
        conn.commit()
    finally:
        conn.close()


def _row_to_record(row: tuple) -> HistoryRecord:
    return HistoryRecord(
        id=row[0],
        created_at=datetime.fromisoformat(row[1]),
        prompt=row[2],
        language=row[3],
        success=bool(row[4]),
        execution_time_ms=row[5] if row[5] is not None else 0,
        generated_code=row[6],
        error_message=row[7]
    )
