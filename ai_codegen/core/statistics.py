"""
Statistics and history queries over the ledger.

Answers dashboard queries from the history store, caching the hot
aggregates for a short window. Store reads that fail are reported as
empty results so the reporting surface stays available.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from ..storage.models import HistoryRecord, LanguageUsageStat, StoreResult
from .cache import ExpiringCache

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 10
MAX_HISTORY_LIMIT = 100
RECENT_ACTIVITY_WINDOW = timedelta(days=1)

TOTAL_KEY = ("statistics", "total")
SUCCESSFUL_KEY = ("statistics", "successful")
ALL_HISTORY_KEY = ("history", "all")


def clamp_limit(limit: Optional[int]) -> int:
    """Bound a requested listing size to 1..MAX_HISTORY_LIMIT.

    Missing, zero or negative limits fall back to DEFAULT_HISTORY_LIMIT.
    """
    if limit is None or limit <= 0:
        return DEFAULT_HISTORY_LIMIT
    return min(limit, MAX_HISTORY_LIMIT)


def success_rate(total: int, successful: int) -> float:
    """Percentage of successful attempts, rounded to 2 decimals."""
    if total <= 0:
        return 0.0
    return round(successful / total * 100, 2)


@dataclass(frozen=True)
class StatisticsSummary:
    """Aggregate view of the ledger."""
    total: int
    successful: int
    failed: int
    success_rate: float
    average_execution_time_ms: float
    language_usage: List[LanguageUsageStat] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalGenerations": self.total,
            "successfulGenerations": self.successful,
            "failedGenerations": self.failed,
            "successRate": self.success_rate,
            "averageExecutionTimeMs": self.average_execution_time_ms,
            "languageUsage": [stat.to_dict() for stat in self.language_usage],
        }


class StatisticsService:
    """Read side of the ledger.

    Total count, successful count, full history and per-language history
    are cached under fixed keys. Nothing invalidates them on write; they
    expire on their own.
    """

    def __init__(
        self,
        repository,
        cache: ExpiringCache,
        now: Callable[[], datetime] = datetime.now
    ):
        self.repository = repository
        self.cache = cache
        self._now = now

    def total_generations(self) -> int:
        return self._cached(TOTAL_KEY, self.repository.count_total)

    def successful_generations(self) -> int:
        return self._cached(SUCCESSFUL_KEY, self.repository.count_successful)

    def failed_generations(self) -> int:
        return self._value(self.repository.count_failed())

    def average_execution_time(self) -> Optional[float]:
        return self._value(self.repository.average_execution_time_of_successful())

    def language_usage(self) -> List[LanguageUsageStat]:
        return self._value(self.repository.language_usage_stats())

    def all_history(self) -> List[HistoryRecord]:
        return self._cached(ALL_HISTORY_KEY, self.repository.all)

    def recent_history(self, limit: Optional[int] = None) -> List[HistoryRecord]:
        return self._value(self.repository.recent(clamp_limit(limit)))

    def history_by_language(self, language: str) -> List[HistoryRecord]:
        if not language or not language.strip():
            return []
        language = language.strip()
        return self._cached(
            ("history_by_language", language),
            lambda: self.repository.by_language(language)
        )

    def search_history(self, keyword: str) -> List[HistoryRecord]:
        if not keyword or not keyword.strip():
            return []
        return self._value(self.repository.search(keyword.strip()))

    def recent_activity(self) -> List[HistoryRecord]:
        """Attempts made within the last day, most recent first."""
        return self._value(self.repository.since(self._now() - RECENT_ACTIVITY_WINDOW))

    def summary(self) -> StatisticsSummary:
        total = self.total_generations()
        successful = self.successful_generations()
        average = self.average_execution_time()
        return StatisticsSummary(
            total=total,
            successful=successful,
            failed=self.failed_generations(),
            success_rate=success_rate(total, successful),
            average_execution_time_ms=round(average, 2) if average is not None else 0.0,
            language_usage=self.language_usage()
        )

    def detailed(self) -> Dict[str, Any]:
        data = self.summary().to_dict()
        data["recentHistory"] = [record.to_dict() for record in self.recent_activity()]
        return data

    def health(self) -> Dict[str, Any]:
        """Probe the store with a cheap uncached read."""
        result = self.repository.count_total()
        if result.ok:
            return {"status": "UP", "database": "Connected", "totalGenerations": result.value}
        return {"status": "DEGRADED", "database": f"Error: {result.error}"}

    def _cached(self, key, load: Callable[[], StoreResult]):
        result = self.cache.get_or_load(key, load, should_cache=lambda r: r.ok)
        return self._value(result)

    @staticmethod
    def _value(result: StoreResult):
        if not result.ok:
            logger.debug("Serving degraded statistics: %s", result.error)
        return result.value
