"""
Unit tests for the statistics layer.

Tests aggregate computation, listing limits, caching and degraded reads.
"""

import os
import shutil
import tempfile
from datetime import datetime, timedelta
from unittest.mock import Mock

import pytest

from ai_codegen.core.cache import ExpiringCache
from ai_codegen.core.models import GenerationOutcome
from ai_codegen.core.statistics import (
    DEFAULT_HISTORY_LIMIT,
    MAX_HISTORY_LIMIT,
    StatisticsService,
    clamp_limit,
    success_rate,
)
from ai_codegen.storage.models import StoreResult
from ai_codegen.storage.repository import HistoryRepository


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestClampLimit:
    """Test listing size bounds."""

    @pytest.mark.parametrize("requested,expected", [
        (None, 10),
        (0, 10),
        (-5, 10),
        (1, 1),
        (10, 10),
        (100, 100),
        (101, 100),
        (500, 100),
    ])
    def test_clamp(self, requested, expected):
        assert clamp_limit(requested) == expected

    def test_constants(self):
        assert DEFAULT_HISTORY_LIMIT == 10
        assert MAX_HISTORY_LIMIT == 100


class TestSuccessRate:
    """Test success rate computation."""

    def test_zero_total(self):
        assert success_rate(0, 0) == 0.0

    @pytest.mark.parametrize("total,successful,expected", [
        (1, 1, 100.0),
        (3, 1, 33.33),
        (3, 2, 66.67),
        (7, 0, 0.0),
        (8, 5, 62.5),
    ])
    def test_rounded_percentage(self, total, successful, expected):
        assert success_rate(total, successful) == expected

    def test_matches_formula_across_range(self):
        for total in range(1, 40):
            for successful in range(total + 1):
                assert success_rate(total, successful) == round(successful / total * 100, 2)


class TestStatisticsService:
    """Test StatisticsService over a real ledger."""

    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()
        self.db_path = os.path.join(self.temp_dir, "test.db")
        self.repository = HistoryRepository(self.db_path)
        self.repository.initialize()
        self.clock = FakeClock()
        self.cache = ExpiringCache(ttl_seconds=5, clock=self.clock)
        self.service = StatisticsService(self.repository, self.cache)

    def teardown_method(self):
        """Clean up test environment."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _record(self, success=True, language="Java", prompt="Create a class", ms=100):
        if success:
            outcome = GenerationOutcome.succeeded("code", prompt, language, ms)
        else:
            outcome = GenerationOutcome.failed(prompt, language, "failed", ms)
        self.repository.save(outcome)

    def test_empty_ledger_summary(self):
        """An empty ledger reports zeros, not errors."""
        summary = self.service.summary()

        assert summary.total == 0
        assert summary.successful == 0
        assert summary.failed == 0
        assert summary.success_rate == 0.0
        assert summary.average_execution_time_ms == 0.0
        assert summary.language_usage == []

    def test_summary(self):
        self._record(language="Java", ms=100)
        self._record(language="Java", ms=201)
        self._record(language="Python", ms=50)
        self._record(success=False, language="Go")

        summary = self.service.summary()

        assert summary.total == 4
        assert summary.successful == 3
        assert summary.failed == 1
        assert summary.success_rate == 75.0
        assert summary.average_execution_time_ms == 117.0
        assert [(s.language, s.count) for s in summary.language_usage] == [("Java", 2), ("Python", 1)]

    def test_summary_to_dict(self):
        self._record()

        data = self.service.summary().to_dict()

        assert data["totalGenerations"] == 1
        assert data["successRate"] == 100.0
        assert data["languageUsage"][0]["language"] == "Java"

    def test_total_is_cached_until_expiry(self):
        """New records are not visible in cached counts until the window closes."""
        self._record()
        assert self.service.total_generations() == 1

        self._record()
        assert self.service.total_generations() == 1

        self.clock.now = 5
        assert self.service.total_generations() == 2

    def test_uncached_queries_see_new_records(self):
        """Failed count and recent listings always hit the store."""
        self._record(success=False)
        assert self.service.failed_generations() == 1

        self._record(success=False)
        assert self.service.failed_generations() == 2
        assert len(self.service.recent_history(10)) == 2

    def test_history_by_language_cached_per_language(self):
        self._record(language="Java")
        assert len(self.service.history_by_language("Java")) == 1

        self._record(language="Java")
        self._record(language="Go")
        assert len(self.service.history_by_language("Java")) == 1
        assert len(self.service.history_by_language("Go")) == 1

    def test_blank_filters_return_empty(self):
        self._record()

        assert self.service.history_by_language("  ") == []
        assert self.service.search_history("") == []

    def test_recent_history_clamps_limit(self):
        for i in range(12):
            self._record(prompt=f"prompt {i}")

        assert len(self.service.recent_history(0)) == 10
        assert len(self.service.recent_history(-1)) == 10
        assert len(self.service.recent_history(3)) == 3
        assert self.service.recent_history(1)[0].prompt == "prompt 11"

    def test_recent_history_caps_at_maximum(self):
        repository = Mock()
        repository.recent.return_value = StoreResult(value=[])
        service = StatisticsService(repository, self.cache)

        service.recent_history(500)

        repository.recent.assert_called_once_with(100)

    def test_search_history(self):
        self._record(prompt="Build a REST API")
        self._record(prompt="Sort numbers")

        results = self.service.search_history("rest")

        assert [r.prompt for r in results] == ["Build a REST API"]

    def test_recent_activity_window(self):
        """Recent activity covers the last day only."""
        now = datetime(2024, 6, 1, 12, 0, 0)
        repository = Mock()
        repository.since.return_value = StoreResult(value=[])
        service = StatisticsService(repository, self.cache, now=lambda: now)

        service.recent_activity()

        repository.since.assert_called_once_with(now - timedelta(days=1))

    def test_detailed_includes_recent_history(self):
        self._record()

        data = self.service.detailed()

        assert data["totalGenerations"] == 1
        assert len(data["recentHistory"]) == 1

    def test_health_up(self):
        self._record()

        assert self.service.health() == {
            "status": "UP", "database": "Connected", "totalGenerations": 1,
        }


class TestDegradedStatistics:
    """Test the statistics layer over a failing store."""

    def setup_method(self):
        self.clock = FakeClock()
        self.cache = ExpiringCache(ttl_seconds=5, clock=self.clock)
        self.repository = Mock()
        self.repository.count_total.return_value = StoreResult.degraded(0, "count_total failed: locked")
        self.repository.count_successful.return_value = StoreResult.degraded(0, "locked")
        self.repository.count_failed.return_value = StoreResult.degraded(0, "locked")
        self.repository.average_execution_time_of_successful.return_value = StoreResult.degraded(None, "locked")
        self.repository.language_usage_stats.return_value = StoreResult.degraded([], "locked")
        self.repository.all.return_value = StoreResult.degraded([], "locked")
        self.service = StatisticsService(self.repository, self.cache)

    def test_summary_degrades_to_zero(self):
        summary = self.service.summary()

        assert summary.total == 0
        assert summary.success_rate == 0.0
        assert summary.average_execution_time_ms == 0.0

    def test_degraded_results_are_not_cached(self):
        """A failed read is retried on the next call instead of served from cache."""
        self.service.total_generations()
        self.repository.count_total.return_value = StoreResult(value=7)

        assert self.service.total_generations() == 7

    def test_degraded_listing_not_cached(self):
        assert self.service.all_history() == []
        self.service.all_history()

        assert self.repository.all.call_count == 2

    def test_health_degraded(self):
        health = self.service.health()

        assert health["status"] == "DEGRADED"
        assert "locked" in health["database"]
