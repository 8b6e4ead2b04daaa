"""
Storage layer for AI Code Generator.

Provides the append-only SQLite ledger of generation attempts.
"""

from .models import HistoryRecord, LanguageUsageStat, StoreResult
from .repository import HistoryRepository, initialize_schema

__all__ = [
    "HistoryRecord",
    "HistoryRepository",
    "LanguageUsageStat",
    "StoreResult",
    "initialize_schema",
]
