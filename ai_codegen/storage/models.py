"""
Data models for storage layer.

Defines persisted history records and derived aggregates.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class HistoryRecord:
    """Immutable record of one generation attempt.

    Append-only entries in the history ledger. The store assigns id and
    created_at; once written, records are never modified.
    """
    id: int
    created_at: datetime
    prompt: str
    language: str
    success: bool
    execution_time_ms: int
    generated_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userPrompt": self.prompt,
            "programmingLanguage": self.language,
            "generatedCode": self.generated_code,
            "createdAt": self.created_at.isoformat(),
            "executionTimeMs": self.execution_time_ms,
            "success": self.success,
            "errorMessage": self.error_message,
        }


@dataclass(frozen=True)
class LanguageUsageStat:
    """Successful generations grouped by language. Derived, never stored."""
    language: str
    count: int
    average_execution_time_ms: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "language": self.language,
            "count": self.count,
            "averageExecutionTimeMs": round(self.average_execution_time_ms, 2),
        }


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    """Outcome of a store read.

    A degraded read still carries a usable value (empty list, zero count)
    together with a description of what went wrong.
    """
    value: T
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def degraded(cls, default: T, error: str) -> "StoreResult[T]":
        return cls(value=default, error=error)
