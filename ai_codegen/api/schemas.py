"""Request and response schemas for the HTTP API."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..core.models import MAX_LANGUAGE_LENGTH, MAX_PROMPT_LENGTH


class CodeGenerationBody(BaseModel):
    """Inbound generation request."""

    prompt: str = Field(..., max_length=MAX_PROMPT_LENGTH)
    language: str = Field(..., max_length=MAX_LANGUAGE_LENGTH)

    @field_validator("prompt")
    @classmethod
    def prompt_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Prompt cannot be empty")
        return value

    @field_validator("language")
    @classmethod
    def language_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Programming language must be specified")
        return value


class CodeGenerationResponse(BaseModel):
    """Outcome of one generation attempt."""

    generatedCode: Optional[str] = None
    prompt: Optional[str] = None
    language: Optional[str] = None
    timestamp: datetime
    executionTimeMs: int
    success: bool
    errorMessage: Optional[str] = None
    fieldErrors: Optional[Dict[str, str]] = None


class HistoryRecordResponse(BaseModel):
    """One entry of the history ledger."""

    id: int
    userPrompt: str
    programmingLanguage: str
    generatedCode: Optional[str] = None
    createdAt: datetime
    executionTimeMs: int
    success: bool
    errorMessage: Optional[str] = None


class LanguageUsageResponse(BaseModel):
    language: str
    count: int
    averageExecutionTimeMs: float


class StatisticsResponse(BaseModel):
    totalGenerations: int
    successfulGenerations: int
    failedGenerations: int
    successRate: float
    averageExecutionTimeMs: float
    languageUsage: List[LanguageUsageResponse]


class DetailedStatisticsResponse(StatisticsResponse):
    recentHistory: List[HistoryRecordResponse]
