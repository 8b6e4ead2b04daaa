"""Code generation API endpoints."""

import logging
from datetime import datetime
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from .. import __version__
from ..core.languages import SUPPORTED_LANGUAGES
from ..core.models import GenerationOutcome, GenerationRequest
from ..core.statistics import DEFAULT_HISTORY_LIMIT, StatisticsService
from ..services import Services
from .schemas import (
    CodeGenerationBody,
    CodeGenerationResponse,
    DetailedStatisticsResponse,
    HistoryRecordResponse,
    StatisticsResponse,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "AI Code Generator"

router = APIRouter(prefix="/api/codegen", tags=["codegen"])


def get_services(request: Request) -> Services:
    """Get the Services instance attached to the application."""
    return request.app.state.services


def get_statistics(services: Services = Depends(get_services)) -> StatisticsService:
    return services.statistics


@router.post("", response_model=CodeGenerationResponse)
def generate_code(
    body: CodeGenerationBody,
    services: Services = Depends(get_services),
):
    """Generate code for a prompt.

    Returns 200 with the outcome on success and 500 with the same shape
    when the attempt failed.
    """
    logger.info("Received code generation request for language: %s", body.language)
    try:
        outcome = services.orchestrator.handle(GenerationRequest(body.prompt, body.language))
    except Exception as e:
        logger.exception("Unexpected error in generate_code endpoint")
        outcome = GenerationOutcome.failed(
            body.prompt, body.language, f"Internal server error: {e}", 0
        )

    status_code = status.HTTP_200_OK if outcome.success else status.HTTP_500_INTERNAL_SERVER_ERROR
    return JSONResponse(status_code=status_code, content=outcome.to_dict())


@router.get("/history", response_model=List[HistoryRecordResponse])
def get_all_history(statistics: StatisticsService = Depends(get_statistics)) -> List[Dict[str, Any]]:
    logger.info("Fetching all code generation history")
    return [record.to_dict() for record in statistics.all_history()]


@router.get("/history/recent", response_model=List[HistoryRecordResponse])
def get_recent_history(
    limit: int = Query(DEFAULT_HISTORY_LIMIT, description="Number of records, clamped to 1..100"),
    statistics: StatisticsService = Depends(get_statistics),
) -> List[Dict[str, Any]]:
    logger.info("Fetching recent code generation history with limit: %s", limit)
    return [record.to_dict() for record in statistics.recent_history(limit)]


@router.get("/history/language/{language}", response_model=List[HistoryRecordResponse])
def get_history_by_language(
    language: str,
    statistics: StatisticsService = Depends(get_statistics),
) -> List[Dict[str, Any]]:
    if not language.strip():
        raise HTTPException(status_code=400, detail="language must not be blank")
    logger.info("Fetching code generation history for language: %s", language)
    return [record.to_dict() for record in statistics.history_by_language(language)]


@router.get("/history/search", response_model=List[HistoryRecordResponse])
def search_history(
    keyword: str = Query(..., description="Case-insensitive substring of the prompt"),
    statistics: StatisticsService = Depends(get_statistics),
) -> List[Dict[str, Any]]:
    if not keyword.strip():
        raise HTTPException(status_code=400, detail="keyword must not be blank")
    logger.info("Searching code generation history with keyword: %s", keyword)
    return [record.to_dict() for record in statistics.search_history(keyword)]


@router.get("/stats", response_model=StatisticsResponse)
def get_stats(statistics: StatisticsService = Depends(get_statistics)) -> Dict[str, Any]:
    logger.info("Fetching code generation statistics")
    return statistics.summary().to_dict()


@router.get("/stats/detailed", response_model=DetailedStatisticsResponse)
def get_detailed_stats(statistics: StatisticsService = Depends(get_statistics)) -> Dict[str, Any]:
    logger.info("Fetching detailed code generation statistics")
    return statistics.detailed()


@router.get("/health")
def health_check(statistics: StatisticsService = Depends(get_statistics)) -> Dict[str, Any]:
    """Report service status. A failing store read degrades the status."""
    health = {
        "service": SERVICE_NAME,
        "version": __version__,
        "timestamp": datetime.now().isoformat(),
    }
    health.update(statistics.health())
    return health


@router.get("/languages")
def get_supported_languages(statistics: StatisticsService = Depends(get_statistics)) -> Dict[str, Any]:
    return {
        "supportedLanguages": SUPPORTED_LANGUAGES,
        "count": len(SUPPORTED_LANGUAGES),
        "usageStatistics": {stat.language: stat.count for stat in statistics.language_usage()},
    }


@router.get("/version")
def get_version() -> Dict[str, str]:
    return {
        "application": SERVICE_NAME,
        "version": __version__,
        "apiVersion": "v1",
    }
