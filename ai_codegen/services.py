"""
Component wiring.

Builds the client, store, orchestrator and statistics layer from one
AppConfig so every entry point shares the same construction.
"""

from dataclasses import dataclass
from typing import Optional

import requests

from .config.loader import AppConfig
from .core.cache import ExpiringCache
from .core.orchestrator import GenerationOrchestrator
from .core.statistics import StatisticsService
from .sdk.gemini_client import GeminiClient
from .storage.repository import HistoryRepository


@dataclass(frozen=True)
class Services:
    """Components shared by all requests."""
    config: AppConfig
    client: GeminiClient
    repository: HistoryRepository
    orchestrator: GenerationOrchestrator
    statistics: StatisticsService


def build_services(
    config: AppConfig,
    session: Optional[requests.Session] = None,
    initialize: bool = True
) -> Services:
    """Construct the component graph.

    Args:
        config: Application configuration
        session: HTTP session for the generation client
        initialize: Create the history schema if missing

    Returns:
        Wired Services
    """
    repository = HistoryRepository(config.storage.db_path)
    if initialize:
        repository.initialize()

    client = GeminiClient(config.generation, session=session)
    cache = ExpiringCache(config.cache.ttl_seconds)

    return Services(
        config=config,
        client=client,
        repository=repository,
        orchestrator=GenerationOrchestrator(client, repository),
        statistics=StatisticsService(repository, cache)
    )
