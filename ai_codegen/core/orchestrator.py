"""
Generation orchestration.

Validates a request, calls the generation client, records the attempt in
the history ledger and returns a uniform outcome.
"""

import logging
import time
from typing import Callable, Optional

from ..storage.models import StoreResult
from .errors import (
    EmptyResultError,
    ExternalServiceError,
    NotConfiguredError,
    StorageError,
    ValidationError,
)
from .models import GenerationOutcome, GenerationRequest
from .normalize import is_placeholder

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = (
    "Gemini API key not configured. Please set GEMINI_API_KEY environment variable."
)
EMPTY_RESULT_MESSAGE = "Generated code is empty or invalid"
FAILURE_PREFIX = "Code generation failed: "


class GenerationOrchestrator:
    """Runs one generation attempt per request.

    handle() never raises. Every request that passes validation produces
    exactly one write attempt to the ledger, whatever the outcome.
    """

    def __init__(
        self,
        client,
        repository,
        clock: Callable[[], float] = time.monotonic
    ):
        """Initialize the orchestrator.

        Args:
            client: Generation client exposing is_configured() and generate()
            repository: History store exposing save()
            clock: Monotonic clock in seconds, used for execution time
        """
        self.client = client
        self.repository = repository
        self._clock = clock

    def handle(self, request: GenerationRequest) -> GenerationOutcome:
        """Run a generation attempt and record it.

        Args:
            request: Prompt and target language

        Returns:
            Successful or failed outcome
        """
        field_errors = request.field_errors()
        if field_errors:
            error = ValidationError(field_errors)
            logger.warning("%s", error)
            return GenerationOutcome.failed(
                request.prompt,
                request.language,
                str(error),
                execution_time_ms=0,
                field_errors=error.field_errors
            )

        started = self._clock()
        outcome = self._generate(request, started)
        self._persist(outcome)
        return outcome

    def _generate(self, request: GenerationRequest, started: float) -> GenerationOutcome:
        prompt, language = request.prompt, request.language

        if not self.client.is_configured():
            error = NotConfiguredError(NOT_CONFIGURED_MESSAGE)
            logger.error("%s", error)
            return GenerationOutcome.failed(prompt, language, str(error), self._elapsed_ms(started))

        logger.info(
            "Generating code for prompt: '%s' in language: '%s'",
            _truncate_for_log(prompt), language
        )

        try:
            code = self.client.generate(prompt, language)
        except ExternalServiceError as e:
            elapsed = self._elapsed_ms(started)
            logger.error(
                "Code generation failed for prompt: '%s', language: '%s': %s",
                _truncate_for_log(prompt), language, e
            )
            return GenerationOutcome.failed(prompt, language, f"{FAILURE_PREFIX}{e}", elapsed)
        except Exception as e:
            elapsed = self._elapsed_ms(started)
            logger.exception("Unexpected error during code generation")
            return GenerationOutcome.failed(prompt, language, f"{FAILURE_PREFIX}{e}", elapsed)

        elapsed = self._elapsed_ms(started)

        if is_placeholder(code):
            error = EmptyResultError(EMPTY_RESULT_MESSAGE)
            logger.warning("%s", error)
            return GenerationOutcome.failed(prompt, language, str(error), elapsed)

        logger.info("Code generation successful in %dms for language: %s", elapsed, language)
        return GenerationOutcome.succeeded(code, prompt, language, elapsed)

    def _persist(self, outcome: GenerationOutcome) -> StoreResult[Optional[int]]:
        try:
            record_id = self.repository.save(outcome)
        except StorageError as e:
            logger.error("Failed to save code generation history: %s", e)
            return StoreResult.degraded(None, str(e))
        except Exception as e:
            logger.exception("Unexpected error saving code generation history")
            return StoreResult.degraded(None, str(e))

        logger.debug("Saved code generation history with ID: %s", record_id)
        return StoreResult(value=record_id)

    def _elapsed_ms(self, started: float) -> int:
        return max(0, int(round((self._clock() - started) * 1000)))


def _truncate_for_log(prompt: Optional[str], limit: int = 100) -> str:
    if prompt is None:
        return "null"
    return prompt[:limit] + "..." if len(prompt) > limit else prompt
