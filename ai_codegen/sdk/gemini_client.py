"""
Gemini text generation client.

Turns a (prompt, language) pair into one generateContent call and the
returned text into cleaned code.
"""

import logging
from typing import Any, Dict, Optional

import requests

from .. import __version__
from ..config.loader import GenerationClientConfig
from ..core.errors import ExternalServiceError
from ..core.normalize import normalize_generated_code

logger = logging.getLogger(__name__)

# Values copied from sample env files rather than real credentials
PLACEHOLDER_API_KEYS = frozenset({
    "your_gemini_api_key_here",
    "your-gemini-api-key",
    "your-api-key",
    "your_api_key",
    "<your-api-key>",
    "changeme",
    "xxx",
})


class GeminiClient:
    """Client for the Gemini generateContent endpoint.

    Makes exactly one synchronous request per generate() call. Retrying is
    left to the caller.
    """

    def __init__(
        self,
        config: GenerationClientConfig,
        session: Optional[requests.Session] = None
    ):
        """Initialize the client.

        Args:
            config: Endpoint, credential and timeout
            session: HTTP session to reuse (a new one is created if omitted)
        """
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "User-Agent": f"AI-Code-Generator/{__version__}",
        })

    def is_configured(self) -> bool:
        """Check that a real credential is set before spending a network call."""
        api_key = self.config.api_key
        if not api_key or not api_key.strip():
            return False
        return api_key.strip().lower() not in PLACEHOLDER_API_KEYS

    @staticmethod
    def build_instruction(prompt: str, language: str) -> str:
        return (
            f"Generate clean, production-ready {language} code for the following requirement. "
            "Include proper error handling, comments, and follow idiomatic best practices. "
            "Only return the code without explanations or markdown formatting.\n\n"
            f"Requirement: {prompt}\n\n"
            f"Programming Language: {language}"
        )

    def generate(self, prompt: str, language: str) -> str:
        """Generate code for a prompt.

        Args:
            prompt: Validated natural-language requirement
            language: Validated target language

        Returns:
            Normalized code, or the no-code placeholder if the model
            returned nothing usable

        Raises:
            ExternalServiceError: On transport failure, non-success status
                or a response body without generated text
        """
        payload = {
            "contents": [{
                "parts": [{"text": self.build_instruction(prompt, language)}]
            }]
        }
        logger.debug("Sending generation request for language %s", language)

        try:
            response = self.session.post(
                self.config.api_url,
                params={"key": self.config.api_key},
                json=payload,
                timeout=self.config.timeout_seconds
            )
        except requests.RequestException as e:
            logger.error("Error calling generation API: %s", e)
            raise ExternalServiceError(f"Request to generation API failed: {e}") from e

        if not response.ok:
            detail = _error_detail(response)
            logger.error("Generation API error %s: %s", response.status_code, detail)
            raise ExternalServiceError(
                f"Generation API returned {response.status_code}: {detail}",
                status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ExternalServiceError(f"Generation API returned invalid JSON: {e}") from e

        return normalize_generated_code(extract_generated_text(data))


def extract_generated_text(data: Any) -> str:
    """Pull the first candidate's first text part out of a response body.

    Raises:
        ExternalServiceError: If the body doesn't have that shape
    """
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        reason = _block_reason(data)
        message = "Generation API response contained no generated text"
        if reason:
            message = f"{message} (blocked: {reason})"
        raise ExternalServiceError(message) from e

    if text is not None and not isinstance(text, str):
        raise ExternalServiceError("Generation API response text is not a string")
    return text or ""


def _block_reason(data: Any) -> Optional[str]:
    if isinstance(data, dict):
        feedback = data.get("promptFeedback")
        if isinstance(feedback, dict):
            return feedback.get("blockReason")
    return None


def _error_detail(response: requests.Response) -> str:
    try:
        body: Dict[str, Any] = response.json()
    except ValueError:
        return response.text[:500] or response.reason or "no detail"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return str(body)[:500]
