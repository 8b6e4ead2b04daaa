"""
Request and outcome values for the generation pipeline.

Defines the inbound request and the result of a single generation attempt.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

MAX_PROMPT_LENGTH = 1000
MAX_LANGUAGE_LENGTH = 50


@dataclass(frozen=True)
class GenerationRequest:
    """Prompt plus target language for one generation attempt."""
    prompt: str
    language: str

    def field_errors(self) -> Dict[str, str]:
        """Validate the request without side effects.

        Returns:
            Mapping of field name to error message, empty when the request is valid
        """
        errors = {}

        if not isinstance(self.prompt, str) or not self.prompt.strip():
            errors["prompt"] = "Prompt cannot be empty"
        elif len(self.prompt) > MAX_PROMPT_LENGTH:
            errors["prompt"] = f"Prompt cannot exceed {MAX_PROMPT_LENGTH} characters"

        if not isinstance(self.language, str) or not self.language.strip():
            errors["language"] = "Programming language must be specified"
        elif len(self.language) > MAX_LANGUAGE_LENGTH:
            errors["language"] = f"Language name cannot exceed {MAX_LANGUAGE_LENGTH} characters"

        return errors

    def is_valid(self) -> bool:
        return not self.field_errors()


@dataclass(frozen=True)
class GenerationOutcome:
    """Result of a single generation attempt.

    Built only through success() or failure(), so exactly one of
    generated_code and error_message is set.
    """
    prompt: Optional[str]
    language: Optional[str]
    success: bool
    execution_time_ms: int
    timestamp: datetime
    generated_code: Optional[str] = None
    error_message: Optional[str] = None
    field_errors: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def succeeded(
        cls,
        generated_code: str,
        prompt: str,
        language: str,
        execution_time_ms: int
    ) -> "GenerationOutcome":
        """Create a successful outcome.

        Raises:
            ValueError: If generated_code is empty
        """
        if not generated_code or not generated_code.strip():
            raise ValueError("generated_code is required for a successful outcome")
        return cls(
            prompt=prompt,
            language=language,
            success=True,
            execution_time_ms=max(0, int(execution_time_ms)),
            timestamp=datetime.now(),
            generated_code=generated_code,
        )

    @classmethod
    def failed(
        cls,
        prompt: Optional[str],
        language: Optional[str],
        error_message: str,
        execution_time_ms: int = 0,
        field_errors: Optional[Dict[str, str]] = None
    ) -> "GenerationOutcome":
        """Create a failed outcome.

        Raises:
            ValueError: If error_message is empty
        """
        if not error_message or not error_message.strip():
            raise ValueError("error_message is required for a failed outcome")
        return cls(
            prompt=prompt,
            language=language,
            success=False,
            execution_time_ms=max(0, int(execution_time_ms)),
            timestamp=datetime.now(),
            error_message=error_message,
            field_errors=dict(field_errors or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the response shape returned to callers."""
        data = {
            "generatedCode": self.generated_code,
            "prompt": self.prompt,
            "language": self.language,
            "timestamp": self.timestamp.isoformat(),
            "executionTimeMs": self.execution_time_ms,
            "success": self.success,
            "errorMessage": self.error_message,
        }
        if self.field_errors:
            data["fieldErrors"] = dict(self.field_errors)
        return data
