"""
Error taxonomy for the generation pipeline.

Only ValidationError keeps an attempt out of the history ledger; every other
category is recorded as a failed outcome.
"""

from typing import Dict, Optional


class CodeGenError(Exception):
    """Base class for all generation pipeline errors."""


class ValidationError(CodeGenError):
    """Request rejected before any side effect."""

    def __init__(self, field_errors: Dict[str, str]):
        self.field_errors = dict(field_errors)
        detail = "; ".join(f"{name}: {message}" for name, message in self.field_errors.items())
        super().__init__(f"Invalid request: {detail}")


class NotConfiguredError(CodeGenError):
    """Generation credential is missing or still a placeholder."""


class ExternalServiceError(CodeGenError):
    """Upstream call failed at transport level or returned an unusable body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class EmptyResultError(CodeGenError):
    """Upstream call succeeded but produced no usable code."""


class StorageError(CodeGenError):
    """Ledger write failed."""


class StorageReadDegradation(CodeGenError):
    """Ledger read failed and was degraded to an empty result."""
