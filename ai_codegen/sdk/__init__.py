"""
SDK for AI Code Generator.

Provides the client for the external text generation API.
"""

from .gemini_client import GeminiClient

__all__ = ["GeminiClient"]
