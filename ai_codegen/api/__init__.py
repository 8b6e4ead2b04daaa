"""
HTTP API for AI Code Generator.
"""

from .app import create_app

__all__ = ["create_app"]
