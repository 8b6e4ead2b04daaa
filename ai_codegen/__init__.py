"""
AI Code Generator.

Turns natural-language prompts into code snippets and keeps a ledger of
every generation attempt.
"""

__version__ = "1.0.0"
