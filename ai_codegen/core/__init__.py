"""
Core modules for AI Code Generator.

This package contains the generation pipeline, response normalization,
and the statistics layer over the history ledger.
"""
