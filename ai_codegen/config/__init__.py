"""
Configuration for AI Code Generator.
"""

from .loader import AppConfig, CacheConfig, GenerationClientConfig, StorageConfig, load_config

__all__ = ["AppConfig", "CacheConfig", "GenerationClientConfig", "StorageConfig", "load_config"]
