"""
Configuration management and loading.

Handles application settings from an optional YAML file and environment
variables. The result is an immutable AppConfig built once at startup and
passed to the components that need it.
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from ..storage.db import DEFAULT_DB_PATH

DEFAULT_API_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "gemini-2.0-flash:generateContent"
)
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_CACHE_TTL_SECONDS = 5.0

ENV_API_KEY = "GEMINI_API_KEY"
ENV_API_URL = "GEMINI_API_URL"
ENV_DB_PATH = "AI_CODEGEN_DB_PATH"
ENV_CONFIG_PATH = "AI_CODEGEN_CONFIG"


@dataclass(frozen=True)
class GenerationClientConfig:
    """Endpoint and credential for the generation API."""
    api_url: str = DEFAULT_API_URL
    api_key: Optional[str] = field(default=None, repr=False)
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self):
        """Validate endpoint and timeout."""
        if not self.api_url or not self.api_url.strip():
            raise ValueError("api_url cannot be empty")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")


@dataclass(frozen=True)
class StorageConfig:
    """Location of the history ledger."""
    db_path: str = DEFAULT_DB_PATH

    def __post_init__(self):
        if not self.db_path or not self.db_path.strip():
            raise ValueError("db_path cannot be empty")


@dataclass(frozen=True)
class CacheConfig:
    """Validity window for cached aggregates."""
    ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS

    def __post_init__(self):
        if self.ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")


@dataclass(frozen=True)
class AppConfig:
    """Complete application configuration."""
    generation: GenerationClientConfig = field(default_factory=GenerationClientConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)


def load_config(
    path: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None
) -> AppConfig:
    """Load and validate application configuration.

    Values come from the YAML file (if any) and are then overridden by
    environment variables. A missing API key is not an error: it yields a
    client that reports itself as not configured.

    Args:
        path: Path to YAML configuration file; falls back to AI_CODEGEN_CONFIG
        env: Environment mapping, defaults to os.environ

    Returns:
        Validated AppConfig object

    Raises:
        FileNotFoundError: If the config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    env = os.environ if env is None else env
    path = path or env.get(ENV_CONFIG_PATH) or None

    config = _load_file(path) if path else AppConfig()
    return _apply_env(config, env)


def _load_file(path: str) -> AppConfig:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if not raw_config:
        return AppConfig()
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration file must contain a mapping")

    allowed_top_keys = {'generation', 'storage', 'cache'}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    generation_data = _section(raw_config, 'generation', {'api_url', 'api_key', 'timeout_seconds'})
    storage_data = _section(raw_config, 'storage', {'db_path'})
    cache_data = _section(raw_config, 'cache', {'ttl_seconds'})

    generation = GenerationClientConfig(
        api_url=_string(generation_data, 'api_url', 'generation', DEFAULT_API_URL),
        api_key=_string(generation_data, 'api_key', 'generation', None),
        timeout_seconds=_positive_number(
            generation_data, 'timeout_seconds', 'generation', DEFAULT_TIMEOUT_SECONDS
        )
    )
    storage = StorageConfig(
        db_path=_string(storage_data, 'db_path', 'storage', DEFAULT_DB_PATH)
    )
    cache = CacheConfig(
        ttl_seconds=_positive_number(cache_data, 'ttl_seconds', 'cache', DEFAULT_CACHE_TTL_SECONDS)
    )

    return AppConfig(generation=generation, storage=storage, cache=cache)


def _apply_env(config: AppConfig, env: Mapping[str, str]) -> AppConfig:
    generation = config.generation
    if env.get(ENV_API_KEY):
        generation = replace(generation, api_key=env[ENV_API_KEY])
    if env.get(ENV_API_URL):
        generation = replace(generation, api_url=env[ENV_API_URL])

    storage = config.storage
    if env.get(ENV_DB_PATH):
        storage = replace(storage, db_path=env[ENV_DB_PATH])

    return replace(config, generation=generation, storage=storage)


def _section(raw_config: Dict, name: str, allowed_keys: set) -> Dict[str, Any]:
    data = raw_config.get(name) or {}
    if not isinstance(data, dict):
        raise ValueError(f"'{name}' must be a dictionary")

    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in {name}: {unknown_keys}")
    return data


def _string(data: Dict, key: str, path: str, default: Optional[str]) -> Optional[str]:
    if data.get(key) is None:
        return default
    value = data[key]
    if not isinstance(value, str):
        raise ValueError(f"'{key}' in {path} must be a string")
    return value


def _positive_number(data: Dict, key: str, path: str, default: float) -> float:
    if data.get(key) is None:
        return default
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValueError(f"'{key}' in {path} must be > 0")
    return float(value)
