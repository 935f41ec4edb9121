"""Application configuration and constants."""
from __future__ import annotations

import os
from dataclasses import dataclass


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


def _get_list(name: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in _get_env(name, "").split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    """Simple settings container with environment variable overrides."""

    es_host: str = _get_env("ES_HOST", "http://localhost:9200")
    es_index: str = _get_env("ES_INDEX", "downloads")
    es_timeout_seconds: float = float(_get_env("ES_TIMEOUT_SECONDS", "10"))
    downloads_path: str = _get_env("DOWNLOADS_PATH", "downloads.json")
    redis_host: str = _get_env("REDIS_HOST", "localhost")
    redis_port: int = int(_get_env("REDIS_PORT", "6379"))
    search_cache_key: str = _get_env("SEARCH_CACHE_KEY", "download_search")
    search_cache_ttl_seconds: int = int(_get_env("SEARCH_CACHE_TTL_SECONDS", "30"))
    search_result_limit: int = int(_get_env("SEARCH_RESULT_LIMIT", "50"))
    price_options_label: str = _get_env("PRICE_OPTIONS_LABEL", "All Price Options")
    editor_api_keys: tuple[str, ...] = _get_list("EDITOR_API_KEYS")
    load_on_startup: bool = _get_env("LOAD_ON_STARTUP", "true").lower() in {"1", "true", "yes"}
    log_level: str = _get_env("LOG_LEVEL", "INFO")


settings = Settings()
