"""Elasticsearch client factory for the downloads catalog.

The client is synchronous; :mod:`app.search` and :mod:`app.indexing` push its
blocking calls through ``asyncio.to_thread``.
"""
from __future__ import annotations

import logging
from functools import lru_cache

from elasticsearch import Elasticsearch

from .config import settings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_client() -> Elasticsearch:
    logger.info("Connecting to Elasticsearch at %s (index=%s)", settings.es_host, settings.es_index)
    return Elasticsearch(settings.es_host, request_timeout=settings.es_timeout_seconds)
