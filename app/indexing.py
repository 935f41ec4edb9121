"""Index creation and maintenance helpers."""
from __future__ import annotations

import asyncio
import logging

from elasticsearch import Elasticsearch
from elasticsearch.exceptions import BadRequestError, NotFoundError

from .config import settings

logger = logging.getLogger(__name__)

DOWNLOADS_MAPPING: dict = {
    "settings": {
        "analysis": {
            "normalizer": {
                "lowercase_normalizer": {"type": "custom", "filter": ["lowercase"]},
            }
        }
    },
    "mappings": {
        "properties": {
            "title": {
                "type": "text",
                "fields": {
                    # Sorting and substring wildcards run on the whole lowercased title.
                    "sort": {"type": "keyword", "normalizer": "lowercase_normalizer"},
                },
            },
            "status": {"type": "keyword"},
            "product_type": {"type": "keyword"},
            "prices": {"type": "object", "enabled": False},
        }
    },
}


async def ensure_index(es: Elasticsearch) -> None:
    """Create the downloads index if it is missing."""

    exists = await asyncio.to_thread(es.indices.exists, index=settings.es_index)
    if exists:
        return
    logger.info("Creating index %s", settings.es_index)
    try:
        await asyncio.to_thread(es.indices.create, index=settings.es_index, body=DOWNLOADS_MAPPING)
    except BadRequestError as exc:
        if getattr(exc, "error", "") == "resource_already_exists_exception":
            logger.info("Index %s already exists", settings.es_index)
            return
        logger.exception("Failed to create index: %s", exc)
        raise


async def drop_index(es: Elasticsearch) -> None:
    try:
        await asyncio.to_thread(es.indices.delete, index=settings.es_index)
    except NotFoundError:
        return


async def index_is_empty(es: Elasticsearch) -> bool:
    try:
        stats = await asyncio.to_thread(es.count, index=settings.es_index)
        return stats.get("count", 0) == 0
    except NotFoundError:
        return True
