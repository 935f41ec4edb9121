"""Loads the downloads catalog file and bulk-indexes it."""
from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Iterable

from elasticsearch import Elasticsearch, helpers
from pydantic import ValidationError

from .config import settings
from .models import CatalogItem

logger = logging.getLogger(__name__)


def _prepare_item(raw: dict) -> CatalogItem:
    title = raw.get("title") or raw.get("name") or ""
    prices = raw.get("prices") or {}
    # Price lists without explicit keys are keyed by position.
    if isinstance(prices, list):
        prices = {str(idx): value for idx, value in enumerate(prices)}
    return CatalogItem(
        id=str(raw["id"]),
        title=title,
        status=raw.get("status") or "published",
        product_type=raw.get("product_type") or None,
        prices={str(key): value for key, value in prices.items()},
    )


def load_downloads(path: Path) -> list[CatalogItem]:
    if not path.exists():
        logger.warning("Downloads file %s is missing", path)
        return []
    with path.open("r", encoding="utf-8") as fh:
        raw_items = json.load(fh)

    items: list[CatalogItem] = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            logger.warning("Skipping malformed download entry %r", raw)
            continue
        try:
            items.append(_prepare_item(raw))
        except (AttributeError, KeyError, ValidationError) as exc:
            logger.warning("Skipping malformed download %r: %s", raw.get("id"), exc)
    return items


def _iter_actions(index: str, items: Iterable[CatalogItem]) -> Iterable[dict]:
    for item in items:
        yield {
            "_index": index,
            "_id": item.id,
            "_source": item.model_dump(exclude={"id"}, exclude_none=True),
        }


async def import_downloads(es: Elasticsearch) -> int:
    items = load_downloads(Path(settings.downloads_path))
    if not items:
        return 0
    actions = list(_iter_actions(settings.es_index, items))
    await asyncio.to_thread(helpers.bulk, es, actions)
    logger.info("Indexed %s downloads into %s", len(actions), settings.es_index)
    return len(actions)


async def import_if_empty(es: Elasticsearch) -> int:
    stats = await asyncio.to_thread(es.count, index=settings.es_index)
    if stats.get("count", 0) > 0:
        return 0
    return await import_downloads(es)


async def reindex_data(es: Elasticsearch) -> int:
    from .indexing import drop_index, ensure_index

    await drop_index(es)
    await ensure_index(es)
    return await import_downloads(es)
