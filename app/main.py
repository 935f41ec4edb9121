"""FastAPI application wiring the download search."""
from __future__ import annotations

import asyncio
import logging
from functools import lru_cache
from typing import List

from elastic_transport import TransportError
from elasticsearch import ApiError
from fastapi import Depends, FastAPI, HTTPException, Query

from .auth import can_edit_products
from .cache import QueryCache, get_cache
from .catalog import ElasticsearchCatalog
from .config import settings
from .es_client import get_client
from .importer import import_if_empty, reindex_data
from .indexing import ensure_index, index_is_empty
from .models import ResultItem
from .params import parse_bool, parse_exclude_ids
from .search import DownloadSearch

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVEL = logging.getLevelName(settings.log_level.upper())

# uvicorn installs its own handlers; ``force=True`` replaces them so search
# timing lines share one format.
logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT, force=True)
for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "elastic_transport"):
    logging.getLogger(name).setLevel(LOG_LEVEL)

logger = logging.getLogger(__name__)
logger.info("Logging configured at %s", settings.log_level.upper())

app = FastAPI(title="Download Search Service")


@lru_cache(maxsize=1)
def get_search_handler() -> DownloadSearch:
    return DownloadSearch(
        catalog=ElasticsearchCatalog(get_client(), settings.es_index),
        cache=QueryCache(get_cache()),
    )


@app.on_event("startup")
async def startup_event() -> None:
    es = get_client()
    await ensure_index(es)
    if settings.load_on_startup:
        imported = await import_if_empty(es)
        if imported:
            logger.info("Imported %s downloads on startup", imported)


@app.get("/health")
async def health() -> dict:
    es = get_client()
    status = await asyncio.to_thread(es.cluster.health)
    empty = await index_is_empty(es)
    return {
        "elasticsearch": status.get("status"),
        "index": settings.es_index,
        "empty": empty,
    }


@app.get("/downloads/search", response_model=List[ResultItem])
async def search_downloads(
    s: str = Query("", description="Partial download title"),
    current_id: List[str] = Query([], description="Download ids to leave out"),
    no_bundles: str | None = None,
    variations: str | None = None,
    variations_only: str | None = None,
    can_edit: bool = Depends(can_edit_products),
    handler: DownloadSearch = Depends(get_search_handler),
) -> List[ResultItem]:
    try:
        return await handler.handle(
            s,
            parse_exclude_ids(current_id),
            no_bundles=parse_bool(no_bundles),
            variations=parse_bool(variations),
            variations_only=parse_bool(variations_only),
            can_see_all_statuses=can_edit,
        )
    except (ApiError, TransportError) as exc:
        logger.exception("Catalog query failed for s=%r", s)
        raise HTTPException(status_code=503, detail="Catalog unavailable") from exc


@app.post("/reindex")
async def reindex(can_edit: bool = Depends(can_edit_products)) -> dict:
    if not can_edit:
        raise HTTPException(status_code=403, detail="Editor key required")
    es = get_client()
    count = await reindex_data(es)
    return {"indexed": count}
