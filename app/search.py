"""Download autocomplete search.

A request is answered from the search cache when its normalized text equals
the cached text. Otherwise the terms are parsed, the catalog is queried and
the shaped rows replace the cached state.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from time import perf_counter
from typing import Iterable, List, Tuple

from .cache import QueryCache
from .catalog import CatalogQuery, CatalogQueryAdapter
from .config import settings
from .models import ResultItem, SearchQuery, SearchState
from .results import shape_results
from .terms import normalize_search_text, parse_search_terms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusPolicy:
    """Which download statuses a caller may see in the dropdown."""

    public: Tuple[str, ...] = ("published",)
    privileged: Tuple[str, ...] = ("published", "draft", "private", "scheduled")

    def statuses_for(self, can_see_all: bool) -> List[str]:
        return list(self.privileged if can_see_all else self.public)


class DownloadSearch:
    def __init__(
        self,
        catalog: CatalogQueryAdapter,
        cache: QueryCache,
        status_policy: StatusPolicy | None = None,
        limit: int = settings.search_result_limit,
        price_options_label: str = settings.price_options_label,
    ) -> None:
        self.catalog = catalog
        self.cache = cache
        self.status_policy = status_policy or StatusPolicy()
        self.limit = limit
        self.price_options_label = price_options_label

    async def handle(
        self,
        raw_text: str | None,
        exclude_ids: Iterable[int] = (),
        *,
        no_bundles: bool = False,
        variations: bool = False,
        variations_only: bool = False,
        can_see_all_statuses: bool = False,
    ) -> List[ResultItem]:
        t0 = perf_counter()
        text = normalize_search_text(raw_text)

        cached = await asyncio.to_thread(self.cache.get)
        if cached.text == text:
            logger.info(
                "timing: total=%.2fms cache_hit=1 q=%r rows=%s",
                (perf_counter() - t0) * 1000,
                text,
                len(cached.results),
            )
            return cached.results

        search = SearchQuery(
            text=text,
            exclude_ids=list(dict.fromkeys(exclude_ids)),
            no_bundles=no_bundles,
            variations=variations,
            variations_only=variations_only,
            statuses=self.status_policy.statuses_for(can_see_all_statuses),
        )
        results = await self._search(search)
        t1 = perf_counter()

        await asyncio.to_thread(self.cache.set, SearchState(text=text, results=results))
        logger.info(
            "timing: total=%.2fms cache_hit=0 q=%r statuses=%s excludes=%s rows=%s",
            (t1 - t0) * 1000,
            text,
            search.statuses,
            search.exclude_ids,
            len(results),
        )
        return results

    async def _search(self, search: SearchQuery) -> List[ResultItem]:
        catalog_query = CatalogQuery(
            title_terms=parse_search_terms(search.text),
            statuses=search.statuses,
            exclude_ids=search.exclude_ids,
            exclude_bundles=search.no_bundles,
            limit=self.limit,
        )
        items = await asyncio.to_thread(self.catalog.query, catalog_query)
        # Price lookups hit the catalog once per item, keep them off the loop.
        return await asyncio.to_thread(
            shape_results,
            items,
            search.variations,
            search.variations_only,
            self.catalog.get_variable_prices,
            self.price_options_label,
        )
