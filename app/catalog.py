"""Catalog access: title substring queries over downloads.

The search handler only talks to :class:`CatalogQueryAdapter`. Two
implementations ship here: :class:`ElasticsearchCatalog` for the running
service and :class:`InMemoryCatalog` for JSON catalogs loaded by the CLI.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Protocol

from elasticsearch import Elasticsearch
from elasticsearch.exceptions import NotFoundError

from .config import settings
from .models import CatalogItem

logger = logging.getLogger(__name__)

BUNDLE_TYPE = "bundle"
# Lowercased keyword copy of the title, used for ordering and wildcards.
TITLE_SORT_FIELD = "title.sort"

_WILDCARD_SPECIAL_RE = re.compile(r"([\\*?])")


@dataclass(frozen=True)
class CatalogQuery:
    """Filter passed to the catalog. Results are always ordered by title."""

    title_terms: List[str] = field(default_factory=list)
    statuses: List[str] = field(default_factory=lambda: ["published"])
    exclude_ids: List[int] = field(default_factory=list)
    exclude_bundles: bool = False
    limit: int = settings.search_result_limit


class CatalogQueryAdapter(Protocol):
    def query(self, query: CatalogQuery) -> Dict[str, str]: ...

    def get_variable_prices(self, item_id: str) -> Dict[str, Dict[str, Any]]: ...


def _escape_wildcard(term: str) -> str:
    return _WILDCARD_SPECIAL_RE.sub(r"\\\1", term)


def build_es_query(query: CatalogQuery) -> Dict[str, Any]:
    bool_clause: Dict[str, List[dict]] = {"must": [], "filter": [], "must_not": []}

    # Every term must appear somewhere in the title.
    for term in query.title_terms:
        bool_clause["must"].append(
            {"wildcard": {TITLE_SORT_FIELD: {"value": f"*{_escape_wildcard(term.lower())}*"}}}
        )

    bool_clause["filter"].append({"terms": {"status": list(query.statuses)}})

    if query.exclude_ids:
        bool_clause["must_not"].append({"ids": {"values": [str(item_id) for item_id in query.exclude_ids]}})

    if query.exclude_bundles:
        bool_clause["filter"].append(
            {
                "bool": {
                    "should": [
                        {"bool": {"must_not": [{"term": {"product_type": BUNDLE_TYPE}}]}},
                        {"bool": {"must_not": [{"exists": {"field": "product_type"}}]}},
                    ],
                    "minimum_should_match": 1,
                }
            }
        )

    body = {
        "size": query.limit,
        "_source": ["title", "prices"],
        "sort": [{TITLE_SORT_FIELD: {"order": "asc"}}],
        "query": {"bool": {key: clauses for key, clauses in bool_clause.items() if clauses}},
    }
    logger.debug("ES query payload=%s", body)
    return body


class ElasticsearchCatalog:
    """Catalog backed by the downloads index.

    Calls are blocking; the handler runs them via ``asyncio.to_thread``.
    Prices come back with the search hits and are served from the last query;
    ids not seen there fall back to a document fetch.
    """

    def __init__(self, es: Elasticsearch, index: str = settings.es_index) -> None:
        self.es = es
        self.index = index
        self._prices: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def query(self, query: CatalogQuery) -> Dict[str, str]:
        response = self.es.search(index=self.index, body=build_es_query(query))
        hits = response.get("hits", {}).get("hits", [])
        self._prices = {hit["_id"]: hit.get("_source", {}).get("prices") or {} for hit in hits}
        return {hit["_id"]: hit.get("_source", {}).get("title", "") for hit in hits}

    def get_variable_prices(self, item_id: str) -> Dict[str, Dict[str, Any]]:
        prices = self._prices.get(item_id)
        if prices is not None:
            return prices
        try:
            doc = self.es.get(index=self.index, id=item_id, source_includes=["prices"])
        except NotFoundError:
            return {}
        return doc["_source"].get("prices") or {}


class InMemoryCatalog:
    """Same matching rules as the index, over a list of downloads."""

    def __init__(self, items: Iterable[CatalogItem]) -> None:
        self._items: Dict[str, CatalogItem] = {item.id: item for item in items}

    def __len__(self) -> int:
        return len(self._items)

    def _matches(self, item: CatalogItem, query: CatalogQuery, excluded: set[str]) -> bool:
        if item.id in excluded or item.status not in query.statuses:
            return False
        if query.exclude_bundles and item.product_type == BUNDLE_TYPE:
            return False
        title = item.title.lower()
        return all(term.lower() in title for term in query.title_terms)

    def query(self, query: CatalogQuery) -> Dict[str, str]:
        excluded = {str(item_id) for item_id in query.exclude_ids}
        matched = [item for item in self._items.values() if self._matches(item, query, excluded)]
        matched.sort(key=lambda item: item.title.lower())
        return {item.id: item.title for item in matched[: query.limit]}

    def get_variable_prices(self, item_id: str) -> Dict[str, Dict[str, Any]]:
        item = self._items.get(item_id)
        return dict(item.prices) if item else {}
