"""Pydantic models for request/response payloads."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ResultItem(BaseModel):
    """One selectable row of the dropdown.

    ``id`` is a download id, or ``"<download id>_<price key>"`` for a variable
    price row.
    """

    id: str
    name: str


class SearchState(BaseModel):
    """Last search text together with the rows it produced."""

    text: str = ""
    results: list[ResultItem] = Field(default_factory=list)


class SearchQuery(BaseModel):
    text: str = ""
    exclude_ids: list[int] = Field(default_factory=list)
    no_bundles: bool = False
    variations: bool = False
    variations_only: bool = False
    statuses: list[str] = Field(default_factory=list)


class CatalogItem(BaseModel):
    """A download as stored in the catalog."""

    id: str
    title: str
    status: str = "published"
    product_type: str | None = None
    prices: dict[str, dict[str, Any]] = Field(default_factory=dict)
