"""Turning matched downloads into dropdown rows."""
from __future__ import annotations

import html
from typing import Any, Callable, Mapping, Optional

from .config import settings
from .models import ResultItem

PriceLookup = Callable[[str], Optional[Mapping[str, Mapping[str, Any]]]]


def shape_results(
    items: Mapping[str, str],
    variations: bool,
    variations_only: bool,
    price_lookup: PriceLookup,
    price_options_label: str = settings.price_options_label,
) -> list[ResultItem]:
    """Build the row list for ``items`` (download id -> title, in display order).

    Downloads with variable prices get an "(All Price Options)" row unless
    only variations were requested, and one ``"<id>_<key>"`` row per named
    price when ``variations`` is set. A download without prices always keeps
    its own row, even with ``variations_only``.
    """
    results: list[ResultItem] = []

    for item_id, product_title in items.items():
        prices = price_lookup(item_id) or {}

        title = product_title
        if prices and (not variations or not variations_only):
            title = f"{title} ({price_options_label})"

        if not prices or not variations_only:
            results.append(ResultItem(id=str(item_id), name=title))

        if not (variations and prices):
            continue

        for key, value in prices.items():
            name = (value or {}).get("name") or ""
            if not name:
                continue
            results.append(
                ResultItem(
                    id=f"{item_id}_{key}",
                    name=html.escape(f"{product_title}: {name}"),
                )
            )

    return results
