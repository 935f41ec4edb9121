"""Shared fixtures for the download search tests."""

import pytest

from app.models import CatalogItem


@pytest.fixture
def downloads():
    return [
        CatalogItem(id="1", title="Blue Shirt"),
        CatalogItem(
            id="2",
            title="Red Shirt",
            prices={"1": {"name": "Small", "amount": 5.0}, "2": {"name": "", "amount": 7.0}},
        ),
        CatalogItem(id="3", title="Shirt Bundle", product_type="bundle"),
        CatalogItem(id="4", title="Draft Shirt", status="draft"),
        CatalogItem(id="5", title="socks", product_type="default"),
    ]


class RecordingCatalog:
    """Catalog double that remembers every query it receives."""

    def __init__(self, items=None, prices=None, error=None):
        self.items = items or {}
        self.prices = prices or {}
        self.error = error
        self.queries = []

    def query(self, query):
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return dict(self.items)

    def get_variable_prices(self, item_id):
        return self.prices.get(item_id, {})


@pytest.fixture
def recording_catalog():
    return RecordingCatalog(
        items={"2": "Red Shirt", "1": "Blue Shirt"},
        prices={"2": {"1": {"name": "Small"}}},
    )
