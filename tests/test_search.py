"""Tests for the download search handler."""

import asyncio
import threading

import pytest

from app.cache import InMemoryCache, QueryCache
from app.models import SearchState
from app.search import DownloadSearch, StatusPolicy

from .conftest import RecordingCatalog
from .test_cache import BrokenBackend


def run(handler, *args, **kwargs):
    return asyncio.run(handler.handle(*args, **kwargs))


@pytest.fixture
def search_cache():
    return QueryCache(InMemoryCache())


def test_repeated_text_is_served_from_cache(recording_catalog, search_cache):
    handler = DownloadSearch(recording_catalog, search_cache)

    first = run(handler, "Shirt!")
    second = run(handler, "Shirt")

    assert len(recording_catalog.queries) == 1
    assert [item.model_dump() for item in second] == [item.model_dump() for item in first]


def test_new_text_replaces_cached_state(recording_catalog, search_cache):
    handler = DownloadSearch(recording_catalog, search_cache)

    run(handler, "shirt")
    run(handler, "red shirt")

    assert len(recording_catalog.queries) == 2
    assert search_cache.get().text == "red shirt"


def test_empty_text_with_empty_cache_returns_cached_default(recording_catalog, search_cache):
    handler = DownloadSearch(recording_catalog, search_cache)

    assert run(handler, "") == []
    assert recording_catalog.queries == []


def test_catalog_query_is_built_from_request(recording_catalog, search_cache):
    handler = DownloadSearch(recording_catalog, search_cache, limit=50)

    run(handler, "pro-theme a", [4, 4, 9], no_bundles=True)
    query = recording_catalog.queries[0]

    assert query.title_terms == ["pro", "theme"]
    assert query.exclude_ids == [4, 9]
    assert query.exclude_bundles is True
    assert query.statuses == ["published"]
    assert query.limit == 50


def test_single_letter_search_has_no_title_terms(recording_catalog, search_cache):
    handler = DownloadSearch(recording_catalog, search_cache)

    run(handler, "a -")

    assert recording_catalog.queries[0].title_terms == []


def test_editors_see_every_status(recording_catalog, search_cache):
    handler = DownloadSearch(recording_catalog, search_cache)

    run(handler, "shirt", can_see_all_statuses=True)

    assert recording_catalog.queries[0].statuses == ["published", "draft", "private", "scheduled"]


def test_status_policy_is_injectable(recording_catalog, search_cache):
    policy = StatusPolicy(public=("published", "scheduled"))
    handler = DownloadSearch(recording_catalog, search_cache, status_policy=policy)

    run(handler, "shirt")

    assert recording_catalog.queries[0].statuses == ["published", "scheduled"]


def test_results_are_shaped_and_cached(recording_catalog, search_cache):
    handler = DownloadSearch(recording_catalog, search_cache)

    results = run(handler, "shirt", variations=True)

    assert [(item.id, item.name) for item in results] == [
        ("2", "Red Shirt (All Price Options)"),
        ("2_1", "Red Shirt: Small"),
        ("1", "Blue Shirt"),
    ]
    assert search_cache.get() == SearchState(text="shirt", results=results)


def test_catalog_failure_propagates_without_caching(search_cache):
    catalog = RecordingCatalog(error=RuntimeError("index missing"))
    handler = DownloadSearch(catalog, search_cache)

    with pytest.raises(RuntimeError):
        run(handler, "shirt")
    assert search_cache.get() == SearchState()


def test_unavailable_cache_still_searches(recording_catalog):
    handler = DownloadSearch(recording_catalog, QueryCache(BrokenBackend()))

    run(handler, "shirt")
    results = run(handler, "shirt")

    assert len(recording_catalog.queries) == 2
    assert [item.id for item in results] == ["2", "1"]


def test_cache_io_runs_off_the_event_loop(recording_catalog):
    threads = []

    class ThreadRecordingCache(QueryCache):
        def get(self):
            threads.append(threading.get_ident())
            return super().get()

        def set(self, state):
            threads.append(threading.get_ident())
            super().set(state)

    handler = DownloadSearch(recording_catalog, ThreadRecordingCache(InMemoryCache()))

    run(handler, "shirt")

    assert len(threads) == 2
    assert threading.get_ident() not in threads


def test_cached_rows_ignore_caller_privilege(search_cache):
    """The cache compares text only, so an editor's rows are reused for anyone."""

    catalog = RecordingCatalog(items={"4": "Draft Shirt"})
    handler = DownloadSearch(catalog, search_cache)

    editor_rows = run(handler, "shirt", can_see_all_statuses=True)
    public_rows = run(handler, "shirt", can_see_all_statuses=False)

    assert len(catalog.queries) == 1
    assert public_rows == editor_rows
