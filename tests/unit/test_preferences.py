import asyncio

import pytest

from proxyview.columns import DEFAULT_COLUMNS
from proxyview.persistence.preferences import PreferenceCache
from tests.helpers import FakePreferenceBackend

pytestmark = pytest.mark.unit


def test_load_fetches_once_and_caches():
    backend = FakePreferenceBackend({"proxy_list_columns": ["ip", "alive_ratio_http"]})
    cache = PreferenceCache(backend)

    async def scenario():
        first, second = await asyncio.gather(cache.load(), cache.load())
        third = await cache.load()
        return first, second, third

    first, second, third = asyncio.run(scenario())
    assert backend.fetches == 1
    assert first == second == third
    assert cache.loaded
    assert cache.columns_for("proxy_list_columns") == ["ip", "health_http"]
    assert cache.columns_for("scrape_source_proxy_columns") == list(DEFAULT_COLUMNS)


def test_save_merges_into_document_and_notifies():
    backend = FakePreferenceBackend({"theme": "dark"})
    cache = PreferenceCache(backend)
    seen = []
    cache.add_listener(seen.append)

    result = asyncio.run(cache.save_columns("scrape_source_proxy_columns", ["port", "ip"]))

    assert result == ["port", "ip"]
    assert backend.fetches == 1
    assert backend.saved == [{"theme": "dark", "scrape_source_proxy_columns": ["port", "ip"]}]
    assert seen[-1] == {"theme": "dark", "scrape_source_proxy_columns": ["port", "ip"]}


def test_save_failure_propagates_and_keeps_cache():
    backend = FakePreferenceBackend({"proxy_list_columns": ["ip"]}, save_error=RuntimeError("nope"))
    cache = PreferenceCache(backend)

    async def scenario():
        await cache.load()
        with pytest.raises(RuntimeError):
            await cache.save_columns("proxy_list_columns", ["port"])

    asyncio.run(scenario())
    assert cache.columns_for("proxy_list_columns") == ["ip"]


def test_close_drops_document_and_listeners():
    backend = FakePreferenceBackend({"proxy_list_columns": ["ip"]})
    cache = PreferenceCache(backend)
    seen = []
    cache.add_listener(seen.append)
    asyncio.run(cache.load())
    cache.close()
    assert not cache.loaded
    assert seen == [{"proxy_list_columns": ["ip"]}]
