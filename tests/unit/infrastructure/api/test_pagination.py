import asyncio
import logging

import httpx
import pytest

from conftest import link_header, make_http_client
from slogcli.domain.models.errors import ApiError
from slogcli.infrastructure.api.pagination import PaginationDriver
from slogcli.infrastructure.resilience.request_executor import RequestExecutor

PATH = "/organizations/acme/issues/"


def paged_handler(pages, seen):
    """Serves `pages` in order; every page but the last links to the next one."""
    def handler(request):
        seen.append(request)
        index = len(seen) - 1
        has_more = index < len(pages) - 1
        link = link_header(next_cursor=f"0:{index + 1}:0", next_results="true" if has_more else "false")
        return httpx.Response(200, json=pages[index], headers={"link": link})
    return handler


def list_all(handler, fake_sleep, **kwargs):
    async def go():
        executor = RequestExecutor(make_http_client(handler), auth_token="t", sleep=fake_sleep)
        try:
            return await PaginationDriver(executor).list_all(PATH, **kwargs)
        finally:
            await executor.http_client.aclose()
    return asyncio.run(go())


def test_stops_once_cap_is_reached(fake_sleep):
    seen = []
    handler = paged_handler([[{"id": "a"}, {"id": "b"}], [{"id": "c"}, {"id": "d"}], [{"id": "e"}, {"id": "f"}]], seen)

    records = list_all(handler, fake_sleep, max_results=3)

    assert [r["id"] for r in records] == ["a", "b", "c"]
    assert len(seen) == 2


def test_follows_cursor_and_keeps_params(fake_sleep):
    seen = []
    handler = paged_handler([[{"id": "a"}], [{"id": "b"}], [{"id": "c"}]], seen)

    records = list_all(handler, fake_sleep, params={"query": "is:unresolved"}, max_results=10)

    assert [r["id"] for r in records] == ["a", "b", "c"]
    assert "cursor" not in seen[0].url.params
    assert seen[1].url.params["cursor"] == "0:1:0"
    assert seen[2].url.params["cursor"] == "0:2:0"
    assert all(request.url.params["query"] == "is:unresolved" for request in seen)


def test_results_false_ends_pagination(fake_sleep):
    seen = []
    handler = paged_handler([[{"id": "a"}]], seen)
    assert list_all(handler, fake_sleep, max_results=10) == [{"id": "a"}]
    assert len(seen) == 1


def test_missing_link_header_ends_pagination(fake_sleep):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=[{"id": "a"}])

    assert list_all(handler, fake_sleep, max_results=10) == [{"id": "a"}]
    assert len(seen) == 1


def test_default_cap_is_25(fake_sleep):
    seen = []
    pages = [[{"id": f"{p}-{i}"} for i in range(10)] for p in range(5)]
    records = list_all(paged_handler(pages, seen), fake_sleep)
    assert len(records) == 25
    assert len(seen) == 3


def test_error_on_later_page_discards_partial_results(fake_sleep):
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) == 1:
            return httpx.Response(200, json=[{"id": "a"}], headers={"link": link_header("0:1:0", "true")})
        return httpx.Response(500, text="boom")

    with pytest.raises(ApiError) as exc_info:
        list_all(handler, fake_sleep, max_results=10)
    assert exc_info.value.status_code == 500


@pytest.mark.parametrize("max_results", [0, -1])
def test_rejects_cap_below_one(fake_sleep, max_results):
    seen = []
    handler = paged_handler([[{"id": "a"}]], seen)

    with pytest.raises(ValueError):
        list_all(handler, fake_sleep, max_results=max_results)
    assert seen == []


def test_logs_listing_summary_at_debug(fake_sleep, caplog):
    seen = []
    handler = paged_handler([[{"id": "a"}], [{"id": "b"}]], seen)

    with caplog.at_level(logging.DEBUG, logger="slogcli.infrastructure.api.pagination"):
        list_all(handler, fake_sleep, max_results=10)

    assert f"Listed 2 records from {PATH} in 2 page(s)" in caplog.text
