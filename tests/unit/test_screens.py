import pytest

from proxyview.errors import InvalidRouteIdentifierError
from proxyview.screens import (
    RouteRedirect,
    global_list,
    open_source_screen,
    parse_route_identifier,
    parse_screen_name,
    source_list,
)
from proxyview.settings import ListSettings
from tests.helpers import RecordingNotifier

pytestmark = pytest.mark.unit


def test_screens_have_independent_namespaces_and_preferences():
    global_screen = global_list()
    source_screen = source_list(7)
    assert global_screen.namespace == "magpie-proxy-list"
    assert global_screen.preference_key == "proxy_list_columns"
    assert global_screen.default_page_size == 40
    assert source_screen.namespace != global_screen.namespace
    assert source_screen.preference_key == "scrape_source_proxy_columns"
    assert source_screen.default_page_size == 20
    assert source_list(8).namespace != source_screen.namespace


def test_page_sizes_follow_settings():
    settings = ListSettings(global_page_size=60, source_page_size=100)
    assert global_list(settings).default_page_size == 60
    assert source_list(1, settings).default_page_size == 100


def test_detail_routes():
    assert global_list().detail_route(12) == {"path": "/proxies/12"}
    assert source_list(3).detail_route(12) == {"path": "/proxies/12", "query": {"sourceId": 3}}


@pytest.mark.parametrize(("raw", "expected"), [("5", 5), (" 12 ", 12), (9, 9)])
def test_valid_route_identifiers(raw, expected):
    assert parse_route_identifier(raw) == expected


@pytest.mark.parametrize("raw", ["0", "-3", "abc", "1.5", "", None, 0, -1, True, "٣"])
def test_invalid_route_identifiers(raw):
    with pytest.raises(InvalidRouteIdentifierError) as excinfo:
        parse_route_identifier(raw)
    assert excinfo.value.raw == raw


def test_open_source_screen_redirects_invalid_ids():
    notifier = RecordingNotifier()
    assert open_source_screen("nope", notifier) == RouteRedirect("/scraper")
    assert notifier.errors == ["Invalid scrape source identifier"]

    screen = open_source_screen("4", notifier)
    assert screen == source_list(4)
    assert len(notifier.errors) == 1


def test_parse_screen_name():
    assert parse_screen_name("global") == global_list()
    assert parse_screen_name("source:9") == source_list(9)
    with pytest.raises(ValueError):
        parse_screen_name("other")
    with pytest.raises(ValueError):
        parse_screen_name("source:x")
