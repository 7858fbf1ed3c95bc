import datetime

import pytest

from proxyview.core.sorting import (
    SortSpec,
    apply_sort,
    get_sortable_value,
    normalize_sortable_value,
    primary_reputation,
)

pytestmark = pytest.mark.unit


def _ids(rows):
    return [row["id"] for row in rows]


def test_response_time_ascending_scenario():
    rows = [
        {"id": 1, "response_time": 300},
        {"id": 2, "response_time": 100},
        {"id": 3, "response_time": None},
    ]
    assert _ids(apply_sort(rows, "response_time", 1)) == [2, 1, 3]


@pytest.mark.parametrize("direction", [1, -1])
def test_missing_values_sort_last_in_both_directions(direction):
    rows = [
        {"id": 1, "response_time": None},
        {"id": 2, "response_time": 50},
        {"id": 3},
        {"id": 4, "response_time": 20},
        {"id": 5, "response_time": float("nan")},
    ]
    ordered = _ids(apply_sort(rows, "response_time", direction))
    assert set(ordered[-3:]) == {1, 3, 5}
    assert ordered[:2] == ([4, 2] if direction == 1 else [2, 4])


@pytest.mark.parametrize("direction", [1, -1])
def test_sort_is_stable_for_ties(direction):
    rows = [
        {"id": 1, "country": "US"},
        {"id": 2, "country": "de"},
        {"id": 3, "country": "us"},
        {"id": 4, "country": "DE"},
        {"id": 5, "country": None},
        {"id": 6, "country": None},
    ]
    ordered = _ids(apply_sort(rows, "country", direction))
    if direction == 1:
        assert ordered == [2, 4, 1, 3, 5, 6]
    else:
        assert ordered == [1, 3, 2, 4, 5, 6]


def test_apply_sort_leaves_input_untouched_without_direction():
    rows = [{"id": 2, "port": 2}, {"id": 1, "port": 1}]
    assert _ids(apply_sort(rows, "port", None)) == [2, 1]
    assert _ids(apply_sort(rows, None, 1)) == [2, 1]
    assert _ids(apply_sort(rows, "port", 1)) == [1, 2]
    assert _ids(rows) == [2, 1]


def test_normalizer():
    assert normalize_sortable_value(None) is None
    assert normalize_sortable_value(True) == 1
    assert normalize_sortable_value(False) == 0
    assert normalize_sortable_value(42) == 42
    assert normalize_sortable_value(float("nan")) is None
    assert normalize_sortable_value("Elite") == "elite"
    assert normalize_sortable_value(["list"]) is None
    assert normalize_sortable_value({"score": 1}) is None


def test_timestamps_become_epoch_milliseconds():
    moment = datetime.datetime(2024, 1, 2, 3, 4, 5, tzinfo=datetime.UTC)
    expected = moment.timestamp() * 1000
    assert normalize_sortable_value(moment) == expected
    assert normalize_sortable_value("2024-01-02T03:04:05Z") == expected
    assert normalize_sortable_value("2024-01-02T03:04:05") == expected
    assert normalize_sortable_value("2024-01-02T05:04:05+02:00") == expected


def test_latest_check_orders_chronologically():
    rows = [
        {"id": 1, "latest_check": "2024-03-01T10:00:00Z"},
        {"id": 2, "latest_check": "2023-12-31T23:59:59Z"},
        {"id": 3, "latest_check": "2024-03-01T09:00:00+00:00"},
    ]
    assert _ids(apply_sort(rows, "latest_check", 1)) == [2, 3, 1]


def test_numbers_rank_before_text():
    rows = [{"id": 1, "value": "abc"}, {"id": 2, "value": 5}]
    assert _ids(apply_sort(rows, "value", 1)) == [2, 1]
    assert _ids(apply_sort(rows, "value", -1)) == [1, 2]


def test_ip_port_pads_the_port():
    assert get_sortable_value({"ip": "1.2.3.4", "port": 80}, "ip_port") == "1.2.3.4:00080"
    assert get_sortable_value({"ip": None, "port": "x"}, "ip_port") == ":00000"
    rows = [
        {"id": 1, "ip": "1.1.1.1", "port": 8080},
        {"id": 2, "ip": "1.1.1.1", "port": 443},
    ]
    assert _ids(apply_sort(rows, "ip_port", 1)) == [2, 1]


def test_reputation_prefers_overall_score():
    row = {"reputation": {"overall": {"score": 82}, "protocols": {"http": {"score": 10}}}}
    assert get_sortable_value(row, "reputation") == 82
    fallback = {"reputation": {"overall": None, "protocols": {"http": None, "https": {"score": 40}}}}
    assert primary_reputation(fallback) == {"score": 40}
    assert get_sortable_value(fallback, "reputation") == 40
    assert get_sortable_value({"reputation": None}, "reputation") is None


def test_health_fields_resolve_from_the_health_mapping():
    row = {"health": {"overall": 0.8, "socks5": 0.1}}
    assert get_sortable_value(row, "health_overall") == 0.8
    assert get_sortable_value(row, "health_http") is None
    assert get_sortable_value({"health_http": 0.3}, "health_http") == 0.3


def test_unknown_field_is_missing():
    assert get_sortable_value({"id": 1}, "nope") is None
    assert get_sortable_value({"id": 1}, "") is None


def test_sort_spec_cycles_through_three_states():
    spec = SortSpec()
    assert not spec.active
    spec = spec.toggle("port")
    assert spec == SortSpec("port", 1)
    spec = spec.toggle("port")
    assert spec == SortSpec("port", -1)
    spec = spec.toggle("port")
    assert spec == SortSpec()
    assert SortSpec("port", -1).toggle("ip") == SortSpec("ip", 1)


def test_sort_spec_apply():
    rows = [{"id": 1, "alive": True}, {"id": 2, "alive": False}]
    assert _ids(SortSpec("alive", 1).apply(rows)) == [2, 1]


def test_integers_beyond_float_range_rank_at_the_ends():
    rows = [
        {"id": 1, "response_time": 10**400},
        {"id": 2, "response_time": 5},
        {"id": 3, "response_time": -(10**400)},
    ]
    assert _ids(apply_sort(rows, "response_time", 1)) == [3, 2, 1]
    assert _ids(apply_sort(rows, "response_time", -1)) == [1, 2, 3]
