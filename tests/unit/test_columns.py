import pytest

from proxyview.columns import (
    AVAILABLE_COLUMNS,
    DEFAULT_COLUMNS,
    LEGACY_COLUMN_ALIASES,
    default_columns,
    get_column_definition,
    hidden_columns,
    is_known_column,
    normalize_columns,
)

pytestmark = pytest.mark.unit


def test_unknown_ids_and_repeats_are_dropped():
    assert normalize_columns(["alive", "bogus_id", "ip_port", "alive"]) == ["alive", "ip_port"]


@pytest.mark.parametrize(
    "candidate",
    [None, "alive", 42, {"alive": True}, [], ["bogus"], [None, 3, "nope"]],
)
def test_invalid_candidates_fall_back_to_defaults(candidate):
    assert normalize_columns(candidate) == list(DEFAULT_COLUMNS)


def test_legacy_ids_are_mapped_before_lookup():
    result = normalize_columns(["alive_ratio_http", "health_http", "ip"])
    assert result == ["health_http", "ip"]


@pytest.mark.parametrize(
    "candidate",
    [
        [],
        ["bogus", "other"],
        ["alive_ratio_overall", "ip", "health_overall", "port"],
        ("country", "country", "alive_ratio_socks5"),
        None,
    ],
)
def test_normalize_is_idempotent(candidate):
    once = normalize_columns(candidate)
    assert normalize_columns(once) == once


def test_default_columns_returns_a_fresh_list():
    columns = default_columns()
    columns.append("ip")
    assert default_columns() == list(DEFAULT_COLUMNS)


def test_registry_lookups():
    assert is_known_column("reputation")
    assert not is_known_column("alive_ratio_http")
    assert not is_known_column(None)
    assert get_column_definition("response_time").tooltip == "Response Time"
    assert get_column_definition("missing").id == "ip"
    assert get_column_definition("actions").sort_field is None


def test_aliases_target_known_columns():
    assert all(target in AVAILABLE_COLUMNS for target in LEGACY_COLUMN_ALIASES.values())


def test_hidden_columns_follow_catalogue_order():
    hidden = [column.id for column in hidden_columns(DEFAULT_COLUMNS)]
    assert hidden == ["ip", "port"]
