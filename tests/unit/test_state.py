import logging

import pytest

from proxyview.state import ObservableValue

pytestmark = pytest.mark.unit


def test_listeners_run_synchronously_on_change_only():
    cell = ObservableValue(1, name="counter")
    seen = []
    cell.add_listener(seen.append)
    assert cell.set(2) is True
    assert seen == [2]
    assert cell.set(2) is False
    assert seen == [2]
    assert cell.get() == 2


def test_remover_detaches_listener():
    cell = ObservableValue("a")
    seen = []
    remove = cell.add_listener(seen.append)
    cell.set("b")
    remove()
    remove()
    cell.set("c")
    assert seen == ["b"]


def test_failing_listener_does_not_block_others(caplog):
    cell = ObservableValue(0, name="value")

    def broken(_value):
        raise RuntimeError("boom")

    seen = []
    cell.add_listener(broken)
    cell.add_listener(seen.append)
    with caplog.at_level(logging.ERROR, logger="proxyview.state"):
        cell.set(5)
    assert seen == [5]
    assert "Listener for value raised" in caplog.text


def test_clear_listeners():
    cell = ObservableValue(0)
    seen = []
    cell.add_listener(seen.append)
    cell.clear_listeners()
    cell.set(1)
    assert seen == []
    assert "ObservableValue" in repr(cell)
