import json

import pytest

from proxyview import cli
from proxyview.core.filters import AppliedFilters
from proxyview.core.model import ViewSnapshot
from proxyview.persistence.storage import JsonFileStore
from proxyview.persistence.sync import PersistenceSync

pytestmark = pytest.mark.unit


@pytest.fixture
def settings_file(tmp_path):
    state_path = tmp_path / "state.json"
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps({"storage": {"state_path": str(state_path)}, "log": {"log_dir": str(tmp_path / "logs")}}),
        encoding="utf-8",
    )
    return path, state_path


def _seed(state_path, namespace):
    sync = PersistenceSync(JsonFileStore(state_path))
    sync.save_snapshot(namespace, ViewSnapshot(page_size=60, page=2, scroll_offset=15))
    sync.save_filters(namespace, AppliedFilters(status="alive", protocols=("https",)))


def test_show_state(settings_file, capsys):
    settings_path, state_path = settings_file
    _seed(state_path, "magpie-proxy-list")
    assert cli.main(["--settings", str(settings_path), "show-state", "global"]) == 0
    document = json.loads(capsys.readouterr().out)
    assert document["page_size"] == 60
    assert document["page"] == 2
    assert document["scroll_offset"] == 15
    assert document["filters"]["protocols"] == ["https"]


def test_show_state_of_empty_screen(settings_file, capsys):
    settings_path, _state_path = settings_file
    cli.main(["--settings", str(settings_path), "show-state", "source:3"])
    document = json.loads(capsys.readouterr().out)
    assert document["screen"] == "source:3"
    assert document["page"] is None
    assert document["filters"] is None


def test_clear_state(settings_file, capsys):
    settings_path, state_path = settings_file
    _seed(state_path, "magpie-proxy-list")
    cli.main(["--settings", str(settings_path), "clear-state", "global"])
    assert capsys.readouterr().out.strip() == "global"
    assert list(JsonFileStore(state_path).keys()) == []


def test_normalize_columns(settings_file, capsys):
    settings_path, _state_path = settings_file
    cli.main(["--settings", str(settings_path), "normalize-columns", "alive", "bogus_id", "ip_port", "alive"])
    assert capsys.readouterr().out.strip() == "alive ip_port"


def test_invalid_screen_is_a_usage_error(settings_file):
    settings_path, _state_path = settings_file
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--settings", str(settings_path), "show-state", "source:0"])
    assert excinfo.value.code == 2


def test_show_state_with_undecodable_state_file(settings_file, capsys):
    settings_path, state_path = settings_file
    state_path.write_bytes(b'{"magpie-proxy-list-page": "\xff\xfe"}')
    assert cli.main(["--settings", str(settings_path), "show-state", "global"]) == 0
    document = json.loads(capsys.readouterr().out)
    assert document["page"] is None
    assert document["filters"] is None
