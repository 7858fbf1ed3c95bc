"""Maintenance command-line interface over persisted view state."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from . import i18n
from .columns import normalize_columns
from .i18n import _
from .log import configure_logging
from .persistence.storage import JsonFileStore
from .persistence.sync import PersistenceSync
from .screens import parse_screen_name
from .settings import AppSettings, load_app_settings

LOCALE_DIR = Path(__file__).resolve().parent / "locale"


@dataclass
class Command:
    """Describe a CLI command and its argument handler."""

    func: Callable[[argparse.Namespace], None]
    help: str
    add_arguments: Callable[[argparse.ArgumentParser], None]


def _open_sync(settings: AppSettings) -> PersistenceSync:
    store = JsonFileStore(settings.storage.state_path)
    return PersistenceSync(store, rows_per_page_options=settings.lists.rows_per_page_options)


def cmd_show_state(args: argparse.Namespace) -> None:
    """Print the stored position and filters of a screen as JSON."""

    settings: AppSettings = args.app_settings
    screen = parse_screen_name(args.screen, settings.lists)
    sync = _open_sync(settings)
    snapshot = sync.load_snapshot(screen.namespace)
    filters = sync.load_filters(screen.namespace)
    document = {
        "screen": screen.name,
        "namespace": screen.namespace,
        "page_size": snapshot.page_size if snapshot else None,
        "page": snapshot.page if snapshot else None,
        "scroll_offset": snapshot.scroll_offset if snapshot else None,
        "filters": filters.to_dict() if filters else None,
    }
    sys.stdout.write(json.dumps(document, indent=2, ensure_ascii=False) + "\n")


def cmd_clear_state(args: argparse.Namespace) -> None:
    """Forget everything stored for a screen."""

    settings: AppSettings = args.app_settings
    screen = parse_screen_name(args.screen, settings.lists)
    _open_sync(settings).clear_all(screen.namespace)
    sys.stdout.write(f"{screen.name}\n")


def cmd_normalize_columns(args: argparse.Namespace) -> None:
    sys.stdout.write(" ".join(normalize_columns(args.columns)) + "\n")


def add_screen_argument(p: argparse.ArgumentParser) -> None:
    p.add_argument("screen", help=_("'global' or 'source:<id>'"))


def add_columns_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument("columns", nargs="*", help=_("column identifiers"))


COMMANDS: dict[str, Command] = {
    "show-state": Command(cmd_show_state, _("print stored list state"), add_screen_argument),
    "clear-state": Command(cmd_clear_state, _("remove stored list state"), add_screen_argument),
    "normalize-columns": Command(
        cmd_normalize_columns, _("normalize a column list"), add_columns_arguments
    ),
}


def build_parser() -> argparse.ArgumentParser:
    """Construct argument parser for CLI commands."""
    parser = argparse.ArgumentParser(prog="proxyview", description=_("proxyview state tools"))
    parser.add_argument("--settings", help=_("path to JSON/TOML settings"))
    parser.add_argument("--lang", help=_("interface language"))
    sub = parser.add_subparsers(dest="command", required=True)
    for name, cmd in COMMANDS.items():
        p = sub.add_parser(name, help=cmd.help)
        cmd.add_arguments(p)
        p.set_defaults(func=cmd.func)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = AppSettings()
    if args.settings:
        settings = load_app_settings(args.settings)
    configure_logging(settings.log.level, log_dir=settings.log.log_dir)
    if args.lang:
        i18n.install(LOCALE_DIR, [args.lang])
    args.app_settings = settings
    try:
        args.func(args)
    except ValueError as exc:
        parser.error(str(exc))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
