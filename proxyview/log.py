"""Logging configuration for proxyview."""

from __future__ import annotations

import datetime
import json
import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

LOG_DIR_ENV = "PROXYVIEW_LOG_DIR"
_DEFAULT_HOME_DIR = ".proxyview"
_DEFAULT_LOG_SUBDIR = "logs"
_TEXT_LOG_NAME = "proxyview.log"
_JSON_LOG_NAME = "proxyview.jsonl"
_ROTATION_BACKUPS = 5
_LOG_MAX_BYTES = 5 * 1024 * 1024

logger = logging.getLogger("proxyview")

_log_dir: Path | None = None


def _utc_now_iso() -> str:
    return datetime.datetime.now(datetime.UTC).isoformat(timespec="seconds")


def event_extra(event: str, **payload: Any) -> dict[str, Any]:
    """Build the ``extra`` mapping carrying a structured log event."""
    return {"json": {"event": event, "payload": payload}}


class ConsoleFormatter(logging.Formatter):
    """Console formatter appending the structured payload of an event."""

    def __init__(self) -> None:
        super().__init__("%(levelname)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        payload = _console_payload(record)
        if payload is None:
            return base
        try:
            payload_text = json.dumps(payload, ensure_ascii=False)
        except TypeError:
            payload_text = json.dumps(str(payload), ensure_ascii=False)
        return f"{base} {payload_text}"


def _console_payload(record: logging.LogRecord) -> Any | None:
    """Return the payload of *record* when its message is the event name."""
    extra_json = getattr(record, "json", None)
    if not isinstance(extra_json, dict):
        return None
    event_name = extra_json.get("event")
    if not (isinstance(record.msg, str) and isinstance(event_name, str)):
        return None
    if record.msg.strip() != event_name.strip():
        return None
    return extra_json.get("payload")


class JsonFormatter(logging.Formatter):
    """Render log records as single-line JSON documents."""

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        payload: Any = getattr(record, "json", None)
        if isinstance(payload, dict):
            data: dict[str, Any] = dict(payload)
        elif payload is None:
            data = {}
        else:
            data = {"data": payload}
        data.setdefault("message", record.message)
        data.setdefault("level", record.levelname)
        data.setdefault("logger", record.name)
        data.setdefault("timestamp", _utc_now_iso())
        if record.exc_info and "exc_info" not in data:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False, default=str)


class JsonlHandler(RotatingFileHandler):
    """Write records as JSON lines with size based rotation."""

    def __init__(
        self,
        filename: Path | str,
        *,
        max_bytes: int = _LOG_MAX_BYTES,
        backup_count: int = _ROTATION_BACKUPS,
        encoding: str = "utf-8",
    ) -> None:
        path = Path(filename)
        path.parent.mkdir(parents=True, exist_ok=True)
        super().__init__(
            path, maxBytes=max_bytes, backupCount=backup_count, encoding=encoding
        )
        self.setFormatter(JsonFormatter())


def _resolve_log_dir(log_dir: str | Path | None) -> Path:
    if log_dir is not None:
        path = Path(log_dir).expanduser()
    else:
        env_dir = os.environ.get(LOG_DIR_ENV)
        if env_dir:
            path = Path(env_dir).expanduser()
        else:
            path = Path.home() / _DEFAULT_HOME_DIR / _DEFAULT_LOG_SUBDIR
    path.mkdir(parents=True, exist_ok=True)
    return path


def configure_logging(
    level: int = logging.INFO, *, log_dir: str | Path | None = None
) -> None:
    """Attach console, text and JSON-lines handlers once."""
    global _log_dir

    if logger.handlers:
        if _log_dir is None:
            _log_dir = _resolve_log_dir(log_dir).resolve()
        return

    resolved = _resolve_log_dir(log_dir).resolve()
    _log_dir = resolved

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(ConsoleFormatter())
    logger.addHandler(console)

    text_handler = RotatingFileHandler(
        resolved / _TEXT_LOG_NAME,
        encoding="utf-8",
        maxBytes=_LOG_MAX_BYTES,
        backupCount=_ROTATION_BACKUPS,
    )
    text_handler.setLevel(logging.DEBUG)
    text_handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    logger.addHandler(text_handler)

    json_handler = JsonlHandler(resolved / _JSON_LOG_NAME)
    json_handler.setLevel(logging.DEBUG)
    logger.addHandler(json_handler)

    logger.setLevel(logging.DEBUG)


def get_log_file_paths() -> tuple[Path, Path]:
    """Return the text and JSON-lines log paths, configuring logging if needed."""
    if _log_dir is None:
        configure_logging()
    assert _log_dir is not None
    return _log_dir / _TEXT_LOG_NAME, _log_dir / _JSON_LOG_NAME


__all__ = [
    "ConsoleFormatter",
    "JsonFormatter",
    "JsonlHandler",
    "LOG_DIR_ENV",
    "configure_logging",
    "event_extra",
    "get_log_file_paths",
    "logger",
]
