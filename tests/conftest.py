"""Pytest configuration for the proxyview test suite."""

from __future__ import annotations

import logging

import pytest

from proxyview import i18n
from proxyview import log as log_module
from proxyview.log import LOG_DIR_ENV


@pytest.fixture(autouse=True)
def _isolated_environment(tmp_path, monkeypatch):
    """Keep log files, log handlers and translations local to each test."""

    monkeypatch.setenv(LOG_DIR_ENV, str(tmp_path / "logs"))
    logger = logging.getLogger("proxyview")
    saved_handlers = list(logger.handlers)
    saved_level = logger.level
    saved_dir = log_module._log_dir
    yield
    for handler in list(logger.handlers):
        if handler not in saved_handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(saved_level)
    log_module._log_dir = saved_dir
    i18n.reset()
