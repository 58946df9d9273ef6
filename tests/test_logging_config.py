from __future__ import annotations

import logging
import time

import pytest

import logging_config
from logging_config import ContextualFormatter, configure_logging


def _record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="datastore.sensor_registry",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_context() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    rendered = formatter.format(_record("Sensor added", sensor_id=3, location="Main St", value=45.0))

    assert rendered == "Sensor added | sensor_id=3 location='Main St' value=45.00"


def test_formatter_skips_missing_and_unknown_keys() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    rendered = formatter.format(_record("Sweep", count_marked=None, request_id="abc"))

    assert rendered == "Sweep"


def test_formatter_respects_custom_keys() -> None:
    formatter = ContextualFormatter(fmt="%(message)s", context_keys=["idle_s"])

    rendered = formatter.format(_record("Marking", sensor_id=1, idle_s=4000))

    assert rendered == "Marking | idle_s=4000"


@pytest.fixture()
def restore_logging(monkeypatch):
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_root_level = root.level
    names = ("cli", "datastore", "models", "services")
    saved_levels = {name: logging.getLogger(name).level for name in names}
    monkeypatch.setattr(logging_config, "_configured", False)
    yield
    for handler in list(root.handlers):
        if handler not in saved_handlers:
            root.removeHandler(handler)
    for handler in saved_handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(saved_root_level)
    for name, level in saved_levels.items():
        logging.getLogger(name).setLevel(level)


def test_configure_logging_scopes_level_to_project_loggers(restore_logging) -> None:
    configure_logging("DEBUG")

    assert logging.getLogger("datastore").level == logging.DEBUG
    assert logging.getLogger("services").level == logging.DEBUG
    assert logging.getLogger().level == logging.WARNING
    formatters = [
        handler.formatter
        for handler in logging.getLogger().handlers
        if isinstance(handler.formatter, ContextualFormatter)
    ]
    assert formatters
    assert formatters[0].converter is time.gmtime


def test_configure_logging_runs_once(restore_logging) -> None:
    configure_logging("DEBUG")
    configure_logging("ERROR")

    assert logging.getLogger("models").level == logging.DEBUG
