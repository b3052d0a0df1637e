import json
import logging

import pytest

from fixture_graph.core import logging as logging_module
from fixture_graph.core.logging import (NOISY_LOGGERS, get_console_formatter,
                                        setup_logging)
from fixture_graph.core.logging.formatters import (CustomJsonFormatter,
                                                   PrettyFormatter,
                                                   SimpleFormatter)
from fixture_graph.core.settings import LoggingSettings


@pytest.fixture
def logging_settings(monkeypatch):
    """Подменяет settings.logging в модуле логирования."""

    def apply(**values):
        current = LoggingSettings(**values)
        monkeypatch.setattr(logging_module.settings, "logging", current)
        return current

    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield apply
    root.handlers = handlers
    root.setLevel(level)


@pytest.mark.parametrize(
    "log_format, formatter_class",
    [
        ("pretty", PrettyFormatter),
        ("simple", SimpleFormatter),
        ("json", CustomJsonFormatter),
    ],
)
def test_console_formatter(logging_settings, log_format, formatter_class):
    logging_settings(LOG_FORMAT=log_format)

    assert isinstance(get_console_formatter(), formatter_class)


def test_setup_logging_console(logging_settings):
    logging_settings(LOG_LEVEL="DEBUG", LOG_FORMAT="simple")

    setup_logging()

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    for name in NOISY_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING


def test_setup_logging_file(logging_settings, tmp_path):
    log_file = tmp_path / "logs" / "fixtures.log"
    logging_settings(LOG_FILE=str(log_file), CONSOLE_ENABLED=False)

    setup_logging()
    logging.getLogger("FixtureInstaller").info(
        "Создана запись %s", "UserModel", extra={"model": "UserModel", "id": 1}
    )
    for handler in logging.getLogger().handlers:
        handler.flush()
        handler.close()

    record = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
    assert record["message"] == "Создана запись UserModel"
    assert record["model"] == "UserModel"
    assert record["id"] == 1
    assert record["level"] == "INFO"
    assert record["logger"] == "FixtureInstaller"
    assert record["service"] == "fixture-graph"
