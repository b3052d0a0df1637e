"""
Форматтеры логов.

- PrettyFormatter: цветной человекочитаемый вывод для консоли.
- SimpleFormatter: краткий вывод без цвета (CI, файлы).
- CustomJsonFormatter: JSON-строка на запись (python-json-logger).
"""

import logging
from typing import Any, Dict

from pythonjsonlogger.json import JsonFormatter

from fixture_graph.core.settings import settings


class PrettyFormatter(logging.Formatter):
    """Цветной формат из settings.logging.PRETTY_FORMAT."""

    def __init__(self) -> None:
        super().__init__(fmt=settings.logging.PRETTY_FORMAT)


class SimpleFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__(fmt=settings.logging.SIMPLE_FORMAT)


class CustomJsonFormatter(JsonFormatter):
    """
    JSON-форматтер с единым набором служебных полей.

    Поля из extra={...} (model, id, skipped и т.д.) попадают в запись
    как есть, поэтому контекст установки фикстур можно фильтровать
    в агрегаторе логов.
    """

    def __init__(self) -> None:
        super().__init__(fmt=settings.logging.JSON_FORMAT)

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record.setdefault("service", settings.TITLE)
