"""
Модуль настройки логирования.

Содержит функцию setup_logging для централизованной настройки логирования:
- Очищает старые обработчики root-логгера
- Добавляет консольный обработчик с форматтером (pretty/simple/json)
- Добавляет файловый обработчик с JSON-форматтером, если задан LOG_FILE
- Создаёт директорию для логов при необходимости
- Подавляет лишние логи от сторонних библиотек (SQLAlchemy, aiosqlite)
- Устанавливает уровень логирования согласно настройкам

Usage:
    from fixture_graph.core.logging import setup_logging
    setup_logging()
"""

import logging
import os
from pathlib import Path

from fixture_graph.core.settings import settings

from .formatters import CustomJsonFormatter, PrettyFormatter, SimpleFormatter

NOISY_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "aiosqlite",
    "asyncio",
)


def get_console_formatter() -> logging.Formatter:
    """Возвращает форматтер консоли согласно settings.logging.LOG_FORMAT."""
    if settings.logging.is_json_format:
        return CustomJsonFormatter()
    if settings.logging.LOG_FORMAT.lower() == "simple":
        return SimpleFormatter()
    return PrettyFormatter()


def setup_logging() -> None:
    """
    Настраивает систему логирования.

    - Очищает все старые обработчики root-логгера
    - Добавляет консольный обработчик с выбранным форматтером
    - Добавляет файловый обработчик с JSON-форматтером (если задан LOG_FILE)
    - Устанавливает уровень логирования согласно настройкам
    - Подавляет лишние DEBUG-логи от сторонних библиотек

    Ошибки создания файла логов не прерывают работу: остаётся консоль.
    """
    root = logging.getLogger()

    # Очищаем старые обработчики
    for handler in list(root.handlers):
        root.removeHandler(handler)

    if settings.logging.CONSOLE_ENABLED:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(get_console_formatter())
        root.addHandler(console_handler)

    log_file = settings.logging.LOG_FILE
    if log_file:
        try:
            log_path = Path(log_file)
            if not log_path.parent.exists():
                os.makedirs(str(log_path.parent), exist_ok=True)

            file_handler = logging.FileHandler(
                filename=log_path,
                mode=settings.logging.FILE_MODE,
                encoding=settings.logging.ENCODING,
            )
            file_handler.setFormatter(CustomJsonFormatter())
            root.addHandler(file_handler)
        except (PermissionError, OSError) as e:
            logging.getLogger(__name__).warning(
                "Не удалось использовать файл логов %s: %s", log_file, e
            )

    root.setLevel(settings.logging.LOG_LEVEL)

    # Подавляем логи от некоторых библиотек (оставляем только WARNING и выше)
    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
