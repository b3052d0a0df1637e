"""
Модуль base.py: настройки пакета fixture_graph.

Содержит основной класс Settings, который агрегирует все параметры конфигурации:
- Логирование (logging)
- Подключение к базе данных (database)
- Поведение установщика фикстур (install)

Все параметры читаются из переменных окружения с префиксом FIXTURES_
и (опционально) из env-файла.

Экспортируемые объекты:
- Settings: Главный класс настроек (через pydantic-settings).
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

ENV_PREFIX = "FIXTURES_"


def get_env_file() -> Path:
    """
    Определяет путь к файлу с переменными окружения.

    Если задана переменная FIXTURES_ENV_FILE, используется указанный путь,
    иначе .env в текущей директории.

    Returns:
        Path: Путь к env-файлу (файл может не существовать).
    """
    env_file_path = os.getenv(f"{ENV_PREFIX}ENV_FILE")
    env_path = Path(env_file_path) if env_file_path else Path(".env")
    logger.debug("Конфигурация фикстур: %s", env_path)
    return env_path


env_file_path = get_env_file()


class LoggingSettings(BaseSettings):
    """
    Конфигурация логирования.

    Атрибуты:
        LOG_LEVEL (str): Уровень логирования (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        LOG_FORMAT (str): Формат логирования (pretty, json, simple).
        LOG_FILE (Optional[str]): Путь к файлу логов. None - только консоль.
        ENCODING (str): Кодировка файла логов.
        FILE_MODE (str): Режим открытия файла логов.
        CONSOLE_ENABLED (bool): Включено ли логирование в консоль.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=env_file_path,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "pretty"  # pretty, json, simple
    LOG_FILE: Optional[str] = None
    ENCODING: str = "utf-8"
    FILE_MODE: str = "a"

    CONSOLE_ENABLED: bool = True

    FILE_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    PRETTY_FORMAT: str = (
        "\033[1;36m%(asctime)s\033[0m - \033[1;32m%(name)s\033[0m - "
        "\033[1;33m%(levelname)s\033[0m - %(message)s"
    )

    JSON_FORMAT: str = (
        "%(asctime)s %(name)s %(levelname)s %(module)s %(funcName)s %(message)s"
    )

    SIMPLE_FORMAT: str = "%(levelname)s - %(name)s - %(message)s"

    @property
    def current_format(self) -> str:
        """Возвращает текущий формат логирования"""
        format_map = {
            "pretty": self.PRETTY_FORMAT,
            "simple": self.SIMPLE_FORMAT,
            "json": self.JSON_FORMAT,
        }
        return format_map.get(self.LOG_FORMAT.lower(), self.FILE_FORMAT)

    @property
    def is_json_format(self) -> bool:
        """Проверяет, используется ли JSON формат"""
        return self.LOG_FORMAT.lower() == "json"


class DatabaseSettings(BaseSettings):
    """
    Параметры подключения к базе данных для тестовых наборов.

    Атрибуты:
        DATABASE_URL (str): Строка подключения SQLAlchemy (async драйвер).
        ECHO (bool): Логирование SQL-запросов.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=env_file_path,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    DATABASE_URL: str = "sqlite+aiosqlite:///:memory:"
    ECHO: bool = False

    @property
    def engine_params(self) -> Dict[str, Any]:
        """
        Параметры для создания SQLAlchemy engine.

        Returns:
            dict: Параметры подключения.
        """
        return {
            "echo": self.ECHO,
        }

    @property
    def session_params(self) -> Dict[str, Any]:
        """
        Параметры для создания SQLAlchemy session.

        Returns:
            dict: Параметры сессии.
        """
        return {
            "autoflush": False,  # Установщик сам вызывает flush перед запросами резолверов
            "expire_on_commit": False,  # Записи в кэше остаются читаемыми после коммита
            "class_": AsyncSession,
        }


class InstallSettings(BaseSettings):
    """
    Настройки установщика фикстур.

    Атрибуты:
        AUTOCOMMIT (bool): Коммитить транзакцию после каждой записанной фикстуры.
            При False выполняется только flush, транзакцией управляет вызывающий код.
        LOG_SKIPPED (bool): Логировать пропущенные (уже установленные) фикстуры.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=env_file_path,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    AUTOCOMMIT: bool = True
    LOG_SKIPPED: bool = True


class Settings(BaseSettings):
    """
    Главный класс настроек пакета.

    Атрибуты:
        logging (LoggingSettings): Настройки логирования.
        database (DatabaseSettings): Настройки подключения к БД.
        install (InstallSettings): Настройки установщика фикстур.

        TITLE (str): Название пакета (используется в логах).
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=env_file_path,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    logging: LoggingSettings = LoggingSettings()
    database: DatabaseSettings = DatabaseSettings()
    install: InstallSettings = InstallSettings()

    TITLE: str = "fixture-graph"
