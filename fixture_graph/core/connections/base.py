"""
Базовые интерфейсы подключений.

- BaseClient: установка и закрытие подключения к внешнему ресурсу.
- BaseContextManager: управление жизненным циклом подключения через async with.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any


class BaseClient(ABC):
    """
    Базовый клиент подключения.

    Attributes:
        logger (logging.Logger): Логгер с именем класса-наследника.
    """

    def __init__(self) -> None:
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    async def connect(self) -> Any:
        """Устанавливает подключение и возвращает рабочий объект."""

    @abstractmethod
    async def close(self) -> None:
        """Закрывает подключение."""


class BaseContextManager(ABC):
    """
    Базовый асинхронный контекстный менеджер подключения.
    """

    def __init__(self) -> None:
        self.logger = logging.getLogger(self.__class__.__name__)

    async def __aenter__(self) -> Any:
        return await self.connect()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @abstractmethod
    async def connect(self) -> Any:
        """Открывает ресурс."""

    @abstractmethod
    async def close(self) -> None:
        """Освобождает ресурс."""
