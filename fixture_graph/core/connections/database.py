"""
Модуль для работы с базой данных.

Предоставляет классы для получения сессии, в которую устанавливаются фикстуры:
- DatabaseClient: создаёт AsyncEngine и фабрику сессий из настроек
- DatabaseContextManager: открывает сессию, фиксирует или откатывает
  транзакцию и закрывает сессию

Схема БД не создаётся и не мигрируется здесь: это ответственность
тестового набора (например, metadata.create_all в conftest).

Example:
    >>> async with DatabaseContextManager() as session:
    ...     await install(session, collect(bundle))
"""

from typing import Optional

from sqlalchemy.ext.asyncio import (AsyncEngine, AsyncSession,
                                    async_sessionmaker, create_async_engine)

from fixture_graph.core.settings import Settings as AppConfig
from fixture_graph.core.settings import settings

from .base import BaseClient, BaseContextManager


class DatabaseClient(BaseClient):
    """
    Клиент базы данных.

    Attributes:
        settings (AppConfig): Конфигурация с параметрами подключения.
        engine (AsyncEngine | None): Движок SQLAlchemy.
        session_factory (async_sessionmaker | None): Фабрика сессий.
    """

    def __init__(
        self,
        settings: AppConfig = settings,
        engine: Optional[AsyncEngine] = None,
    ) -> None:
        """
        Инициализация клиента.

        Args:
            settings (AppConfig): Конфигурация. По умолчанию глобальные настройки.
            engine (AsyncEngine, optional): Готовый движок (например, общий
                для тестового набора). Если не передан, создаётся из DATABASE_URL.
        """
        super().__init__()
        self.settings = settings
        self.engine = engine
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    async def connect(self) -> async_sessionmaker[AsyncSession]:
        """
        Создаёт движок (если не передан) и фабрику сессий.

        Returns:
            async_sessionmaker: Фабрика асинхронных сессий.
        """
        if self.engine is None:
            self.logger.debug(
                "Подключение к базе данных: %s",
                self.settings.database.DATABASE_URL,
            )
            self.engine = create_async_engine(
                self.settings.database.DATABASE_URL,
                **self.settings.database.engine_params,
            )
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            **self.settings.database.session_params,
        )
        return self.session_factory

    async def close(self) -> None:
        """Закрывает пул соединений движка."""
        if self.engine is not None:
            await self.engine.dispose()
            self.logger.debug("Подключение к базе данных закрыто")
        self.engine = None
        self.session_factory = None


class DatabaseContextManager(BaseContextManager):
    """
    Контекстный менеджер сессии базы данных.

    Attributes:
        db_client (DatabaseClient): Клиент, предоставляющий фабрику сессий.
        session (AsyncSession | None): Текущая сессия.
    """

    def __init__(self, db_client: Optional[DatabaseClient] = None) -> None:
        super().__init__()
        self.db_client = db_client or DatabaseClient()
        self.session: Optional[AsyncSession] = None

    async def connect(self) -> AsyncSession:
        """
        Открывает новую сессию.

        Returns:
            AsyncSession: Асинхронная сессия SQLAlchemy.
        """
        session_factory = self.db_client.session_factory
        if session_factory is None:
            session_factory = await self.db_client.connect()
        self.session = session_factory()
        return self.session

    async def commit(self) -> None:
        """Фиксирует текущую транзакцию."""
        if self.session is not None:
            await self.session.commit()

    async def rollback(self) -> None:
        """Откатывает текущую транзакцию."""
        if self.session is not None:
            await self.session.rollback()

    async def close(self) -> None:
        """Закрывает сессию (клиент и движок остаются открытыми)."""
        if self.session is not None:
            await self.session.close()
            self.session = None

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None:
            self.logger.error("Ошибка в сессии базы данных: %s", exc_val)
            await self.rollback()
        await self.close()
