import logging

from sqlalchemy.ext.asyncio import AsyncSession

from fixture_graph.core.settings import settings
from fixture_graph.repository.base import SessionMixin


class BaseService(SessionMixin):
    """
    Базовый класс для сервисов пакета.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.logger = logging.getLogger(self.__class__.__name__)
        self.settings = settings
