"""
Базовый репозиторий для установки фикстур.

Репозиторий - доступ к хранилищу для одного типа сущности: поиск записи
по запросу резолвера, вставка, обновление с мержем, подсчёт и выборка
для проверок в тестах.
"""

# pylint: disable=not-callable  # func.count() is callable in SQLAlchemy
import logging
from typing import (Any, Dict, Generic, Iterable, List, Mapping, Optional,
                    Type, TypeVar)

from sqlalchemy import and_, func, inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from fixture_graph.core.settings import settings
from fixture_graph.fixtures.metadata import EntityShape, get_entity_shape

# Generic types
M = TypeVar("M")


class SessionMixin:
    """
    Миксин для предоставления экземпляра сессии базы данных.
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Инициализирует миксин с сессией базы данных.

        Args:
            session (AsyncSession): Асинхронная сессия базы данных.
        """
        self.session = session


class BaseRepository(SessionMixin, Generic[M]):
    """
    Базовый класс для репозиториев с поддержкой обобщенных типов.

    Attributes:
        session (AsyncSession): Асинхронная сессия базы данных.
        model (Type[M]): Тип SQLAlchemy модели.
        autocommit (bool): Коммитить после каждой записи (иначе только flush).
    """

    def __init__(
        self,
        session: AsyncSession,
        model: Type[M],
        autocommit: Optional[bool] = None,
    ):
        """
        Инициализирует BaseRepository.

        Args:
            session (AsyncSession): Асинхронная сессия базы данных.
            model (Type[M]): Тип SQLAlchemy модели.
            autocommit (Optional[bool]): Переопределение settings.install.AUTOCOMMIT.
        """
        super().__init__(session)
        self.model = model
        self.autocommit = (
            settings.install.AUTOCOMMIT if autocommit is None else autocommit
        )
        self.logger = logging.getLogger(self.__class__.__name__)

    async def _store(self, instance: M) -> None:
        """
        Записывает изменения и перечитывает колонки записи.

        refresh нужен, чтобы первичный ключ и серверные значения были
        загружены без ленивых запросов (в async сессии они запрещены).
        """
        if self.autocommit:
            await self.session.commit()
        else:
            await self.session.flush()
        await self.session.refresh(instance)

    async def _on_error(self, action: str, error: SQLAlchemyError) -> None:
        if self.autocommit:
            await self.session.rollback()
        self.logger.error(
            "Ошибка при %s %s: %s",
            action,
            self.model.__name__,
            error,
            extra={"model": self.model.__name__},
        )

    async def get_item_by_identity(self, identity: Any) -> Optional[M]:
        """
        Получает запись по первичному ключу.

        Args:
            identity (Any): Значение ключа (кортеж для составного ключа).

        Returns:
            Optional[M]: SQLAlchemy модель или None, если не найдена.
        """
        try:
            return await self.session.get(self.model, identity)
        except SQLAlchemyError as e:
            self.logger.error(
                "Ошибка при получении %s по ключу %s: %s",
                self.model.__name__,
                identity,
                e,
            )
            raise

    async def get_items(
        self, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> List[M]:
        """
        Получает список всех записей.

        Args:
            limit (Optional[int]): Лимит записей.
            offset (Optional[int]): Смещение.

        Returns:
            List[M]: Список SQLAlchemy моделей.
        """
        statement = select(self.model)

        if offset is not None:
            statement = statement.offset(offset)
        if limit is not None:
            statement = statement.limit(limit)

        return await self.execute_and_return_scalars(statement)

    async def count_items(self, **filters) -> int:
        """
        Подсчитывает количество записей с фильтрами.

        Args:
            **filters: Фильтры для подсчета (поддерживает операторы как в filter_by).

        Returns:
            int: Количество записей.

        Example:
            >>> count = await repo.count_items(first_name="Foo")
        """
        statement = select(func.count()).select_from(self.model)

        conditions = self._build_filter_conditions(**filters)
        if conditions:
            statement = statement.where(and_(*conditions))

        result = await self.session.execute(statement)
        return result.scalar() or 0

    def _apply_filter_condition(self, field, operator: str, value):
        """
        Применяет условие фильтрации к полю.

        Args:
            field: SQLAlchemy поле модели
            operator: Оператор фильтрации (eq, ne, gt, lt, gte, lte, in, not_in, like, ilike, is_null)
            value: Значение для фильтрации

        Returns:
            SQLAlchemy условие

        Raises:
            ValueError: Если оператор неизвестен.
        """
        if operator == "eq":
            return field == value
        elif operator == "ne":
            return field != value
        elif operator == "gt":
            return field > value
        elif operator == "lt":
            return field < value
        elif operator == "gte":
            return field >= value
        elif operator == "lte":
            return field <= value
        elif operator == "in":
            return field.in_(value)
        elif operator == "not_in":
            return ~field.in_(value)
        elif operator == "like":
            return field.like(value)
        elif operator == "ilike":
            return field.ilike(value)
        elif operator == "is_null":
            if value:
                return field.is_(None)
            else:
                return field.isnot(None)
        raise ValueError(f"Неизвестный оператор '{operator}'")

    def _build_filter_conditions(self, **kwargs) -> List:
        """
        Строит список условий фильтрации из kwargs.

        В отличие от выборок для отображения, неизвестное поле здесь -
        ошибка: пропущенное условие превратило бы запрос резолвера
        в выборку всех записей.

        Args:
            **kwargs: Параметры фильтрации в формате field__operator=value

        Returns:
            List: Список SQLAlchemy условий для WHERE

        Raises:
            ValueError: Если поля нет в модели или оператор неизвестен.
        """
        conditions = []

        for key, value in kwargs.items():
            if "__" in key:
                field_name, operator = key.rsplit("__", 1)
            else:
                field_name, operator = key, "eq"

            if field_name not in self.shape.columns:
                raise ValueError(
                    f"Поле '{field_name}' не существует в модели {self.model.__name__}"
                )

            field = getattr(self.model, field_name)
            conditions.append(self._apply_filter_condition(field, operator, value))

        return conditions

    @property
    def shape(self) -> EntityShape:
        return get_entity_shape(self.model)

    async def filter_by(self, **kwargs) -> List[M]:
        """
        Фильтрует записи по указанным параметрам с поддержкой операторов.

        Операторы фильтрации:
        | Оператор  | Описание                    | Пример                          |
        |-----------|-----------------------------|---------------------------------|
        | eq        | Равно (=)                   | field__eq=value                 |
        | ne        | Не равно (!=)               | field__ne=value                 |
        | gt        | Больше (>)                  | field__gt=value                 |
        | lt        | Меньше (<)                  | field__lt=value                 |
        | gte       | Больше или равно (>=)       | field__gte=value                |
        | lte       | Меньше или равно (<=)       | field__lte=value                |
        | in        | В списке                    | field__in=[value1, value2]      |
        | not_in    | Не в списке                 | field__not_in=[value1, value2]  |
        | like      | LIKE (с учетом регистра)    | field__like="%value%"           |
        | ilike     | ILIKE (без учета регистра)  | field__ilike="%value%"          |
        | is_null   | IS NULL / IS NOT NULL       | field__is_null=True             |

        Args:
            **kwargs: Параметры фильтрации в формате field__operator=value.

        Returns:
            List[M]: Список отфильтрованных SQLAlchemy моделей.

        Example:
            >>> users = await repo.filter_by(first_name="Foo", last_name__ne="Bar")
        """
        statement = select(self.model)
        conditions = self._build_filter_conditions(**kwargs)

        if conditions:
            statement = statement.where(and_(*conditions))

        return await self.execute_and_return_scalars(statement)

    async def execute_and_return_scalars(self, statement: Select) -> List[M]:
        """
        Выполняет запрос и возвращает список моделей.

        Args:
            statement (Select): SQLAlchemy запрос.

        Returns:
            List[M]: Список моделей.
        """
        try:
            result = await self.session.execute(statement)
            return list(result.scalars().unique().all())
        except SQLAlchemyError as e:
            self.logger.error(
                "Ошибка при выполнении запроса %s: %s", self.model.__name__, e
            )
            raise

    async def execute_and_return_scalar(self, statement: Select) -> Optional[M]:
        """
        Выполняет запрос и возвращает одну модель или None.

        Args:
            statement (Select): SQLAlchemy запрос.

        Returns:
            Optional[M]: Модель или None.

        Raises:
            MultipleResultsFound: Если запрос вернул больше одной записи.
        """
        try:
            result = await self.session.execute(statement)
            return result.scalars().unique().one_or_none()
        except SQLAlchemyError as e:
            self.logger.error(
                "Ошибка при выполнении запроса %s: %s", self.model.__name__, e
            )
            raise


class FixtureRepository(BaseRepository[M]):
    """
    Репозиторий, через который установщик записывает фикстуры.

    Помимо базовых выборок умеет:
    - найти запись по запросу резолвера (Select или словарь фильтров)
    - создать запись из значений колонок и уже сохранённых связей
    - смержить значения фикстуры в существующую запись

    Example:
        >>> repository = FixtureRepository(session=session, model=UserModel)
        >>> existing = await repository.find_one({"first_name": "Foo"})
        >>> if existing is None:
        ...     user = await repository.create_item({"first_name": "Foo"}, {})
    """

    async def find_one(self, query: Any) -> Optional[M]:
        """
        Выполняет запрос резолвера.

        Args:
            query: Select по модели или словарь фильтров filter_by.

        Returns:
            Optional[M]: Найденная запись или None.

        Raises:
            TypeError: Если query не Select и не словарь.
            ValueError: Если в фильтрах неизвестное поле или оператор.
            MultipleResultsFound: Если найдено больше одной записи.
        """
        if isinstance(query, Select):
            statement = query
        elif isinstance(query, Mapping):
            statement = select(self.model)
            conditions = self._build_filter_conditions(**query)
            if conditions:
                statement = statement.where(and_(*conditions))
        else:
            raise TypeError(
                f"Ожидался Select или словарь фильтров, получен {type(query).__name__}"
            )

        # Резолвер должен видеть записи, добавленные в этой же транзакции
        await self.session.flush()
        return await self.execute_and_return_scalar(statement)

    async def load_relations(self, instance: M, keys: Iterable[str]) -> None:
        """
        Загружает ещё не загруженные связи сохранённой записи.

        В async сессии ленивая загрузка при обращении к атрибуту невозможна,
        поэтому связи, которые будут изменены, загружаются заранее.
        """
        state = inspect(instance)
        if state.transient or state.pending:
            return
        unloaded = [key for key in keys if key in state.unloaded]
        if unloaded:
            await self.session.refresh(instance, attribute_names=unloaded)

    def _assign_relations(self, instance: M, relations: Dict[str, Any]) -> None:
        """
        Назначает связи записи.

        Одиночные связи заменяются, коллекции дополняются недостающими
        элементами (существующие связи записи не удаляются).
        """
        for key, value in relations.items():
            relation = self.shape.relation(key)
            if relation is not None and relation.is_collection:
                collection = getattr(instance, key)
                current = relation.iter_values(collection)
                for item in relation.iter_values(value):
                    if any(item is existing for existing in current):
                        continue
                    if isinstance(collection, set):
                        collection.add(item)
                    elif isinstance(collection, dict):
                        collection.set(item)  # attribute_keyed_dict
                    else:
                        collection.append(item)
            else:
                setattr(instance, key, value)

    async def create_item(
        self, values: Dict[str, Any], relations: Optional[Dict[str, Any]] = None
    ) -> M:
        """
        Создает новую запись в базе данных.

        Args:
            values (Dict[str, Any]): Значения колонок.
            relations (Dict[str, Any], optional): Связи (сохранённые записи
                или списки сохранённых записей).

        Returns:
            M: Созданная SQLAlchemy модель.

        Raises:
            SQLAlchemyError: Если произошла ошибка при создании.
        """
        try:
            instance = self.model(**values)
            self._assign_relations(instance, relations or {})
            self.session.add(instance)
            await self._store(instance)
            self.logger.info(
                "Создана запись %s",
                self.model.__name__,
                extra={
                    "model": self.model.__name__,
                    "id": self.shape.identity_of(inspect(instance).dict),
                },
            )
            return instance
        except SQLAlchemyError as e:
            await self._on_error("создании", e)
            raise

    async def update_item(
        self,
        instance: M,
        values: Dict[str, Any],
        relations: Optional[Dict[str, Any]] = None,
    ) -> M:
        """
        Мержит значения в существующую запись.

        Колонки из values перезаписывают значения записи (кроме первичного
        ключа), колонки, которых нет в values, не меняются.

        Args:
            instance (M): Запись, привязанная к сессии.
            values (Dict[str, Any]): Значения колонок.
            relations (Dict[str, Any], optional): Связи.

        Returns:
            M: Обновленная SQLAlchemy модель.

        Raises:
            SQLAlchemyError: Если произошла ошибка при обновлении.
        """
        relations = relations or {}
        try:
            await self.load_relations(instance, relations.keys())

            for key, value in values.items():
                if key not in self.shape.primary_key:  # Не обновляем ключ
                    setattr(instance, key, value)
            self._assign_relations(instance, relations)

            await self._store(instance)

            self.logger.info(
                "Обновлена запись %s",
                self.model.__name__,
                extra={
                    "model": self.model.__name__,
                    "id": self.shape.identity_of(inspect(instance).dict),
                },
            )
            return instance
        except SQLAlchemyError as e:
            await self._on_error("обновлении", e)
            raise
