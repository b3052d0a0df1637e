"""
Установка фикстур в базу данных.

Установщик сохраняет фикстуры в порядке зависимостей:
1. Фикстура из кэша не записывается повторно (skipped=True).
2. Связанные фикстуры устанавливаются первыми и подставляются в связи
   как сохранённые записи.
3. Если у фикстуры есть резолвер, его запрос ищет существующую запись:
   найдена - значения фикстуры мержатся в неё, иначе - вставка.
4. Колонки сохранённой записи (первичный ключ, серверные значения)
   копируются обратно в фикстуру, соответствие попадает в кэш.
5. Фикстуры из one-to-many связей устанавливаются после владельца:
   их внешний ключ берётся из записи владельца.

Example:
    >>> fixtures = collect(bundle)
    >>> await install(session, fixtures, lambda record, skipped: print(record, skipped))
"""

from inspect import isawaitable
from typing import (Any, Awaitable, Callable, Dict, Iterable, List, Optional,
                    Set, Tuple)

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fixture_graph.core.exceptions import (BaseFixtureException,
                                           FixturePersistenceError,
                                           ResolverError)
from fixture_graph.fixtures.builder import is_fixture
from fixture_graph.fixtures.cache import (CacheEntry, PersistenceCache,
                                          default_cache)
from fixture_graph.fixtures.metadata import EntityShape, get_entity_shape
from fixture_graph.fixtures.resolvers import Resolver, get_resolver
from fixture_graph.repository.base import FixtureRepository
from fixture_graph.services.base import BaseService

OnEach = Callable[[Any, bool], Optional[Awaitable[None]]]


class FixtureInstaller(BaseService):
    """
    Сервис установки фикстур.

    Attributes:
        cache (PersistenceCache): Кэш установленных фикстур (по умолчанию общий).
        on_each (Optional[OnEach]): Колбэк on_each(record, skipped), может быть async.
        autocommit (Optional[bool]): Переопределение settings.install.AUTOCOMMIT.
    """

    def __init__(
        self,
        session: AsyncSession,
        cache: Optional[PersistenceCache] = None,
        on_each: Optional[OnEach] = None,
        autocommit: Optional[bool] = None,
    ):
        super().__init__(session)
        self.cache = default_cache if cache is None else cache
        self.on_each = on_each
        self.autocommit = autocommit
        self._repositories: Dict[type, FixtureRepository] = {}
        self._in_progress: Set[int] = set()
        self._notified: Set[int] = set()
        self._stats = {"installed": 0, "skipped": 0}

    def get_repository(self, model: type) -> FixtureRepository:
        """Возвращает (и создаёт при первом обращении) репозиторий модели."""
        repository = self._repositories.get(model)
        if repository is None:
            repository = FixtureRepository(
                session=self.session, model=model, autocommit=self.autocommit
            )
            self._repositories[model] = repository
        return repository

    async def install(self, fixtures: Iterable[Any]) -> List[Any]:
        """
        Устанавливает фикстуры и всё, от чего они зависят.

        Args:
            fixtures: Фикстуры в порядке установки.

        Returns:
            List: Сохранённые записи для каждой переданной фикстуры.

        Raises:
            ResolverError: Резолвер упал или вернул некорректный запрос.
            FixturePersistenceError: Хранилище отклонило запись.
        """
        self._in_progress.clear()
        self._notified.clear()
        self._stats = {"installed": 0, "skipped": 0}

        records = []
        for instance in fixtures:
            records.append(await self._install(instance))

        self.logger.info(
            "Установка фикстур завершена: установлено=%d, пропущено=%d",
            self._stats["installed"],
            self._stats["skipped"],
            extra=dict(self._stats),
        )
        return records

    async def _install(
        self, instance: Any, link: Optional[Dict[str, Any]] = None
    ) -> Optional[Any]:
        """
        Устанавливает одну фикстуру (в глубину по зависимостям).

        Args:
            instance: Фикстура.
            link: Значения внешнего ключа на запись владельца
                (для элементов one-to-many связи).

        Returns:
            Сохранённая запись или None, если фикстура уже устанавливается
            выше по стеку (цикл связей).
        """
        cached = self.cache.check(instance)
        if cached is not None:
            record = await self._attach(instance, cached)
            if self.settings.install.LOG_SKIPPED:
                self.logger.debug(
                    "Фикстура %s уже установлена (id=%s)",
                    type(instance).__name__,
                    cached.identity,
                )
            await self._notify(instance, record, skipped=True)
            return record

        key = id(instance)
        if key in self._in_progress:
            return None

        shape = get_entity_shape(type(instance))
        self._in_progress.add(key)
        try:
            relations, deferred = await self._resolve_dependencies(instance, shape)
            record = await self._persist(instance, shape, relations, link)
            self._write_back(instance, shape, record)
        finally:
            self._in_progress.discard(key)

        await self._notify(instance, record, skipped=False)

        await self._install_children(shape, record, deferred)

        return record

    async def _resolve_dependencies(
        self, instance: Any, shape: EntityShape
    ) -> Tuple[Dict[str, Any], Dict[str, List[Any]]]:
        """
        Устанавливает связанные фикстуры и подставляет записи вместо них.

        Фикстуры в one-to-many связях держат внешний ключ на эту фикстуру,
        поэтому откладываются до её сохранения.

        Returns:
            Tuple: (связи для записи, отложенные фикстуры по имени связи).
        """
        state_dict = inspect(instance).dict
        relations: Dict[str, Any] = {}
        deferred: Dict[str, List[Any]] = {}

        for relation in shape.relations:
            if relation.key not in state_dict:
                continue
            value = state_dict[relation.key]

            if value is None:
                if not relation.is_collection:
                    relations[relation.key] = None
                continue

            records = []
            for item in relation.iter_values(value):
                if relation.is_owned_by_target and is_fixture(item):
                    deferred.setdefault(relation.key, []).append(item)
                    continue
                record = await self._resolve_value(item)
                if record is not None:
                    records.append(record)

            if relation.is_collection:
                if records:
                    relations[relation.key] = records
            elif records:
                relations[relation.key] = records[0]

        return relations, deferred

    async def _install_children(
        self, shape: EntityShape, record: Any, deferred: Dict[str, List[Any]]
    ) -> None:
        """
        Устанавливает отложенные элементы one-to-many связей.

        Внешний ключ элемента заполняется из записи владельца, затем
        записи элементов добавляются в связь владельца.
        """
        record_dict = inspect(record).dict
        relations: Dict[str, Any] = {}

        for key, items in deferred.items():
            relation = shape.relation(key)
            link = {
                child_key: record_dict.get(owner_key)
                for owner_key, child_key in relation.foreign_keys
            }
            records = []
            for item in items:
                child = await self._install(item, link)
                if child is not None:
                    records.append(child)
            if records:
                relations[key] = records if relation.is_collection else records[0]

        if not relations:
            return
        try:
            await self.get_repository(shape.model).update_item(record, {}, relations)
        except SQLAlchemyError as e:
            raise FixturePersistenceError(shape.model, e) from e

    async def _attach(self, instance: Any, cached: CacheEntry) -> Any:
        """
        Возвращает запись из кэша, привязанную к текущей сессии.

        Кэш общий для процесса: запись могла быть сохранена через другую
        сессию (например, в предыдущем тесте).
        """
        record = cached.record
        if inspect(record).session_id == self.session.sync_session.hash_key:
            return record

        try:
            attached = await self.session.get(type(record), cached.identity)
            if attached is None:
                attached = await self.session.merge(record)
        except SQLAlchemyError as e:
            raise FixturePersistenceError(type(record), e) from e

        self.cache.record(instance, cached.identity, attached)
        return attached

    async def _resolve_value(self, value: Any) -> Optional[Any]:
        if is_fixture(value):
            return await self._install(value)
        # Уже сохранённая запись (persistent или detached)
        return await self.session.merge(value)

    async def _persist(
        self,
        instance: Any,
        shape: EntityShape,
        relations: Dict[str, Any],
        link: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Записывает фикстуру: мерж в найденную запись или вставка.

        Значения link (внешний ключ на владельца) перекрывают колонки фикстуры.
        """
        repository = self.get_repository(shape.model)
        state_dict = inspect(instance).dict
        values = {key: state_dict[key] for key in shape.columns if key in state_dict}
        values.update(link or {})

        existing = None
        resolver = get_resolver(instance)
        if resolver is not None:
            existing = await self._resolve(
                repository, resolver, {**values, **relations}
            )

        try:
            identity = shape.identity_of(values)
            if existing is None and identity is not None:
                existing = await repository.get_item_by_identity(identity)

            if existing is not None:
                return await repository.update_item(existing, values, relations)
            return await repository.create_item(values, relations)
        except SQLAlchemyError as e:
            raise FixturePersistenceError(shape.model, e) from e

    async def _resolve(
        self,
        repository: FixtureRepository,
        resolver: Resolver,
        values: Dict[str, Any],
    ) -> Optional[Any]:
        """
        Вызывает резолвер и выполняет его запрос.

        Returns:
            Найденная запись или None.

        Raises:
            ResolverError: Резолвер упал, вернул не Select/словарь
                или запрос нашёл больше одной записи.
        """
        model = repository.model
        try:
            query = resolver(repository, values)
            if isawaitable(query):
                query = await query
        except BaseFixtureException:
            raise
        except Exception as e:
            raise ResolverError(model, f"Резолвер {model.__name__} упал: {e}") from e

        try:
            existing = await repository.find_one(query)
        except (TypeError, ValueError, SQLAlchemyError) as e:
            raise ResolverError(
                model, f"Некорректный запрос резолвера {model.__name__}: {e}"
            ) from e

        self.logger.debug(
            "Резолвер %s: %s",
            model.__name__,
            "найдена запись" if existing is not None else "запись не найдена",
        )
        return existing

    def _write_back(self, instance: Any, shape: EntityShape, record: Any) -> None:
        """
        Копирует колонки записи в фикстуру и кэширует соответствие.

        Связи не копируются: фикстура не должна попасть в сессию.
        """
        record_dict = inspect(record).dict
        for key in shape.columns:
            if key in record_dict:
                setattr(instance, key, record_dict[key])

        self.cache.record(instance, shape.identity_of(record_dict), record)

    async def _notify(self, instance: Any, record: Any, skipped: bool) -> None:
        """Вызывает on_each не больше одного раза на фикстуру за вызов install()."""
        key = id(instance)
        if key in self._notified:
            return
        self._notified.add(key)
        self._stats["skipped" if skipped else "installed"] += 1

        if self.on_each is None:
            return
        result = self.on_each(record, skipped)
        if isawaitable(result):
            await result


async def install(
    session: AsyncSession,
    fixtures: Iterable[Any],
    on_each: Optional[OnEach] = None,
    *,
    cache: Optional[PersistenceCache] = None,
    autocommit: Optional[bool] = None,
) -> List[Any]:
    """
    Устанавливает фикстуры в базу данных.

    Args:
        session: Асинхронная сессия SQLAlchemy.
        fixtures: Фикстуры (обычно результат collect()).
        on_each: Колбэк on_each(record, skipped), вызывается один раз
            на каждую обработанную фикстуру.
        cache: Кэш установленных фикстур. По умолчанию общий кэш процесса.
        autocommit: Коммитить после каждой записи (по умолчанию из настроек).

    Returns:
        List: Сохранённые записи для каждой переданной фикстуры.
    """
    installer = FixtureInstaller(
        session, cache=cache, on_each=on_each, autocommit=autocommit
    )
    return await installer.install(fixtures)
