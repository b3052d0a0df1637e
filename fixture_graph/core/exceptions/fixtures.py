"""
Исключения для построения и установки фикстур.

Classes:
    FixtureConstructionError: Не удалось создать экземпляр фикстуры.
    UnmappedEntityError: Класс сущности не является моделью SQLAlchemy.
    ResolverError: Резолвер упал или вернул некорректный запрос.
    FixturePersistenceError: Хранилище отклонило вставку или обновление.
"""

from typing import Any, Dict, Optional

from fixture_graph.core.exceptions.base import BaseFixtureException


def _entity_name(entity: Any) -> str:
    return getattr(entity, "__name__", None) or type(entity).__name__


class FixtureConstructionError(BaseFixtureException):
    """
    Ошибка построения фикстуры.

    Возникает, если класс сущности нельзя инстанцировать без аргументов
    или в данных передано поле, которого нет у модели.

    Attributes:
        entity: Класс сущности, для которой строилась фикстура.
    """

    def __init__(
        self,
        entity: Any,
        detail: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ):
        self.entity = entity
        name = _entity_name(entity)
        super().__init__(
            detail=detail or f"Не удалось создать фикстуру {name}",
            error_type="fixture_construction",
            extra={"entity": name, **(extra or {})},
        )


class UnmappedEntityError(FixtureConstructionError):
    """
    Класс сущности не зарегистрирован в SQLAlchemy mapper.
    """

    def __init__(self, entity: Any):
        super().__init__(
            entity,
            detail=f"{_entity_name(entity)} не является моделью SQLAlchemy",
        )


class ResolverError(BaseFixtureException):
    """
    Ошибка резолвера фикстуры.

    Резолвер выбросил исключение, вернул объект неподдерживаемого типа
    или его запрос нашёл больше одной записи.

    Attributes:
        model: Класс модели фикстуры.
    """

    def __init__(
        self,
        model: Any,
        detail: str,
        extra: Optional[Dict[str, Any]] = None,
    ):
        self.model = model
        super().__init__(
            detail=detail,
            error_type="fixture_resolution",
            extra={"model": _entity_name(model), **(extra or {})},
        )


class FixturePersistenceError(BaseFixtureException):
    """
    Ошибка сохранения фикстуры в хранилище.

    Оборачивает исходную ошибку SQLAlchemy (доступна через __cause__).
    Уже установленные фикстуры остаются установленными и в кэше.

    Attributes:
        model: Класс модели фикстуры.
    """

    def __init__(self, model: Any, error: Exception):
        self.model = model
        name = _entity_name(model)
        super().__init__(
            detail=f"Ошибка сохранения фикстуры {name}: {error}",
            error_type="fixture_persistence",
            extra={"model": name, "error": type(error).__name__},
        )
