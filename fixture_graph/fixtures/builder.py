"""
Построение фикстур.

Фикстура - это transient экземпляр модели SQLAlchemy (никогда не
добавляется в сессию). В relationship атрибуты можно подставлять другие
фикстуры или списки фикстур вместо готовых записей.

Example:
    >>> group = fixture(GroupModel, {"name": "Admins"})
    >>> user = fixture(
    ...     UserModel,
    ...     {"first_name": "Foo", "last_name": "Bar", "groups": [group]},
    ...     resolver=lambda repository, values: {"first_name": values["first_name"]},
    ... )
"""

import logging
from typing import Any, Mapping, Optional, Type, TypeVar

from sqlalchemy import inspect
from sqlalchemy.orm import InstanceState

from fixture_graph.core.exceptions import FixtureConstructionError
from fixture_graph.fixtures.metadata import get_entity_shape
from fixture_graph.fixtures.resolvers import Resolver, set_resolver

logger = logging.getLogger(__name__)

E = TypeVar("E")


def is_fixture(value: Any) -> bool:
    """
    Проверяет, является ли значение фикстурой.

    Фикстура - transient экземпляр mapped класса. Persistent и detached
    объекты считаются уже сохранёнными записями.
    """
    if isinstance(value, type):
        return False
    state = inspect(value, raiseerr=False)
    return isinstance(state, InstanceState) and state.transient


def fixture(
    entity: Type[E],
    data: Optional[Mapping[str, Any]] = None,
    resolver: Optional[Resolver] = None,
) -> E:
    """
    Создаёт фикстуру.

    Args:
        entity: Класс модели SQLAlchemy.
        data: Значения полей. Для relationship полей допускаются фикстуры,
            списки фикстур и сохранённые записи.
        resolver: Функция resolver(repository, values), возвращающая запрос
            (Select или словарь фильтров) для поиска существующей записи.

    Returns:
        Экземпляр entity с заполненными полями.

    Raises:
        FixtureConstructionError: Класс нельзя создать без аргументов или
            в data есть поле, которого нет у модели.
        UnmappedEntityError: entity не является моделью SQLAlchemy.
    """
    shape = get_entity_shape(entity)

    try:
        instance = entity()
    except Exception as e:
        raise FixtureConstructionError(
            entity,
            detail=f"Не удалось создать {shape.name} без аргументов: {e}",
        ) from e

    set_resolver(instance, resolver)

    for key, value in (data or {}).items():
        if not shape.is_attribute(key):
            raise FixtureConstructionError(
                entity,
                detail=f"Поле '{key}' не существует в модели {shape.name}",
                extra={"field": key},
            )
        setattr(instance, key, value)

    return instance
