"""
Реестр резолверов фикстур.

Резолвер привязывается к экземпляру фикстуры вне самого экземпляра:
через таблицу, ключом которой служит id() объекта. Набор полей фикстуры
не меняется, поэтому резолвер не попадает ни в данные для сохранения,
ни в обход графа.

Записи живут, пока жив экземпляр фикстуры (weakref.finalize удаляет их).
"""

import weakref
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Tuple, Union

from sqlalchemy.sql import Select

ResolverQuery = Union[Select, Mapping[str, Any]]
Resolver = Callable[
    [Any, Dict[str, Any]], Union[ResolverQuery, Awaitable[ResolverQuery]]
]

_resolvers: Dict[int, Tuple["weakref.ref[Any]", Resolver]] = {}


def _forget(key: int) -> None:
    _resolvers.pop(key, None)


def set_resolver(instance: Any, resolver: Optional[Resolver]) -> None:
    """
    Привязывает резолвер к экземпляру фикстуры.

    Args:
        instance: Экземпляр фикстуры.
        resolver: Функция resolver(repository, values) или None,
            чтобы снять ранее привязанный резолвер.
    """
    key = id(instance)
    if resolver is None:
        _forget(key)
        return
    if key not in _resolvers:
        weakref.finalize(instance, _forget, key)
    _resolvers[key] = (weakref.ref(instance), resolver)


def get_resolver(instance: Any) -> Optional[Resolver]:
    """
    Возвращает резолвер экземпляра или None.

    Проверяет, что запись принадлежит именно этому объекту, а не
    другому, получившему тот же id() после сборки мусора.
    """
    entry = _resolvers.get(id(instance))
    if entry is None:
        return None
    ref, resolver = entry
    if ref() is not instance:
        return None
    return resolver
