"""
Модуль для работы с фикстурами.

Предоставляет инструменты для:
- Построения фикстур (fixture) с резолверами
- Сбора фикстур из бандлов (collect, collect_modules)
- Кэширования установленных фикстур (PersistenceCache, clear)
"""

from fixture_graph.fixtures.builder import fixture, is_fixture
from fixture_graph.fixtures.cache import (CacheEntry, PersistenceCache, clear,
                                          default_cache)
from fixture_graph.fixtures.collector import collect, collect_modules
from fixture_graph.fixtures.metadata import (EntityShape, RelationField,
                                             RelationKind, get_entity_shape)
from fixture_graph.fixtures.resolvers import (Resolver, ResolverQuery,
                                              get_resolver, set_resolver)

__all__ = [
    "fixture",
    "is_fixture",
    "collect",
    "collect_modules",
    "CacheEntry",
    "PersistenceCache",
    "default_cache",
    "clear",
    "EntityShape",
    "RelationField",
    "RelationKind",
    "get_entity_shape",
    "Resolver",
    "ResolverQuery",
    "get_resolver",
    "set_resolver",
]
