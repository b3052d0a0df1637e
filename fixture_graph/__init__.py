"""
fixture-graph: декларативные фикстуры для моделей SQLAlchemy.

Фикстуры описываются как графы transient экземпляров моделей, собираются
из модулей-бандлов и устанавливаются в базу в порядке зависимостей.

Example:
    >>> from fixture_graph import collect, fixture, install
    >>> group = fixture(GroupModel, {"name": "Admins"})
    >>> user = fixture(UserModel, {"first_name": "Foo", "groups": [group]})
    >>> await install(session, collect([user]))
"""

from fixture_graph.core.exceptions import (BaseFixtureException,
                                           FixtureConstructionError,
                                           FixturePersistenceError,
                                           ResolverError, UnmappedEntityError)
from fixture_graph.fixtures import (CacheEntry, PersistenceCache, clear,
                                    collect, collect_modules, default_cache,
                                    fixture, get_entity_shape, is_fixture)
from fixture_graph.repository import FixtureRepository
from fixture_graph.services import FixtureInstaller, install

__version__ = "0.1.0"

__all__ = [
    "fixture",
    "is_fixture",
    "collect",
    "collect_modules",
    "install",
    "clear",
    "FixtureInstaller",
    "FixtureRepository",
    "PersistenceCache",
    "CacheEntry",
    "default_cache",
    "get_entity_shape",
    "BaseFixtureException",
    "FixtureConstructionError",
    "UnmappedEntityError",
    "ResolverError",
    "FixturePersistenceError",
]
