from .base import BaseFixtureException
from .fixtures import (FixtureConstructionError, FixturePersistenceError,
                       ResolverError, UnmappedEntityError)

__all__ = [
    # Base
    "BaseFixtureException",
    # Fixtures
    "FixtureConstructionError",
    "UnmappedEntityError",
    "ResolverError",
    "FixturePersistenceError",
]
