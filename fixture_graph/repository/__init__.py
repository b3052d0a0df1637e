from .base import BaseRepository, FixtureRepository, SessionMixin

__all__ = [
    "SessionMixin",
    "BaseRepository",
    "FixtureRepository",
]
