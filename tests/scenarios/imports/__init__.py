"""
Бандл, собранный из нескольких модулей.

Группы экспортируются и напрямую, и через пользователей из соседнего
модуля: коллектор должен вернуть каждую фикстуру один раз.
"""

from tests.scenarios.imports.groups import *  # noqa: F401,F403
from tests.scenarios.imports.users import *  # noqa: F401,F403
from tests.scenarios.imports.groups import __all__ as _groups
from tests.scenarios.imports.users import __all__ as _users

__all__ = [*_groups, *_users]
