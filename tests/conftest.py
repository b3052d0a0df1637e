"""
Общие фикстуры pytest.

Каждый тест получает новую in-memory базу SQLite (aiosqlite + StaticPool),
сессию из DatabaseContextManager и свежие модули сценариев: модули
перезагружаются, чтобы значения, записанные в фикстуры предыдущим тестом
(первичные ключи), не переходили в следующий.
"""

import importlib
import logging
from types import SimpleNamespace
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from fixture_graph import clear
from fixture_graph.core.connections import DatabaseClient, DatabaseContextManager
from tests.entities import BaseModel

SCENARIO_MODULES = (
    "tests.scenarios.simple",
    "tests.scenarios.complex",
    "tests.scenarios.imports.groups",
    "tests.scenarios.imports.users",
    "tests.scenarios.imports",
)


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    async with DatabaseContextManager(DatabaseClient(engine=engine)) as session:
        yield session


@pytest.fixture(autouse=True)
def reset_cache():
    clear()
    yield
    clear()


@pytest.fixture
def bundles() -> SimpleNamespace:
    """Свежие экземпляры модулей-сценариев simple, complex и imports."""
    modules = {}
    for name in SCENARIO_MODULES:
        modules[name] = importlib.reload(importlib.import_module(name))
    return SimpleNamespace(
        simple=modules["tests.scenarios.simple"],
        complex=modules["tests.scenarios.complex"],
        imports=modules["tests.scenarios.imports"],
    )


@pytest.fixture
def caplog_debug(caplog):
    caplog.set_level(logging.DEBUG)
    return caplog
