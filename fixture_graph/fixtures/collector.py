"""
Сбор фикстур из бандлов.

Бандл - модуль, словарь или итерируемый набор значений. Коллектор обходит
граф, достижимый из экспортируемых значений, и возвращает плоский список
фикстур, в котором каждый экземпляр встречается ровно один раз.

Внутри экспортируемых значений обходятся только списки и кортежи;
коллекции связей (список, множество, словарь) обходятся по элементам.

Порядок результата детерминирован для заданного графа, но не обязан
учитывать зависимости: порядок установки обеспечивает установщик.
"""

import importlib
import logging
from types import ModuleType
from typing import Any, Iterable, List, Mapping, Set

from sqlalchemy import inspect

from fixture_graph.fixtures.builder import is_fixture
from fixture_graph.fixtures.metadata import get_entity_shape

logger = logging.getLogger(__name__)


def _module_exports(module: ModuleType) -> Iterable[Any]:
    names = getattr(module, "__all__", None)
    if names is None:
        names = [name for name in vars(module) if not name.startswith("_")]
    return [getattr(module, name) for name in names]


def _bundle_values(bundle: Any) -> Iterable[Any]:
    if isinstance(bundle, ModuleType):
        return _module_exports(bundle)
    if isinstance(bundle, Mapping):
        return bundle.values()
    if isinstance(bundle, (list, tuple)):
        return bundle
    return [bundle]


def _walk(value: Any, visited: Set[int], result: List[Any]) -> None:
    if is_fixture(value):
        if id(value) in visited:
            return
        visited.add(id(value))
        result.append(value)

        # Читаем state.dict, а не getattr: getattr инициализирует пустые коллекции
        state_dict = inspect(value).dict
        for relation in get_entity_shape(type(value)).relations:
            if relation.key in state_dict:
                for item in relation.iter_values(state_dict[relation.key]):
                    _walk(item, visited, result)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _walk(item, visited, result)


def collect(*bundles: Any) -> List[Any]:
    """
    Собирает все фикстуры, достижимые из бандлов.

    Args:
        *bundles: Модули (экспорт - __all__ или публичные имена),
            словари (значения) или списки значений.

    Returns:
        List: Фикстуры без повторов, в порядке обхода в глубину.
    """
    visited: Set[int] = set()
    result: List[Any] = []

    for bundle in bundles:
        for value in _bundle_values(bundle):
            _walk(value, visited, result)

    logger.debug(
        "Собрано %d фикстур из %d бандлов",
        len(result),
        len(bundles),
        extra={"fixtures": len(result), "bundles": len(bundles)},
    )
    return result


def collect_modules(*names: str) -> List[Any]:
    """
    Импортирует модули по именам и собирает из них фикстуры.

    Args:
        *names: Полные имена модулей (например, "tests.scenarios.simple").

    Returns:
        List: Результат collect() по импортированным модулям.
    """
    modules = [importlib.import_module(name) for name in names]
    return collect(*modules)
