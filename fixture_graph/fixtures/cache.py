"""
Кэш установленных фикстур.

Ключ - идентичность экземпляра фикстуры (id()), значение - первичный
ключ и сохранённая запись. Кэш переживает несколько вызовов install()
и очищается только явно через clear().

Кэш не потокобезопасен: рассчитан на последовательную установку.
"""

from typing import Any, Dict, Iterator, NamedTuple, Optional, Tuple


class CacheEntry(NamedTuple):
    """
    Запись кэша.

    Attributes:
        identity: Значение первичного ключа (скаляр или кортеж).
        record: Сохранённая запись, привязанная к сессии.
    """

    identity: Any
    record: Any


class PersistenceCache:
    """
    Кэш установленных фикстур по идентичности экземпляра.

    Хранит сильную ссылку на фикстуру, чтобы id() не был переиспользован
    другим объектом, пока запись есть в кэше.
    """

    def __init__(self) -> None:
        self._entries: Dict[int, Tuple[Any, CacheEntry]] = {}

    def check(self, instance: Any) -> Optional[CacheEntry]:
        """Возвращает запись кэша для фикстуры или None."""
        entry = self._entries.get(id(instance))
        if entry is None or entry[0] is not instance:
            return None
        return entry[1]

    def record(self, instance: Any, identity: Any, record: Any) -> CacheEntry:
        """Сохраняет соответствие фикстура -> запись (последняя запись побеждает)."""
        entry = CacheEntry(identity=identity, record=record)
        self._entries[id(instance)] = (instance, entry)
        return entry

    def clear(self) -> None:
        """Удаляет все записи для всех типов сущностей."""
        self._entries.clear()

    def __contains__(self, instance: Any) -> bool:
        return self.check(instance) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Any]:
        return (instance for instance, _ in self._entries.values())


default_cache = PersistenceCache()


def clear() -> None:
    """Сбрасывает общий кэш процесса (default_cache)."""
    default_cache.clear()
