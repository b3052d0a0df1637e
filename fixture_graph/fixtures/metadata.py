"""
Описание формы сущности (EntityShape) на основе SQLAlchemy mapper.

Коллектор и установщик не обращаются к mapper напрямую: они работают
с неизменяемым описанием, которое строится один раз на класс модели.

Classes:
    RelationKind: Вид связи (одиночная / коллекция).
    RelationField: Описание одного relationship атрибута.
    EntityShape: Колонки, первичный ключ и связи модели.
"""

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Iterable, Mapping, Optional, Tuple

from sqlalchemy import inspect
from sqlalchemy.orm import Mapper, RelationshipDirection

from fixture_graph.core.exceptions import UnmappedEntityError


class RelationKind(str, Enum):
    """
    Вид relationship атрибута.

    Attributes:
        SINGLE: Атрибут хранит один объект (many-to-one, one-to-one).
        COLLECTION: Атрибут хранит список объектов (one-to-many, many-to-many).
    """

    SINGLE = "single"
    COLLECTION = "collection"


@dataclass(frozen=True)
class RelationField:
    """
    Описание relationship атрибута модели.

    Attributes:
        key (str): Имя атрибута.
        kind (RelationKind): Одиночная связь или коллекция.
        direction (RelationshipDirection): Направление связи в терминах SQLAlchemy.
        target (type): Класс связанной модели.
        reverse_key (Optional[str]): Имя обратного атрибута (back_populates).
        foreign_keys (Tuple[Tuple[str, str], ...]): Пары (атрибут владельца,
            атрибут элемента) для one-to-many связи.
    """

    key: str
    kind: RelationKind
    direction: RelationshipDirection
    target: type
    reverse_key: Optional[str] = None
    foreign_keys: Tuple[Tuple[str, str], ...] = ()

    @property
    def is_collection(self) -> bool:
        return self.kind is RelationKind.COLLECTION

    @property
    def is_owned_by_target(self) -> bool:
        """
        Внешний ключ лежит на стороне элементов коллекции.

        True для one-to-many связи (с обратным атрибутом или без):
        такие элементы устанавливаются после владельца.
        """
        return self.direction is RelationshipDirection.ONETOMANY

    def iter_values(self, value: Any) -> Iterable[Any]:
        """
        Элементы значения связи.

        Коллекция может быть списком, множеством или словарём
        (attribute_keyed_dict): для словаря берутся значения.
        """
        if value is None:
            return ()
        if not self.is_collection:
            return (value,)
        if isinstance(value, Mapping):
            return list(value.values())
        return list(value)


@dataclass(frozen=True)
class EntityShape:
    """
    Форма сущности: какие атрибуты колонки, а какие связи.

    Attributes:
        model (type): Класс модели.
        columns (Tuple[str, ...]): Имена column атрибутов в порядке mapper.
        primary_key (Tuple[str, ...]): Имена атрибутов первичного ключа.
        relations (Tuple[RelationField, ...]): Связи в порядке объявления.
    """

    model: type
    columns: Tuple[str, ...]
    primary_key: Tuple[str, ...]
    relations: Tuple[RelationField, ...]

    @property
    def name(self) -> str:
        return self.model.__name__

    def relation(self, key: str) -> Optional[RelationField]:
        for relation in self.relations:
            if relation.key == key:
                return relation
        return None

    def is_attribute(self, key: str) -> bool:
        return key in self.columns or self.relation(key) is not None

    def identity_of(self, values: Any) -> Any:
        """
        Значение первичного ключа из словаря значений.

        Returns:
            Скаляр для простого ключа, кортеж для составного,
            None если хотя бы одна часть ключа не задана.
        """
        parts = tuple(values.get(key) for key in self.primary_key)
        if any(part is None for part in parts):
            return None
        return parts[0] if len(parts) == 1 else parts


def _foreign_keys(mapper: Mapper, prop: Any) -> Tuple[Tuple[str, str], ...]:
    if prop.direction is not RelationshipDirection.ONETOMANY:
        return ()
    return tuple(
        (
            mapper.get_property_by_column(local).key,
            prop.mapper.get_property_by_column(remote).key,
        )
        for local, remote in prop.local_remote_pairs
    )


def _get_mapper(model: Any) -> Mapper:
    mapper = inspect(model, raiseerr=False)
    if not isinstance(mapper, Mapper):
        raise UnmappedEntityError(model)
    return mapper


@lru_cache(maxsize=None)
def get_entity_shape(model: type) -> EntityShape:
    """
    Строит EntityShape для класса модели.

    Args:
        model: Класс, зарегистрированный в SQLAlchemy mapper.

    Returns:
        EntityShape: Описание колонок, первичного ключа и связей.

    Raises:
        UnmappedEntityError: Если класс не является моделью SQLAlchemy.
    """
    mapper = _get_mapper(model)

    columns = tuple(attr.key for attr in mapper.column_attrs)
    primary_key = tuple(
        mapper.get_property_by_column(column).key for column in mapper.primary_key
    )
    relations = tuple(
        RelationField(
            key=prop.key,
            kind=RelationKind.COLLECTION if prop.uselist else RelationKind.SINGLE,
            direction=prop.direction,
            target=prop.mapper.class_,
            reverse_key=prop.back_populates or None,
            foreign_keys=_foreign_keys(mapper, prop),
        )
        for prop in mapper.relationships
    )
    return EntityShape(
        model=model,
        columns=columns,
        primary_key=primary_key,
        relations=relations,
    )
