"""
Модели для тестов установки фикстур.

Схема повторяет типичный набор связей:
    GroupModel <-> UserModel: many-to-many (user_groups)
    UserModel -> ProfileModel: one-to-one (внешний ключ у пользователя)
    UserModel <- PictureModel: one-to-many (внешний ключ у картинки, NOT NULL)

Связи без обратного атрибута:
    PostModel -> LineModel: one-to-many списком (post_id NOT NULL)
    PostModel -> NoteModel: one-to-many словарём по key
    PostModel -> TagModel: many-to-many множеством (post_tags)
"""

from typing import Dict, List, Optional, Set

from sqlalchemy import Column, ForeignKey, Integer, String, Table
from sqlalchemy.orm import (DeclarativeBase, Mapped, attribute_keyed_dict,
                            mapped_column, relationship)


class BaseModel(DeclarativeBase):
    """Базовый класс тестовых моделей."""


user_groups = Table(
    "user_groups",
    BaseModel.metadata,
    Column("user_id", ForeignKey("users.id"), primary_key=True),
    Column("group_id", ForeignKey("groups.id"), primary_key=True),
)


class GroupModel(BaseModel):
    __tablename__ = "groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    users: Mapped[List["UserModel"]] = relationship(
        secondary=user_groups, back_populates="groups", lazy="selectin"
    )


class ProfileModel(BaseModel):
    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    gender: Mapped[str] = mapped_column(String(20), nullable=False)
    photo: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    user: Mapped[Optional["UserModel"]] = relationship(
        back_populates="profile", lazy="selectin"
    )


class UserModel(BaseModel):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    profile_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("profiles.id"), nullable=True
    )

    profile: Mapped[Optional[ProfileModel]] = relationship(
        back_populates="user", lazy="selectin"
    )
    groups: Mapped[List[GroupModel]] = relationship(
        secondary=user_groups, back_populates="users", lazy="selectin"
    )
    pictures: Mapped[List["PictureModel"]] = relationship(
        back_populates="user", lazy="selectin"
    )


class PictureModel(BaseModel):
    __tablename__ = "pictures"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    path: Mapped[str] = mapped_column(String(255), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)

    user: Mapped[UserModel] = relationship(back_populates="pictures", lazy="selectin")


post_tags = Table(
    "post_tags",
    BaseModel.metadata,
    Column("post_id", ForeignKey("posts.id"), primary_key=True),
    Column("tag_id", ForeignKey("tags.id"), primary_key=True),
)


class TagModel(BaseModel):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)


class LineModel(BaseModel):
    __tablename__ = "lines"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    text: Mapped[str] = mapped_column(String(255), nullable=False)
    post_id: Mapped[int] = mapped_column(ForeignKey("posts.id"), nullable=False)


class NoteModel(BaseModel):
    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    key: Mapped[str] = mapped_column(String(50), nullable=False)
    post_id: Mapped[int] = mapped_column(ForeignKey("posts.id"), nullable=False)


class PostModel(BaseModel):
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)

    lines: Mapped[List[LineModel]] = relationship(lazy="selectin")
    notes: Mapped[Dict[str, NoteModel]] = relationship(
        collection_class=attribute_keyed_dict("key"), lazy="selectin"
    )
    tags: Mapped[Set[TagModel]] = relationship(
        secondary=post_tags, collection_class=set, lazy="selectin"
    )


class NotAModel:
    """Обычный класс без маппинга."""


ENTITIES = (
    GroupModel,
    UserModel,
    ProfileModel,
    PictureModel,
    PostModel,
    LineModel,
    NoteModel,
    TagModel,
)
