"""Простой граф: одна группа, профиль, пользователь и его картинка."""

from fixture_graph import fixture
from tests.entities import GroupModel, PictureModel, ProfileModel, UserModel

group = fixture(GroupModel, {"name": "Users"})

profile = fixture(ProfileModel, {"gender": "male", "photo": "foo.png"})

user = fixture(
    UserModel,
    {
        "first_name": "Foo",
        "last_name": "Bar",
        "profile": profile,
        "groups": [group],
    },
)

picture = fixture(PictureModel, {"path": "foo.png", "user": user})
