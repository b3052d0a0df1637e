"""
Сложный граф: общие группы, вложенные списки,
картинки внутри коллекции пользователя.

by_role - словарь внутри модуля: его значения не обходятся, поэтому
пользователи в нём дублируют элементы users.
"""

from fixture_graph import fixture
from tests.entities import GroupModel, PictureModel, ProfileModel, UserModel

admins = fixture(GroupModel, {"name": "Admins"})
editors = fixture(GroupModel, {"name": "Editors"})
readers = fixture(GroupModel, {"name": "Readers"})


def make_user(first_name, last_name, groups, pictures=()):
    user = fixture(
        UserModel,
        {
            "first_name": first_name,
            "last_name": last_name,
            "profile": fixture(ProfileModel, {"gender": "female"}),
            "groups": groups,
        },
    )
    for path in pictures:
        fixture(PictureModel, {"path": path, "user": user})
    return user


users = [
    make_user("Alice", "Smith", [admins, editors], ["alice-1.png", "alice-2.png"]),
    make_user("Bob", "Jones", [editors, readers], ["bob.png"]),
    make_user("Carol", "White", [readers]),
]

by_role = {
    "admin": users[0],
    "reader": users[2],
}

dave = fixture(
    UserModel,
    {
        "first_name": "Dave",
        "last_name": "Brown",
        "groups": [admins, readers],
        "pictures": [
            fixture(PictureModel, {"path": "dave-1.png"}),
            fixture(PictureModel, {"path": "dave-2.png"}),
        ],
    },
)
