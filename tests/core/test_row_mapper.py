"""Unit tests for core.row_mapper (column-to-field mapping and materialization)."""

from dataclasses import dataclass, field

import pytest
from pydantic import BaseModel

from dbkit.core.errors import ConfigurationError
from dbkit.core.row_mapper import (
    PROPERTY_NOT_FOUND,
    CursorMetadata,
    field_names,
    map_columns_to_fields,
    to_objects,
)
from tests.utils.sources import FakeMetadata, make_cursor


@dataclass
class User:
    userId: int
    username: str


class UserModel(BaseModel):
    userId: int
    username: str


class UserBean:
    userId: int = 0
    username: str = ""


@dataclass
class IdRow:
    id: int


def test_underscores_and_case_are_ignored() -> None:
    meta = FakeMetadata([("user_id", None), ("USER_NAME", None), ("unmapped_col", None)])
    mapping = map_columns_to_fields(meta, ["userId", "username"])
    assert mapping == [PROPERTY_NOT_FOUND, 0, 1, PROPERTY_NOT_FOUND]


def test_empty_label_falls_back_to_column_name() -> None:
    meta = FakeMetadata([("", "user_name"), (None, "userid")])
    assert map_columns_to_fields(meta, ["userId", "userName"]) == [PROPERTY_NOT_FOUND, 1, 0]


def test_first_matching_field_wins() -> None:
    meta = FakeMetadata([("user_id", None)])
    assert map_columns_to_fields(meta, ["USERID", "userId"]) == [PROPERTY_NOT_FOUND, 0]


def test_duplicate_normalized_columns_all_map() -> None:
    """Both columns map to 'id'; on materialization the last one's value is kept."""
    meta = FakeMetadata([("id", None), ("_id", None)])
    assert map_columns_to_fields(meta, ["id"]) == [PROPERTY_NOT_FOUND, 0, 0]

    (obj,) = to_objects(make_cursor(["id", "_id"], [(1, 2)]), IdRow)
    assert obj.id == 2


def test_no_columns() -> None:
    assert map_columns_to_fields(FakeMetadata([]), ["id"]) == [PROPERTY_NOT_FOUND]


def test_cursor_metadata() -> None:
    meta = CursorMetadata(make_cursor(["a", "b_c"], []))
    assert meta.column_count() == 2
    assert meta.column_label(2) == "b_c"
    assert meta.column_name(1) == "a"


def test_field_names() -> None:
    assert field_names(User) == ["userId", "username"]
    assert field_names(UserModel) == ["userId", "username"]
    assert field_names(UserBean) == ["userId", "username"]
    assert field_names(("a", "b")) == ["a", "b"]


def test_to_objects_dataclass() -> None:
    cur = make_cursor(["user_id", "USER_NAME", "extra"], [(1, "ann", "x"), (2, "bob", "y")])
    assert to_objects(cur, User) == [User(1, "ann"), User(2, "bob")]


def test_to_objects_pydantic() -> None:
    cur = make_cursor(["USER_ID", "user_name"], [(7, "eve")])
    assert to_objects(cur, UserModel) == [UserModel(userId=7, username="eve")]


def test_to_objects_plain_class() -> None:
    cur = make_cursor(["user_id"], [(3,)])
    (obj,) = to_objects(cur, UserBean)
    assert isinstance(obj, UserBean)
    assert obj.userId == 3
    assert obj.username == ""


def test_to_objects_empty_result() -> None:
    assert to_objects(make_cursor(["user_id", "user_name"], []), User) == []


@dataclass
class Profile:
    id: int
    name: str = "anonymous"
    tags: list[str] = field(default_factory=list)


class ProfileModel(BaseModel):
    id: int
    name: str = "anonymous"


def test_unmapped_optional_fields_keep_defaults() -> None:
    cur = make_cursor(["ID"], [(1,)])
    assert to_objects(cur, Profile) == [Profile(1, "anonymous", [])]
    cur = make_cursor(["id"], [(2,)])
    assert to_objects(cur, ProfileModel) == [ProfileModel(id=2)]


@pytest.mark.parametrize("target", [User, UserModel])
def test_unmapped_required_field_is_configuration_error(target: type) -> None:
    """A required field with no matching column fails up front, naming the field."""
    cur = make_cursor(["user_id"], [(1,)])
    with pytest.raises(ConfigurationError, match="username"):
        to_objects(cur, target)
    cur.fetchall.assert_not_called()


def test_plain_class_tolerates_unmapped_fields() -> None:
    (obj,) = to_objects(make_cursor(["user_name"], [("zed",)]), UserBean)
    assert obj.username == "zed"
    assert obj.userId == 0
