from __future__ import annotations

from pathlib import Path
from unittest import mock

import pytest

from blog.database import Database
from blog.errors import Forbidden, InvalidToken, MissingField, NotFound
from blog.models import User
from blog.posts import MAX_POST_ID, POST_FIELDS_REQUIRED, PostService, parse_tags


@pytest.fixture()
def database(tmp_path: Path) -> Database:
    db = Database(tmp_path / "blog.sqlite3", bcrypt_rounds=4)
    db.initialize()
    return db


@pytest.fixture()
def service(database: Database) -> PostService:
    return PostService(database)


@pytest.fixture()
def ann(database: Database) -> User:
    return database.create_user("Ann", "ann@x.com", "pw123")


@pytest.fixture()
def bob(database: Database) -> User:
    return database.create_user("Bob", "bob@x.com", "pw456")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("a, b ,c", ["a", "b", "c"]),
        ("x, y", ["x", "y"]),
        ("single", ["single"]),
        ("", []),
        (None, []),
        ("  ", []),
        ("a,,b,", ["a", "b"]),
    ],
)
def test_parse_tags(raw, expected) -> None:
    assert parse_tags(raw) == expected


def test_create_requires_title_and_content(service: PostService, ann: User) -> None:
    with pytest.raises(MissingField) as excinfo:
        service.create(ann.id, "", "content")
    assert str(excinfo.value) == POST_FIELDS_REQUIRED

    with pytest.raises(MissingField):
        service.create(ann.id, "Title", None)


def test_create_sets_author_and_tags(service: PostService, ann: User) -> None:
    post = service.create(ann.id, "T", "C", "x, y")

    assert post.author_id == ann.id
    assert post.tags == ("x", "y")
    assert post.created_at.tzinfo is not None


def test_create_for_unknown_user_is_rejected(service: PostService) -> None:
    with pytest.raises(InvalidToken):
        service.create(999, "T", "C")


def test_list_mine_only_returns_own_posts_newest_first(service: PostService, ann: User, bob: User) -> None:
    first = service.create(ann.id, "first", "c")
    service.create(bob.id, "bob", "c")
    second = service.create(ann.id, "second", "c")

    listed = service.list_mine(ann.id)

    assert [post.id for post in listed] == [second.id, first.id]
    assert all(post.author_id == ann.id for post in listed)
    timestamps = [post.created_at for post in listed]
    assert timestamps == sorted(timestamps, reverse=True)


def test_other_user_cannot_update_or_delete(service: PostService, ann: User, bob: User) -> None:
    post = service.create(ann.id, "T", "C")

    with pytest.raises(Forbidden):
        service.update(bob.id, post.id, "Mine now", "C")
    with pytest.raises(Forbidden):
        service.delete(bob.id, post.id)

    assert service.list_mine(ann.id) == [post]


def test_missing_post_is_not_found_for_any_caller(service: PostService, ann: User, bob: User) -> None:
    post = service.create(ann.id, "T", "C")

    for caller in (ann, bob):
        with pytest.raises(NotFound):
            service.update(caller.id, post.id + 100, "T", "C")
        with pytest.raises(NotFound):
            service.delete(caller.id, post.id + 100)
    with pytest.raises(NotFound):
        service.delete(ann.id, "not-a-number")


@pytest.mark.parametrize(
    "post_id",
    [MAX_POST_ID + 1, str(MAX_POST_ID + 1), "99999999999999999999", "0_1", "１", "-1", 0, "", " "],
)
def test_ids_that_cannot_name_a_row_are_not_found(service: PostService, ann: User, post_id) -> None:
    service.create(ann.id, "T", "C")

    with pytest.raises(NotFound):
        service.update(ann.id, post_id, "T", "C")
    with pytest.raises(NotFound):
        service.delete(ann.id, post_id)

    assert len(service.list_mine(ann.id)) == 1


def test_title_and_content_are_stored_as_submitted(service: PostService, ann: User) -> None:
    post = service.create(ann.id, "  Spaced title ", "\nBody\n")

    assert post.title == "  Spaced title "
    assert post.content == "\nBody\n"

    with pytest.raises(MissingField):
        service.create(ann.id, "   ", "Body")
    with pytest.raises(MissingField):
        service.update(ann.id, post.id, "Title", " \t ")


def test_update_replaces_fields_and_keeps_identity(service: PostService, ann: User) -> None:
    post = service.create(ann.id, "T", "C", "x, y")

    updated = service.update(ann.id, str(post.id), "New title", "New content", "")

    assert updated.title == "New title"
    assert updated.content == "New content"
    assert updated.tags == ()
    assert (updated.id, updated.author_id, updated.created_at) == (post.id, post.author_id, post.created_at)


def test_update_reports_not_found_when_post_vanishes(
    service: PostService, database: Database, ann: User
) -> None:
    post = service.create(ann.id, "T", "C")

    with mock.patch.object(database, "update_post", return_value=None):
        with pytest.raises(NotFound):
            service.update(ann.id, post.id, "T2", "C2")


def test_delete_removes_post(service: PostService, ann: User) -> None:
    post = service.create(ann.id, "T", "C")

    service.delete(ann.id, post.id)

    assert service.list_mine(ann.id) == []
    with pytest.raises(NotFound):
        service.delete(ann.id, post.id)
