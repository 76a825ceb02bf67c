from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from blog.database import Database
from blog.errors import DuplicateEmail


@pytest.fixture()
def database(tmp_path: Path) -> Database:
    db_path = tmp_path / "blog.sqlite3"
    db = Database(db_path, bcrypt_rounds=4)
    db.initialize()
    return db


def test_create_and_authenticate_user(database: Database) -> None:
    user = database.create_user("Ann", "Ann@X.com ", "pw123")

    assert user.email == "ann@x.com"
    authenticated = database.authenticate_user("ann@x.com", "pw123")
    assert authenticated == user

    assert database.authenticate_user("ann@x.com", "wrong") is None
    assert database.authenticate_user("nobody@x.com", "pw123") is None


def test_duplicate_email_leaves_first_user_untouched(database: Database) -> None:
    first = database.create_user("Ann", "ann@x.com", "pw123")

    with pytest.raises(DuplicateEmail):
        database.create_user("Impostor", "ANN@x.com", "other-password")

    assert database.list_users() == [first]
    assert database.authenticate_user("ann@x.com", "pw123") == first
    assert database.authenticate_user("ann@x.com", "other-password") is None


def test_password_is_stored_hashed(database: Database) -> None:
    database.create_user("Ann", "ann@x.com", "pw123")

    with database._connect() as conn:
        stored = conn.execute("SELECT password_hash FROM users").fetchone()["password_hash"]

    assert stored != "pw123"
    assert stored.startswith("$2b$")


def test_initialize_is_idempotent(database: Database) -> None:
    user = database.create_user("Ann", "ann@x.com", "pw123")
    database.initialize()
    assert database.get_user(user.id) == user


def test_posts_listed_newest_first_per_author(database: Database) -> None:
    ann = database.create_user("Ann", "ann@x.com", "pw123")
    bob = database.create_user("Bob", "bob@x.com", "pw456")
    base = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    newer = database.create_post(ann.id, title="Newer", content="c", tags=["x"], created_at=base + timedelta(days=1))
    older = database.create_post(ann.id, title="Older", content="c", tags=[], created_at=base)
    database.create_post(bob.id, title="Bob's", content="c", tags=[], created_at=base + timedelta(days=2))

    listed = database.list_posts_for_user(ann.id)
    assert [post.id for post in listed] == [newer.id, older.id]
    assert listed[0].tags == ("x",)
    assert listed[0].created_at == base + timedelta(days=1)


def test_update_and_delete_match_on_author(database: Database) -> None:
    ann = database.create_user("Ann", "ann@x.com", "pw123")
    bob = database.create_user("Bob", "bob@x.com", "pw456")
    post = database.create_post(ann.id, title="T", content="C", tags=["a"])

    assert database.update_post(bob.id, post.id, title="Hijacked", content="C", tags=[]) is None
    assert database.get_post(post.id) == post

    updated = database.update_post(ann.id, post.id, title="T2", content="C2", tags=["b", "c"])
    assert updated is not None
    assert (updated.title, updated.content, updated.tags) == ("T2", "C2", ("b", "c"))
    assert (updated.id, updated.author_id, updated.created_at) == (post.id, post.author_id, post.created_at)

    assert database.delete_post(bob.id, post.id) is False
    assert database.delete_post(ann.id, post.id) is True
    assert database.get_post(post.id) is None
    assert database.delete_post(ann.id, post.id) is False
