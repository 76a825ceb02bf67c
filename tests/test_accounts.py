from __future__ import annotations

from pathlib import Path

import pytest

from blog.accounts import AccountService
from blog.database import Database
from blog.errors import DuplicateEmail, InvalidCredentials, MissingField
from blog.tokens import TokenService


@pytest.fixture()
def accounts(tmp_path: Path) -> AccountService:
    database = Database(tmp_path / "blog.sqlite3", bcrypt_rounds=4)
    database.initialize()
    return AccountService(database, TokenService("accounts-tests-secret"))


@pytest.mark.parametrize(
    ("name", "email", "password"),
    [
        ("", "ann@x.com", "pw123"),
        ("Ann", None, "pw123"),
        ("Ann", "ann@x.com", ""),
        ("   ", "ann@x.com", "pw123"),
    ],
)
def test_register_rejects_missing_fields(accounts: AccountService, name, email, password) -> None:
    with pytest.raises(MissingField):
        accounts.register(name, email, password)


def test_second_registration_with_same_email_fails(accounts: AccountService) -> None:
    first = accounts.register("Ann", "ann@x.com", "pw123")

    with pytest.raises(DuplicateEmail):
        accounts.register("Ann Two", "ann@x.com", "other")

    assert accounts.verify("ann@x.com", "pw123") == first


def test_verify_failures_are_identical(accounts: AccountService) -> None:
    accounts.register("Ann", "ann@x.com", "pw123")

    with pytest.raises(InvalidCredentials) as wrong_password:
        accounts.verify("ann@x.com", "wrong")
    with pytest.raises(InvalidCredentials) as unknown_email:
        accounts.verify("nobody@x.com", "anything")

    assert type(wrong_password.value) is type(unknown_email.value)
    assert str(wrong_password.value) == str(unknown_email.value)


def test_login_issues_token_for_the_user(accounts: AccountService) -> None:
    user = accounts.register("Ann", "ann@x.com", "pw123")
    tokens = TokenService("accounts-tests-secret")

    result = accounts.login("ann@x.com", "pw123")

    assert result.user == user
    assert tokens.verify(result.token) == user.id


def test_registration_works_without_a_token_service(tmp_path: Path) -> None:
    database = Database(tmp_path / "blog.sqlite3", bcrypt_rounds=4)
    database.initialize()
    accounts = AccountService(database)

    user = accounts.register("Ann", "ann@x.com", "pw123")

    assert accounts.verify("ann@x.com", "pw123") == user
    with pytest.raises(RuntimeError):
        accounts.login("ann@x.com", "pw123")
