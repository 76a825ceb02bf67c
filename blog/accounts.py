"""Registration and credential verification."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .database import Database
from .errors import InvalidCredentials, MissingField
from .models import User
from .tokens import TokenService

logger = logging.getLogger("blog.accounts")


@dataclass(frozen=True)
class AuthResult:
    token: str
    user: User


def _required(value: Optional[str]) -> str:
    if value is None or not value.strip():
        raise MissingField()
    return value


class AccountService:
    """Credential store operations plus token issuance for successful sign-ins.

    ``tokens`` may be omitted by tools that only register or verify users.
    """

    def __init__(self, database: Database, tokens: Optional[TokenService] = None) -> None:
        self._database = database
        self._tokens = tokens

    def register(self, name: Optional[str], email: Optional[str], password: Optional[str]) -> User:
        """Create a user, failing on missing fields or a taken email."""
        name = _required(name).strip()
        email = _required(email)
        password = _required(password)
        user = self._database.create_user(name, email, password)
        logger.info("Registered user %s", user.id)
        return user

    def verify(self, email: Optional[str], password: Optional[str]) -> User:
        """Return the user owning ``email`` if ``password`` matches.

        Unknown emails and wrong passwords fail identically.
        """
        email = _required(email)
        password = _required(password)
        user = self._database.authenticate_user(email, password)
        if user is None:
            raise InvalidCredentials()
        return user

    def _issue(self, user: User) -> AuthResult:
        if self._tokens is None:
            raise RuntimeError("AccountService was created without a token service")
        return AuthResult(token=self._tokens.issue(user.id), user=user)

    def sign_up(self, name: Optional[str], email: Optional[str], password: Optional[str]) -> AuthResult:
        return self._issue(self.register(name, email, password))

    def login(self, email: Optional[str], password: Optional[str]) -> AuthResult:
        user = self.verify(email, password)
        logger.info("User %s logged in", user.id)
        return self._issue(user)


__all__ = ["AccountService", "AuthResult"]
