"""Failures surfaced by the blog service and their HTTP status codes."""
from __future__ import annotations

from typing import Optional


class BlogError(Exception):
    """Base class for failures returned directly to the caller."""

    status_code = 500
    default_message = "Server Error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self.args[0])


class MissingField(BlogError, ValueError):
    status_code = 400
    default_message = "Please enter all fields"


class DuplicateEmail(BlogError, ValueError):
    status_code = 400
    default_message = "User already exists"


class InvalidCredentials(BlogError, PermissionError):
    """Unknown email and wrong password both map here."""

    status_code = 400
    default_message = "Invalid credentials"


class Unauthenticated(BlogError, PermissionError):
    status_code = 401
    default_message = "No token, authorization denied"


class InvalidToken(BlogError, PermissionError):
    status_code = 400
    default_message = "Token is not valid"


class ExpiredToken(InvalidToken):
    """Raised for well-formed tokens past their expiry.

    Callers see the same response as any other :class:`InvalidToken`.
    """


class NotFound(BlogError, LookupError):
    status_code = 404
    default_message = "Post not found"


class Forbidden(BlogError, PermissionError):
    status_code = 401
    default_message = "Not authorized"


class InternalFault(BlogError, RuntimeError):
    status_code = 500
    default_message = "Server Error"


__all__ = [
    "BlogError",
    "DuplicateEmail",
    "ExpiredToken",
    "Forbidden",
    "InternalFault",
    "InvalidCredentials",
    "InvalidToken",
    "MissingField",
    "NotFound",
    "Unauthenticated",
]
