"""Domain records for the blog service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Tuple


@dataclass(frozen=True)
class User:
    """Represents a registered account. The password hash never leaves the database layer."""

    id: int
    name: str
    email: str


@dataclass(frozen=True)
class Post:
    """A text post owned by exactly one user."""

    id: int
    title: str
    content: str
    tags: Tuple[str, ...]
    author_id: int
    created_at: datetime


__all__ = ["Post", "User"]
