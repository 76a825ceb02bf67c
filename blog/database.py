"""SQLite-backed persistence for users and posts."""
from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence

from passlib.context import CryptContext

from .config import DEFAULT_BCRYPT_ROUNDS
from .errors import DuplicateEmail
from .models import Post, User


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


def _serialize_datetime(value: datetime) -> str:
    # Fixed width so that lexical order in SQL matches chronological order.
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def build_password_context(rounds: int = DEFAULT_BCRYPT_ROUNDS) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


class Database:
    """Simple wrapper around SQLite for persisting users and posts."""

    def __init__(self, path: Path, *, bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS) -> None:
        _ensure_directory(path)
        self._path = path
        self._pwd_context = build_password_context(bcrypt_rounds)

    @property
    def path(self) -> Path:
        return self._path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def initialize(self) -> None:
        """Create the required tables if they do not already exist."""

        with self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS posts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    author_id INTEGER NOT NULL REFERENCES users(id),
                    title TEXT NOT NULL,
                    content TEXT NOT NULL,
                    tags TEXT NOT NULL DEFAULT '[]',
                    created_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_posts_author_created ON posts(author_id, created_at);
                """
            )

    # ------------------------------------------------------------------
    # Password hashing
    # ------------------------------------------------------------------
    def hash_password(self, password: str) -> str:
        return self._pwd_context.hash(password)

    def verify_password(self, password: str, hashed: str) -> bool:
        try:
            return self._pwd_context.verify(password, hashed)
        except ValueError:
            return False

    # ------------------------------------------------------------------
    # User management
    # ------------------------------------------------------------------
    def create_user(self, name: str, email: str, password: str) -> User:
        """Store a new user with a salted bcrypt hash of ``password``."""

        if not password:
            raise ValueError("Password must not be empty")

        normalized_email = normalize_email(email)
        password_hash = self.hash_password(password)

        with self._connect() as conn:
            try:
                cursor = conn.execute(
                    "INSERT INTO users (name, email, password_hash) VALUES (?, ?, ?)",
                    (name, normalized_email, password_hash),
                )
            except sqlite3.IntegrityError as exc:
                raise DuplicateEmail() from exc

            user_id = cursor.lastrowid

        return User(id=int(user_id), name=name, email=normalized_email)

    def get_user(self, user_id: int) -> Optional[User]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def authenticate_user(self, email: str, password: str) -> Optional[User]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE email = ?",
                (normalize_email(email),),
            ).fetchone()
        if row is None:
            return None
        stored_hash = row["password_hash"]
        if not stored_hash or not self.verify_password(password, stored_hash):
            return None
        return self._row_to_user(row)

    def list_users(self) -> List[User]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM users ORDER BY id").fetchall()
        return [self._row_to_user(row) for row in rows]

    # ------------------------------------------------------------------
    # Post management
    # ------------------------------------------------------------------
    def create_post(
        self,
        author_id: int,
        *,
        title: str,
        content: str,
        tags: Sequence[str],
        created_at: Optional[datetime] = None,
    ) -> Post:
        created = created_at or _current_timestamp()
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO posts (author_id, title, content, tags, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (author_id, title, content, json.dumps(list(tags)), _serialize_datetime(created)),
            )
            post_id = cursor.lastrowid

        post = self.get_post(int(post_id))
        if post is None:
            raise RuntimeError("Failed to load post after creation")
        return post

    def get_post(self, post_id: int) -> Optional[Post]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM posts WHERE id = ?", (post_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_post(row)

    def list_posts_for_user(self, author_id: int) -> List[Post]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM posts WHERE author_id = ? ORDER BY created_at DESC, id DESC",
                (author_id,),
            ).fetchall()
        return [self._row_to_post(row) for row in rows]

    def update_post(
        self,
        author_id: int,
        post_id: int,
        *,
        title: str,
        content: str,
        tags: Sequence[str],
    ) -> Optional[Post]:
        """Replace title, content and tags if ``post_id`` belongs to ``author_id``.

        Returns ``None`` when no row matched both the id and the author.
        """

        with self._connect() as conn:
            cursor = conn.execute(
                """
                UPDATE posts
                   SET title = ?, content = ?, tags = ?
                 WHERE id = ? AND author_id = ?
                """,
                (title, content, json.dumps(list(tags)), post_id, author_id),
            )
            if cursor.rowcount == 0:
                return None

        return self.get_post(post_id)

    def delete_post(self, author_id: int, post_id: int) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM posts WHERE id = ? AND author_id = ?",
                (post_id, author_id),
            )
            return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            id=int(row["id"]),
            name=str(row["name"]),
            email=str(row["email"]),
        )

    def _row_to_post(self, row: sqlite3.Row) -> Post:
        return Post(
            id=int(row["id"]),
            title=str(row["title"]),
            content=str(row["content"]),
            tags=tuple(str(tag) for tag in json.loads(row["tags"] or "[]")),
            author_id=int(row["author_id"]),
            created_at=_parse_datetime(str(row["created_at"])),
        )


__all__ = ["Database", "build_password_context", "normalize_email"]
