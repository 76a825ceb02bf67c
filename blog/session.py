"""Client-side session state: the stored token and which screen is shown."""

from __future__ import annotations

import enum
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Protocol, Union

from .client import APIError, BlogClient
from .models import Post

logger = logging.getLogger("blog.session")

LOGIN_FAILED = "Login failed. Please try again."
REGISTRATION_FAILED = "Registration failed. Please try again."
FORM_FAILED = "An error occurred. Please try again."
REGISTRATION_SUCCEEDED = "Registration successful! Please login."
DELETE_PROMPT = "Are you sure you want to delete this post?"


class View(enum.Enum):
    LOGIN = "login"
    REGISTER = "register"
    DASHBOARD = "dashboard"


@dataclass(frozen=True)
class PostDraft:
    """Form contents; ``post_id`` is set when editing an existing post."""

    title: str = ""
    content: str = ""
    tags: str = ""
    post_id: Optional[int] = None

    @property
    def is_edit(self) -> bool:
        return self.post_id is not None

    @classmethod
    def from_post(cls, post: Post) -> "PostDraft":
        return cls(title=post.title, content=post.content, tags=", ".join(post.tags), post_id=post.id)


@dataclass(frozen=True)
class ListMode:
    pass


@dataclass(frozen=True)
class FormMode:
    draft: PostDraft = field(default_factory=PostDraft)
    error: Optional[str] = None


DashboardMode = Union[ListMode, FormMode]


class InvalidTransition(RuntimeError):
    """Raised when an action is not available from the current view."""


class TokenStore(Protocol):
    def load(self) -> Optional[str]: ...

    def save(self, token: str) -> None: ...

    def clear(self) -> None: ...


class MemoryTokenStore:
    def __init__(self, token: Optional[str] = None) -> None:
        self._token = token

    def load(self) -> Optional[str]:
        return self._token

    def save(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileTokenStore:
    """Persist the token as a small JSON document."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[str]:
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except ValueError:
            logger.warning("Ignoring unreadable token file %s", self._path)
            return None
        token = raw.get("token") if isinstance(raw, dict) else None
        return token if isinstance(token, str) and token else None

    def save(self, token: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            # The mode above only applies to new files.
            os.fchmod(handle.fileno(), 0o600)
            handle.write(json.dumps({"token": token}))

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)


class SessionState:
    """State machine behind the login, register and dashboard screens."""

    def __init__(self, client: BlogClient, store: TokenStore) -> None:
        self._client = client
        self._store = store
        self.view: View = View.LOGIN
        self.mode: DashboardMode = ListMode()
        self.token: Optional[str] = None
        self.posts: List[Post] = []
        self.error: Optional[str] = None
        self.notice: Optional[str] = None

    # ------------------------------------------------------------------
    # Top-level views
    # ------------------------------------------------------------------
    def start(self) -> View:
        self.token = self._store.load()
        if self.token:
            self._enter_dashboard()
        else:
            self.view = View.LOGIN
        return self.view

    def show_register(self) -> None:
        self._require(View.LOGIN, View.REGISTER)
        self.view = View.REGISTER
        self.error = self.notice = None

    def show_login(self) -> None:
        self._require(View.LOGIN, View.REGISTER)
        self.view = View.LOGIN
        self.error = None

    def login(self, email: str, password: str) -> bool:
        self._require(View.LOGIN)
        self.error = None
        try:
            result = self._client.login(email, password)
        except APIError as exc:
            self.error = exc.message or LOGIN_FAILED
            return False

        self._store.save(result.token)
        self.token = result.token
        self.notice = None
        self._enter_dashboard()
        return True

    def register(self, name: str, email: str, password: str) -> bool:
        """Create an account, then send the user back to the login screen."""
        self._require(View.REGISTER)
        self.error = self.notice = None
        try:
            self._client.register(name, email, password)
        except APIError as exc:
            self.error = exc.message or REGISTRATION_FAILED
            return False

        self.notice = REGISTRATION_SUCCEEDED
        self.view = View.LOGIN
        return True

    def logout(self) -> None:
        self._store.clear()
        self.token = None
        self.posts = []
        self.mode = ListMode()
        self.error = self.notice = None
        self.view = View.LOGIN

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------
    def refresh(self) -> None:
        self._require(View.DASHBOARD)
        try:
            self.posts = self._client.list_posts(self._current_token())
        except APIError as exc:
            logger.error("Failed to fetch posts: %s", exc)

    def open_create(self) -> None:
        self._require(View.DASHBOARD)
        self.mode = FormMode(PostDraft())

    def open_edit(self, post: Post) -> None:
        self._require(View.DASHBOARD)
        self.mode = FormMode(PostDraft.from_post(post))

    def close_form(self) -> None:
        self._require(View.DASHBOARD)
        self.mode = ListMode()

    def submit(self, title: str, content: str, tags: str = "") -> bool:
        self._require(View.DASHBOARD)
        if not isinstance(self.mode, FormMode):
            raise InvalidTransition("No post form is open")

        draft = PostDraft(title=title, content=content, tags=tags, post_id=self.mode.draft.post_id)
        token = self._current_token()
        try:
            if draft.post_id is not None:
                self._client.update_post(token, draft.post_id, title=title, content=content, tags=tags)
            else:
                self._client.create_post(token, title=title, content=content, tags=tags)
        except APIError as exc:
            self.mode = FormMode(draft, error=exc.message or FORM_FAILED)
            return False

        self.mode = ListMode()
        self.refresh()
        return True

    def delete(self, post_id: int, confirm: Callable[[str], bool]) -> bool:
        """Delete a post once ``confirm`` approves; nothing is sent otherwise."""
        self._require(View.DASHBOARD)
        if not confirm(DELETE_PROMPT):
            return False
        try:
            self._client.delete_post(self._current_token(), post_id)
        except APIError as exc:
            logger.error("Failed to delete post %s: %s", post_id, exc)
            return False
        self.refresh()
        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _enter_dashboard(self) -> None:
        self.view = View.DASHBOARD
        self.mode = ListMode()
        self.error = None
        self.refresh()

    def _current_token(self) -> str:
        if not self.token:
            raise InvalidTransition("Not signed in")
        return self.token

    def _require(self, *views: View) -> None:
        if self.view not in views:
            allowed = ", ".join(view.value for view in views)
            raise InvalidTransition(f"Action requires the {allowed} view, current view is {self.view.value}")


__all__ = [
    "DashboardMode",
    "FileTokenStore",
    "FormMode",
    "InvalidTransition",
    "ListMode",
    "MemoryTokenStore",
    "PostDraft",
    "SessionState",
    "TokenStore",
    "View",
]
