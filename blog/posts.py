"""Ownership-checked CRUD operations on posts."""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple, Union

from .database import Database
from .errors import Forbidden, InvalidToken, MissingField, NotFound
from .models import Post

logger = logging.getLogger("blog.posts")

POST_FIELDS_REQUIRED = "Title and content are required."

PostId = Union[int, str]

# Largest value an SQLite INTEGER column can hold.
MAX_POST_ID = 2**63 - 1


def parse_tags(raw: Optional[str]) -> List[str]:
    """Split a comma separated tag string, trimming each tag.

    >>> parse_tags("a, b ,c")
    ['a', 'b', 'c']
    """
    if not raw:
        return []
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


def _coerce_post_id(post_id: PostId) -> int:
    """Map a path id to a row id; anything that cannot name a row is ``NotFound``."""
    if isinstance(post_id, int):
        value = post_id
    else:
        text = str(post_id).strip()
        if not (text.isascii() and text.isdigit()):
            raise NotFound()
        value = int(text)
    if not 0 < value <= MAX_POST_ID:
        raise NotFound()
    return value


def _validate(title: Optional[str], content: Optional[str]) -> Tuple[str, str]:
    # Whitespace-only counts as missing; accepted values are stored as given.
    if title is None or not title.strip() or content is None or not content.strip():
        raise MissingField(POST_FIELDS_REQUIRED)
    return title, content


class PostService:
    def __init__(self, database: Database) -> None:
        self._database = database

    def create(
        self,
        user_id: int,
        title: Optional[str],
        content: Optional[str],
        tags_raw: Optional[str] = None,
    ) -> Post:
        title, content = _validate(title, content)
        if self._database.get_user(user_id) is None:
            # Signed for an account this database does not know about.
            raise InvalidToken()
        post = self._database.create_post(user_id, title=title, content=content, tags=parse_tags(tags_raw))
        logger.info("User %s created post %s", user_id, post.id)
        return post

    def list_mine(self, user_id: int) -> List[Post]:
        return self._database.list_posts_for_user(user_id)

    def _owned_post(self, user_id: int, post_id: int) -> Post:
        post = self._database.get_post(post_id)
        if post is None:
            raise NotFound()
        if post.author_id != user_id:
            logger.warning("User %s denied access to post %s", user_id, post_id)
            raise Forbidden()
        return post

    def update(
        self,
        user_id: int,
        post_id: PostId,
        title: Optional[str],
        content: Optional[str],
        tags_raw: Optional[str] = None,
    ) -> Post:
        """Replace title, content and tags of a post owned by ``user_id``."""
        post_id = _coerce_post_id(post_id)
        title, content = _validate(title, content)
        self._owned_post(user_id, post_id)

        updated = self._database.update_post(
            user_id,
            post_id,
            title=title,
            content=content,
            tags=parse_tags(tags_raw),
        )
        if updated is None:
            # Removed between the ownership check and the write.
            raise NotFound()
        logger.info("User %s updated post %s", user_id, post_id)
        return updated

    def delete(self, user_id: int, post_id: PostId) -> None:
        post_id = _coerce_post_id(post_id)
        self._owned_post(user_id, post_id)
        if not self._database.delete_post(user_id, post_id):
            raise NotFound()
        logger.info("User %s deleted post %s", user_id, post_id)


__all__ = ["MAX_POST_ID", "POST_FIELDS_REQUIRED", "PostService", "parse_tags"]
