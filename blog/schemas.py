"""Request and response bodies shared by the API and its client."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .models import Post, User


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class PostRequest(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    tags: Optional[str] = Field(default=None, description="Comma separated list of tags")


class UserSummary(BaseModel):
    id: int
    name: str
    email: str


class AuthResponse(BaseModel):
    token: str
    user: UserSummary


class PostResponse(BaseModel):
    id: int
    title: str
    content: str
    tags: List[str]
    author_id: int
    created_at: datetime

    def to_post(self) -> Post:
        return Post(
            id=self.id,
            title=self.title,
            content=self.content,
            tags=tuple(self.tags),
            author_id=self.author_id,
            created_at=self.created_at,
        )


class MessageResponse(BaseModel):
    msg: str


def user_to_summary(user: User) -> UserSummary:
    return UserSummary(id=user.id, name=user.name, email=user.email)


def post_to_response(post: Post) -> PostResponse:
    return PostResponse(
        id=post.id,
        title=post.title,
        content=post.content,
        tags=list(post.tags),
        author_id=post.author_id,
        created_at=post.created_at,
    )


__all__ = [
    "AuthResponse",
    "LoginRequest",
    "MessageResponse",
    "PostRequest",
    "PostResponse",
    "RegisterRequest",
    "UserSummary",
    "post_to_response",
    "user_to_summary",
]
