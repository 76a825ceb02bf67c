"""Token authentication for the blog API."""
from __future__ import annotations

from fastapi import Request
from fastapi.security import APIKeyHeader

from .errors import Unauthenticated
from .tokens import TokenService

TOKEN_HEADER = "x-auth-token"


class TokenAuth:
    """Resolve the caller's user id from the ``x-auth-token`` header.

    Every request is authenticated on its own; nothing is stored server-side.
    """

    def __init__(self, tokens: TokenService) -> None:
        self._tokens = tokens
        self._header = APIKeyHeader(name=TOKEN_HEADER, auto_error=False)

    async def __call__(self, request: Request) -> int:
        provided = await self._header(request)
        if not provided or not provided.strip():
            raise Unauthenticated()

        user_id = self._tokens.verify(provided.strip())
        request.state.user_id = user_id
        return user_id


__all__ = ["TOKEN_HEADER", "TokenAuth"]
