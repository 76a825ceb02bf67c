"""Signed, time-limited identity tokens."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

import jwt

from .config import DEFAULT_TOKEN_TTL_SECONDS
from .errors import ExpiredToken, InvalidToken

logger = logging.getLogger("blog.tokens")

ALGORITHM = "HS256"


@dataclass(frozen=True)
class TokenClaims:
    """Claims embedded in every issued token."""

    user_id: int
    issued_at: datetime
    expires_at: datetime

    def to_payload(self) -> Dict[str, Any]:
        return {
            "sub": str(self.user_id),
            "iat": int(self.issued_at.timestamp()),
            "exp": int(self.expires_at.timestamp()),
        }

    @staticmethod
    def from_payload(payload: Dict[str, Any]) -> "TokenClaims":
        try:
            user_id = int(payload["sub"])
            issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidToken() from exc
        return TokenClaims(user_id=user_id, issued_at=issued_at, expires_at=expires_at)


class TokenService:
    """Issue and verify HS256 JWTs carrying a user id."""

    def __init__(
        self,
        secret: str,
        *,
        ttl: timedelta = timedelta(seconds=DEFAULT_TOKEN_TTL_SECONDS),
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._ttl = ttl
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self, user_id: int) -> str:
        now = self._clock()
        claims = TokenClaims(user_id=user_id, issued_at=now, expires_at=now + self._ttl)
        return jwt.encode(claims.to_payload(), self._secret, algorithm=ALGORITHM)

    def decode(self, token: str) -> TokenClaims:
        """Check the signature and decode the claims.

        Expiry is judged against this service's clock, not the library's.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["sub", "iat", "exp"], "verify_exp": False, "verify_iat": False},
            )
        except jwt.InvalidTokenError as exc:
            logger.info("Rejected invalid token: %s", exc)
            raise InvalidToken() from exc
        claims = TokenClaims.from_payload(payload)
        if self._clock() >= claims.expires_at:
            logger.info("Rejected expired token for user %s", claims.user_id)
            raise ExpiredToken()
        return claims

    def verify(self, token: str) -> int:
        """Return the user id embedded in ``token``."""
        return self.decode(token).user_id


__all__ = ["ALGORITHM", "TokenClaims", "TokenService"]
