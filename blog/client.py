"""HTTP client for the blog API."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from .models import Post
from .schemas import AuthResponse, PostResponse
from .security import TOKEN_HEADER

DEFAULT_API_URL = "http://localhost:5000/api"


class APIError(RuntimeError):
    """Raised for any non-success response or transport failure.

    ``message`` holds the server supplied ``msg`` when there was one.
    """

    def __init__(self, status_code: Optional[int], message: Optional[str] = None) -> None:
        super().__init__(message or f"Request failed with status {status_code}")
        self.status_code = status_code
        self.message = message


def _error_message(response: httpx.Response) -> Optional[str]:
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict):
        message = payload.get("msg")
        if isinstance(message, str) and message:
            return message
    return None


class BlogClient:
    """Thin wrapper over :class:`httpx.Client` speaking the blog API.

    Pass ``http`` to reuse an existing client, e.g. FastAPI's ``TestClient``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        *,
        http: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._http = http or httpx.Client(timeout=timeout)
        self._owns_http = http is None

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "BlogClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        token: Optional[str] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        headers = {TOKEN_HEADER: token} if token else None
        try:
            response = self._http.request(method, f"{self.base_url}{path}", json=json, headers=headers)
        except httpx.HTTPError as exc:
            raise APIError(None, None) from exc

        if response.status_code >= 400:
            raise APIError(response.status_code, _error_message(response))
        return response.json()

    def register(self, name: str, email: str, password: str) -> AuthResponse:
        payload = self._request(
            "POST",
            "/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        return AuthResponse.model_validate(payload)

    def login(self, email: str, password: str) -> AuthResponse:
        payload = self._request("POST", "/auth/login", json={"email": email, "password": password})
        return AuthResponse.model_validate(payload)

    def list_posts(self, token: str) -> List[Post]:
        payload = self._request("GET", "/posts", token=token)
        return [PostResponse.model_validate(item).to_post() for item in payload]

    def create_post(self, token: str, *, title: str, content: str, tags: str = "") -> Post:
        payload = self._request(
            "POST",
            "/posts",
            token=token,
            json={"title": title, "content": content, "tags": tags},
        )
        return PostResponse.model_validate(payload).to_post()

    def update_post(self, token: str, post_id: int, *, title: str, content: str, tags: str = "") -> Post:
        payload = self._request(
            "PUT",
            f"/posts/{post_id}",
            token=token,
            json={"title": title, "content": content, "tags": tags},
        )
        return PostResponse.model_validate(payload).to_post()

    def delete_post(self, token: str, post_id: int) -> str:
        payload = self._request("DELETE", f"/posts/{post_id}", token=token)
        return str(payload.get("msg", ""))


__all__ = ["APIError", "BlogClient", "DEFAULT_API_URL"]
