"""HTTP API for registering, signing in and managing posts."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from .accounts import AccountService
from .config import Settings, load_settings
from .database import Database
from .errors import BlogError, MissingField
from .posts import PostService
from .schemas import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    PostRequest,
    PostResponse,
    RegisterRequest,
    post_to_response,
    user_to_summary,
)
from .security import TOKEN_HEADER, TokenAuth
from .tokens import TokenService

logger = logging.getLogger("blog.service")


def _initialise_database(database: Database) -> Database:
    database.initialize()
    return database


def register_error_handlers(app: FastAPI) -> None:
    """Render domain failures as ``{"msg": ...}`` and hide everything else."""

    @app.exception_handler(BlogError)
    async def handle_blog_error(request: Request, exc: BlogError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("Internal fault while handling %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content={"msg": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.debug("Rejected malformed request body for %s: %s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"msg": MissingField.default_message},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> PlainTextResponse:
        logger.exception("Unhandled error while handling %s %s", request.method, request.url.path)
        return PlainTextResponse("Server Error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_api_routes(
    app: FastAPI,
    accounts: AccountService,
    posts: PostService,
    *,
    current_user: TokenAuth,
) -> None:
    """Expose the JSON API endpoints on the provided FastAPI application."""

    @app.get("/health")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/auth/register", response_model=AuthResponse)
    def register(payload: RegisterRequest) -> AuthResponse:
        result = accounts.sign_up(payload.name, payload.email, payload.password)
        return AuthResponse(token=result.token, user=user_to_summary(result.user))

    @app.post("/auth/login", response_model=AuthResponse)
    def login(payload: LoginRequest) -> AuthResponse:
        result = accounts.login(payload.email, payload.password)
        return AuthResponse(token=result.token, user=user_to_summary(result.user))

    @app.post("/posts", response_model=PostResponse)
    def create_post(payload: PostRequest, user_id: int = Depends(current_user)) -> PostResponse:
        post = posts.create(user_id, payload.title, payload.content, payload.tags)
        return post_to_response(post)

    @app.get("/posts", response_model=List[PostResponse])
    def list_posts(user_id: int = Depends(current_user)) -> List[PostResponse]:
        return [post_to_response(post) for post in posts.list_mine(user_id)]

    @app.put("/posts/{post_id}", response_model=PostResponse)
    def update_post(
        post_id: str,
        payload: PostRequest,
        user_id: int = Depends(current_user),
    ) -> PostResponse:
        post = posts.update(user_id, post_id, payload.title, payload.content, payload.tags)
        return post_to_response(post)

    @app.delete("/posts/{post_id}", response_model=MessageResponse)
    def delete_post(post_id: str, user_id: int = Depends(current_user)) -> MessageResponse:
        posts.delete(user_id, post_id)
        return MessageResponse(msg="Post removed")


def create_app(
    *,
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    tokens: Optional[TokenService] = None,
) -> FastAPI:
    """Instantiate the FastAPI application for the blog API."""

    if settings is None:
        settings = load_settings()

    db = database or Database(settings.database_path, bcrypt_rounds=settings.bcrypt_rounds)
    _initialise_database(db)

    token_service = tokens or TokenService(
        settings.jwt_secret,
        ttl=timedelta(seconds=settings.token_ttl_seconds),
    )

    app = FastAPI(
        title="Blog API",
        version="1.0.0",
        description="Personal blog posts behind token authentication.",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", TOKEN_HEADER],
    )

    app.state.settings = settings
    app.state.database = db
    app.state.tokens = token_service

    register_error_handlers(app)
    register_api_routes(
        app,
        AccountService(db, token_service),
        PostService(db),
        current_user=TokenAuth(token_service),
    )

    return app


__all__ = ["create_app", "register_api_routes", "register_error_handlers"]
