"""Personal blog service: accounts, tokens and ownership-checked posts."""

from __future__ import annotations

from typing import Any

from .database import Database


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the API-only application."""

    from .service import create_app as _create_app

    return _create_app(*args, **kwargs)


def create_application(*args: Any, **kwargs: Any):
    """Factory function for the combined application serving the API under ``/api``."""

    from .application import create_application as _create_application

    return _create_application(*args, **kwargs)


__all__ = [
    "Database",
    "create_app",
    "create_application",
]
