"""Configuration management for the blog service."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

import yaml

DEFAULT_PORT = 5000
DEFAULT_TOKEN_TTL_SECONDS = 3600
DEFAULT_BCRYPT_ROUNDS = 10
DEFAULT_CORS_ORIGINS: Tuple[str, ...] = ("http://localhost:3000",)


def resolve_database_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the application database."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "blog.sqlite3").resolve(strict=False)


def _split_origins(value: object) -> Tuple[str, ...]:
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [str(item) for item in value]
    else:
        raise ValueError("cors_origins must be a comma separated string or a list")
    return tuple(item.strip().rstrip("/") for item in items if item.strip())


def _database_path(data: Mapping[str, object], base_path: Path | None) -> Path:
    raw_db_path = data.get("database_path")
    if not raw_db_path:
        return resolve_database_path(None)
    candidate = Path(str(raw_db_path)).expanduser()
    if not candidate.is_absolute() and base_path is not None:
        candidate = base_path / candidate
    return candidate.resolve(strict=False)


@dataclass(frozen=True)
class DatabaseSettings:
    """The subset of settings needed to open the store, without a signing secret."""

    database_path: Path
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS

    @staticmethod
    def from_dict(data: Mapping[str, object], base_path: Path | None = None) -> "DatabaseSettings":
        rounds = int(data.get("bcrypt_rounds", DEFAULT_BCRYPT_ROUNDS))
        if not 4 <= rounds <= 31:
            raise ValueError(f"bcrypt_rounds must be between 4 and 31, got {rounds}")
        return DatabaseSettings(database_path=_database_path(data, base_path), bcrypt_rounds=rounds)


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, loaded once at startup."""

    database_path: Path
    jwt_secret: str
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    cors_origins: Tuple[str, ...] = DEFAULT_CORS_ORIGINS
    token_ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS

    @staticmethod
    def from_dict(data: Mapping[str, object], base_path: Path | None = None) -> "Settings":
        """Create :class:`Settings` from raw dictionary data."""
        secret = data.get("jwt_secret")
        if not secret or not str(secret).strip():
            raise ValueError("A JWT signing secret must be configured (jwt_secret / BLOG_JWT_SECRET)")

        storage = DatabaseSettings.from_dict(data, base_path)

        port = int(data.get("port", DEFAULT_PORT))
        if not 1 <= port <= 65535:
            raise ValueError(f"Port must be between 1 and 65535, got {port}")

        ttl = int(data.get("token_ttl_seconds", DEFAULT_TOKEN_TTL_SECONDS))
        if ttl <= 0:
            raise ValueError("token_ttl_seconds must be positive")

        origins = data.get("cors_origins")
        return Settings(
            database_path=storage.database_path,
            jwt_secret=str(secret),
            host=str(data.get("host", "0.0.0.0")),
            port=port,
            cors_origins=_split_origins(origins) if origins is not None else DEFAULT_CORS_ORIGINS,
            token_ttl_seconds=ttl,
            bcrypt_rounds=storage.bcrypt_rounds,
        )


_ENV_KEYS: Dict[str, str] = {
    "BLOG_DB_PATH": "database_path",
    "BLOG_JWT_SECRET": "jwt_secret",
    "BLOG_HOST": "host",
    "BLOG_PORT": "port",
    "BLOG_CORS_ORIGINS": "cors_origins",
    "BLOG_TOKEN_TTL": "token_ttl_seconds",
    "BLOG_BCRYPT_ROUNDS": "bcrypt_rounds",
}


def load_config_file(config_path: Path) -> Dict[str, object]:
    """Load raw settings from a YAML file."""
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Configuration file {config_path} must contain a mapping")
    return raw


def _raw_settings(env: Optional[Mapping[str, str]]) -> Tuple[Dict[str, object], Path | None]:
    if env is None:
        env = os.environ

    data: Dict[str, object] = {}
    base_path: Path | None = None
    config_file = env.get("BLOG_CONFIG")
    if config_file:
        config_path = Path(config_file).expanduser().resolve(strict=False)
        data.update(load_config_file(config_path))
        base_path = config_path.parent

    for env_key, field in _ENV_KEYS.items():
        value = env.get(env_key)
        if value is not None and value.strip():
            data[field] = value.strip()
    return data, base_path


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build settings from the optional ``BLOG_CONFIG`` file and the environment.

    Environment variables win over values from the file.
    """
    data, base_path = _raw_settings(env)
    return Settings.from_dict(data, base_path=base_path)


def load_database_settings(env: Optional[Mapping[str, str]] = None) -> DatabaseSettings:
    """Same sources as :func:`load_settings`, for tools that only touch the database."""
    data, base_path = _raw_settings(env)
    return DatabaseSettings.from_dict(data, base_path=base_path)


__all__ = [
    "DatabaseSettings",
    "Settings",
    "load_config_file",
    "load_database_settings",
    "load_settings",
    "resolve_database_path",
]
