"""Application configuration read from the process environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from dotenv import load_dotenv


@dataclass(frozen=True)
class RouterConfig:
    """Settings for the HTTP router."""

    mode: str = ""


@dataclass(frozen=True)
class BackendConfig:
    """Settings for the HTTP listener."""

    port: str = ""


@dataclass(frozen=True)
class PostgresConfig:
    """Connection settings for the flag database."""

    user: str = ""
    name: str = ""
    password: str = ""
    host: str = ""
    port: str = ""
    ssl_mode: str = ""


@dataclass(frozen=True)
class Auth0Config:
    """Settings for token based authentication."""

    domain: str = ""
    audience: str = ""
    skip_auth: bool = False


@dataclass(frozen=True)
class Config:
    """The complete application configuration."""

    router: RouterConfig = field(default_factory=RouterConfig)
    backend: BackendConfig = field(default_factory=BackendConfig)
    database: PostgresConfig = field(default_factory=PostgresConfig)
    auth0: Auth0Config = field(default_factory=Auth0Config)


def load_config(environ: Mapping[str, str] | None = None) -> Config:
    """Build a Config from ``environ``.

    Without an explicit mapping, a ``.env`` file in the working directory is
    loaded first (existing variables win) and ``os.environ`` is used.
    Missing variables become empty strings.
    """
    if environ is None:
        load_dotenv(".env")
        environ = os.environ

    def get(key: str) -> str:
        return environ.get(key, "")

    return Config(
        router=RouterConfig(mode=get("GIN_MODE")),
        backend=BackendConfig(port=get("BACKEND_PORT")),
        database=PostgresConfig(
            user=get("POSTGRES_USER"),
            name=get("POSTGRES_NAME"),
            password=get("POSTGRES_PASSWORD"),
            host=get("POSTGRES_HOST"),
            port=get("POSTGRES_PORT"),
            ssl_mode=get("POSTGRES_SSL_MODE"),
        ),
        auth0=Auth0Config(
            domain=get("AUTH0_DOMAIN"),
            audience=get("AUTH0_AUDIENCE"),
            skip_auth=get("SKIP_AUTH") == "true",
        ),
    )