"""
Configuration containers for x_poster.

Credentials are handed in by the caller; only tunable client settings may be
read from the environment or a ``.env`` file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Mapping

from dotenv import dotenv_values

from x_poster.exceptions import ConfigurationError

ENV_VAR_MAP = {
    "api_base_url": "X_CLIENT_API_BASE_URL",
    "media_upload_url": "X_CLIENT_MEDIA_UPLOAD_URL",
    "request_token_url": "X_CLIENT_REQUEST_TOKEN_URL",
    "access_token_url": "X_CLIENT_ACCESS_TOKEN_URL",
    "authorize_url": "X_CLIENT_AUTHORIZE_URL",
    "timeout": "X_CLIENT_TIMEOUT",
    "max_retries": "X_CLIENT_MAX_RETRIES",
    "backoff_base": "X_CLIENT_BACKOFF_BASE",
    "header_ttl": "X_CLIENT_HEADER_TTL",
    "rate_limit_window": "X_CLIENT_RATE_LIMIT_WINDOW",
    "rate_limit_quota": "X_CLIENT_RATE_LIMIT_QUOTA",
    "thread_delay": "X_CLIENT_THREAD_DELAY",
    "max_thread_length": "X_CLIENT_MAX_THREAD_LENGTH",
}


def _require(value: str | None, label: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ConfigurationError(f"{label} is not set.")
    return cleaned


@dataclass(frozen=True, slots=True)
class AppCredentials:
    """Consumer key pair identifying the registered application."""

    consumer_key: str
    consumer_secret: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "consumer_key", _require(self.consumer_key, "X API key"))
        object.__setattr__(
            self, "consumer_secret", _require(self.consumer_secret, "X API key secret")
        )


@dataclass(frozen=True, slots=True)
class XCredentials:
    """Full OAuth 1.0a user-context credential set."""

    consumer_key: str
    consumer_secret: str
    access_token: str
    access_token_secret: str

    def __post_init__(self) -> None:
        for name, label in (
            ("consumer_key", "X API key"),
            ("consumer_secret", "X API key secret"),
            ("access_token", "X access token"),
            ("access_token_secret", "X access token secret"),
        ):
            object.__setattr__(self, name, _require(getattr(self, name), label))

    @property
    def app(self) -> AppCredentials:
        return AppCredentials(self.consumer_key, self.consumer_secret)

    def __repr__(self) -> str:
        return f"XCredentials(consumer_key={self.consumer_key!r}, access_token=<redacted>)"


@dataclass(frozen=True, slots=True)
class ClientSettings:
    """Endpoints, timeouts and pacing shared by every component of a client."""

    api_base_url: str = "https://api.x.com/2"
    media_upload_url: str = "https://upload.twitter.com/1.1/media/upload.json"
    request_token_url: str = "https://api.twitter.com/oauth/request_token"
    access_token_url: str = "https://api.twitter.com/oauth/access_token"
    authorize_url: str = "https://api.twitter.com/oauth/authorize"
    timeout: float = 10.0
    max_retries: int = 3
    backoff_base: float = 1.0
    header_ttl: float = 300.0
    rate_limit_window: float = 900.0
    rate_limit_quota: int = 300
    thread_delay: float = 0.5
    max_thread_length: int = 25

    def __post_init__(self) -> None:
        if self.max_retries < 1:
            raise ConfigurationError("max_retries must be at least 1.")
        if self.rate_limit_quota < 1:
            raise ConfigurationError("rate_limit_quota must be at least 1.")

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str | None] | None = None,
        *,
        dotenv_path: Path | None = None,
    ) -> "ClientSettings":
        """
        Build settings from ``X_CLIENT_*`` variables.

        Values from ``dotenv_path`` are read first; ``env`` (defaulting to
        ``os.environ``) overrides them. Unset variables keep their defaults.

        Raises:
            ConfigurationError: when a numeric variable cannot be parsed.
        """

        values: dict[str, str | None] = {}
        if dotenv_path is not None and dotenv_path.exists():
            values.update(dotenv_values(dotenv_path))
        values.update(env if env is not None else os.environ)

        defaults = cls()
        overrides: dict[str, object] = {}
        for field in fields(cls):
            raw = values.get(ENV_VAR_MAP[field.name])
            if raw is None or raw == "":
                continue
            current = getattr(defaults, field.name)
            try:
                overrides[field.name] = type(current)(raw)
            except ValueError as exc:
                raise ConfigurationError(
                    f"{ENV_VAR_MAP[field.name]}={raw!r} is not a valid {type(current).__name__}."
                ) from exc

        return replace(defaults, **overrides)
