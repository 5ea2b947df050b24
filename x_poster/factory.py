"""
Factory for creating X client instances with proper initialization.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Sequence

import requests

from x_poster.auth.flow import OAuthFlow
from x_poster.auth.header_cache import HeaderCache
from x_poster.clients.request_executor import RequestExecutor
from x_poster.config import AppCredentials, ClientSettings, XCredentials
from x_poster.models import MessageInput, PostResult, User
from x_poster.rate_limit import RateLimiter
from x_poster.services.media_service import MediaService
from x_poster.services.post_service import PostService
from x_poster.services.user_service import UserService


@dataclass(slots=True)
class XClient:
    """Bundle of services sharing one executor, rate limiter and header cache."""

    executor: RequestExecutor
    posts: PostService
    media: MediaService
    users: UserService

    def post(self, messages: MessageInput | Sequence[MessageInput]) -> PostResult:
        return self.posts.send(messages)

    def me(self) -> User:
        return self.users.me()

    def close(self) -> None:
        """Release the HTTP session; a caller-supplied session is left open."""
        self.executor.close()

    def __enter__(self) -> XClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class XClientFactory:
    """Factory for creating properly initialized X API clients."""

    @staticmethod
    def create_from_credentials(
        credentials: XCredentials,
        settings: ClientSettings | None = None,
        *,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> XClient:
        """
        Create an XClient for one credential set.

        Every call builds its own rate limiter and header cache, so clients
        for different accounts never share state.

        Args:
            credentials: Validated OAuth 1.0a user-context credentials
            settings: Endpoint and pacing overrides
            session: Optional requests session (for connection reuse or tests)
            sleep: Backoff and pacing sleep function

        Returns:
            Fully initialized XClient
        """
        settings = settings or ClientSettings()
        executor = RequestExecutor(
            credentials,
            settings=settings,
            session=session,
            rate_limiter=RateLimiter(settings.rate_limit_window, settings.rate_limit_quota),
            header_cache=HeaderCache(settings.header_ttl),
            sleep=sleep,
        )
        media = MediaService(executor)
        posts = PostService(
            executor,
            media=media,
            max_thread_length=settings.max_thread_length,
            thread_delay=settings.thread_delay,
            sleep=sleep,
        )
        return XClient(executor=executor, posts=posts, media=media, users=UserService(executor))

    @staticmethod
    def create_auth_flow(
        credentials: AppCredentials | XCredentials,
        callback_url: str,
        settings: ClientSettings | None = None,
        *,
        session: requests.Session | None = None,
        strict_token_check: bool = True,
    ) -> OAuthFlow:
        """
        Create a handshake for the consumer key pair in ``credentials``.

        Keep the returned flow between the authorization redirect and the
        callback: the request token secret lives on it.
        """
        app = credentials.app if isinstance(credentials, XCredentials) else credentials
        return OAuthFlow(
            app,
            callback_url,
            settings=settings,
            session=session,
            strict_token_check=strict_token_check,
        )
