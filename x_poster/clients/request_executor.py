"""
Authenticated request pipeline: admission, signing, transport, decoding and retry.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Mapping

import requests

from x_poster.auth.header_cache import HeaderCache
from x_poster.auth.signature import OAuth1Signer
from x_poster.config import ClientSettings, XCredentials
from x_poster.exceptions import (
    ApiResponseError,
    ConfigurationError,
    DecodeError,
    RequestFailed,
    TransportError,
    XClientError,
)
from x_poster.models import MultipartPayload
from x_poster.rate_limit import RateLimiter, RetryConfig, SleepStrategy

logger = logging.getLogger(__name__)

Payload = Mapping[str, Any] | MultipartPayload | None


@dataclass(frozen=True, slots=True)
class AttemptOutcome:
    """Result of one HTTP attempt: either a decoded body or the error it raised."""

    result: dict[str, Any] | None = None
    error: XClientError | None = None


class RequestExecutor:
    """Signs and sends one API call, retrying transient failures."""

    def __init__(
        self,
        credentials: XCredentials,
        *,
        settings: ClientSettings | None = None,
        session: requests.Session | None = None,
        rate_limiter: RateLimiter | None = None,
        header_cache: HeaderCache | None = None,
        signer: OAuth1Signer | None = None,
        sleep: SleepStrategy = time.sleep,
    ) -> None:
        self.settings = settings or ClientSettings()
        self._credentials = credentials
        self._owns_session = session is None
        self._session = session or requests.Session()
        self.rate_limiter = rate_limiter or RateLimiter(
            self.settings.rate_limit_window, self.settings.rate_limit_quota
        )
        self.header_cache = header_cache or HeaderCache(self.settings.header_ttl)
        self._signer = signer or OAuth1Signer(
            credentials.consumer_key, credentials.consumer_secret
        )
        self.retry_config = RetryConfig(
            max_attempts=self.settings.max_retries, base_delay=self.settings.backoff_base
        )
        self.sleep = sleep

    def execute(
        self,
        endpoint: str,
        payload: Payload = None,
        method: str = "POST",
        *,
        is_media_upload: bool = False,
        max_retries: int | None = None,
    ) -> dict[str, Any]:
        """
        Perform one authenticated API call.

        Args:
            endpoint: Path appended to the API base URL (ignored for uploads)
            payload: JSON mapping, or a MultipartPayload for media uploads
            method: HTTP method
            is_media_upload: Target the media upload endpoint
            max_retries: Total attempts; defaults to ClientSettings.max_retries

        Returns:
            Decoded JSON object

        Raises:
            RateLimitExceeded: If the local request window is exhausted
            RequestFailed: If every attempt failed; wraps the last error
        """
        attempts = max_retries if max_retries is not None else self.retry_config.max_attempts
        if attempts < 1:
            raise ConfigurationError("max_retries must be at least 1.")
        self.rate_limiter.admit()

        method = method.upper()
        attempt = 0
        while True:
            outcome = self._attempt(endpoint, payload, method, is_media_upload, fresh=attempt > 0)
            if outcome.error is None:
                return outcome.result or {}

            last_error = outcome.error
            attempt += 1
            if attempt >= attempts:
                break

            delay = self.retry_config.calculate_delay(attempt - 1)
            logger.warning(
                "%s %s failed on attempt %d/%d (%s); retrying in %.1fs",
                method,
                endpoint if not is_media_upload else "media upload",
                attempt,
                attempts,
                last_error,
                delay,
            )
            self.sleep(delay)

        raise RequestFailed(
            f"Request failed after {attempts} attempts. Last error: {last_error}",
            last_error=last_error,
            attempts=attempts,
        ) from last_error

    def close(self) -> None:
        """Close the HTTP session if this executor created it."""
        if self._owns_session:
            self._session.close()

    def resolve_url(self, endpoint: str, *, is_media_upload: bool = False) -> str:
        if is_media_upload:
            return self.settings.media_upload_url
        return self.settings.api_base_url + endpoint

    def _attempt(
        self,
        endpoint: str,
        payload: Payload,
        method: str,
        is_media_upload: bool,
        *,
        fresh: bool,
    ) -> AttemptOutcome:
        url = self.resolve_url(endpoint, is_media_upload=is_media_upload)
        headers = self._headers_for(method, url, fresh=fresh)
        request_kwargs: dict[str, Any] = {}

        if payload and method != "GET":
            if isinstance(payload, MultipartPayload):
                headers.pop("Content-Type", None)
                headers.pop("Accept", None)
                request_kwargs["files"] = payload.as_files()
            else:
                request_kwargs["data"] = json.dumps(payload)

        try:
            return AttemptOutcome(result=self._send(method, url, headers, **request_kwargs))
        except (TransportError, ApiResponseError, DecodeError) as exc:
            return AttemptOutcome(error=exc)

    def _headers_for(self, method: str, url: str, *, fresh: bool) -> dict[str, str]:
        if fresh:
            self.header_cache.invalidate(method, url)
        else:
            cached = self.header_cache.get(method, url)
            if cached is not None:
                return cached

        headers = {
            "Authorization": self._signer.authorization_header(
                method,
                url,
                token=self._credentials.access_token,
                token_secret=self._credentials.access_token_secret,
            ),
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        self.header_cache.put(method, url, headers)
        return dict(headers)

    def _send(self, method: str, url: str, headers: dict[str, str], **kwargs: Any) -> dict[str, Any]:
        try:
            response = self._session.request(
                method, url, headers=headers, timeout=self.settings.timeout, **kwargs
            )
        except requests.RequestException as exc:
            raise TransportError(f"Transport error: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise ApiResponseError(
                f"API request failed (HTTP {response.status_code}): {response.text}",
                code=response.status_code,
                body=response.text,
            )

        try:
            decoded = response.json()
        except ValueError as exc:
            raise DecodeError(f"Invalid JSON response: {exc}") from exc

        if not isinstance(decoded, dict):
            raise DecodeError(f"Expected a JSON object, got {type(decoded).__name__}.")
        return decoded
