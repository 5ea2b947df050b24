"""
Three-legged OAuth 1.0a handshake for obtaining user access tokens.

The caller sends the user to :meth:`OAuthFlow.get_authorization_url`, collects
``oauth_token`` and ``oauth_verifier`` from the callback out-of-band, and hands
them to :meth:`OAuthFlow.handle_callback`. Persisting the resulting tokens is
left to the caller.
"""

from __future__ import annotations

import enum
import logging
from typing import Mapping
from urllib.parse import parse_qsl, urlencode

import requests

from x_poster.auth.signature import OAuth1Signer
from x_poster.config import AppCredentials, ClientSettings
from x_poster.exceptions import (
    AuthenticationError,
    HandshakeError,
    ProtocolError,
    TokenMismatchError,
    TransportError,
)
from x_poster.models import AccessTokens, RequestToken

logger = logging.getLogger(__name__)


class FlowState(enum.Enum):
    UNSTARTED = "unstarted"
    REQUEST_TOKEN_OBTAINED = "request_token_obtained"
    ACCESS_TOKEN_OBTAINED = "access_token_obtained"
    FAILED = "failed"


class OAuthFlow:
    """One handshake attempt; create a new instance to start over."""

    def __init__(
        self,
        credentials: AppCredentials,
        callback_url: str,
        *,
        settings: ClientSettings | None = None,
        session: requests.Session | None = None,
        signer: OAuth1Signer | None = None,
        strict_token_check: bool = True,
    ) -> None:
        if not callback_url or not callback_url.strip():
            raise AuthenticationError("A callback URL is required for the OAuth handshake.")
        self.callback_url = callback_url.strip()
        self.settings = settings or ClientSettings()
        self.strict_token_check = strict_token_check
        self.state = FlowState.UNSTARTED
        self._credentials = credentials
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._signer = signer or OAuth1Signer(credentials.consumer_key, credentials.consumer_secret)
        self._request_token: RequestToken | None = None
        self._last_body = ""

    @property
    def request_token(self) -> RequestToken | None:
        return self._request_token

    def get_authorization_url(self) -> str:
        """
        Obtain a request token and return the URL the user must visit.

        Raises:
            HandshakeError: If the token endpoint answers with a non-2xx status
            ProtocolError: If the response lacks oauth_token or oauth_token_secret
            TransportError: If the endpoint cannot be reached
        """
        if self.state is not FlowState.UNSTARTED:
            raise AuthenticationError(
                f"Cannot request a token in state '{self.state.value}'; start a new flow."
            )

        url = self.settings.request_token_url
        header = self._signer.authorization_header(
            "POST", url, extra_params={"oauth_callback": self.callback_url}
        )
        fields = self._post_for_fields(url, header, "request token")
        oauth_token = self._require(fields, "oauth_token")
        oauth_token_secret = self._require(fields, "oauth_token_secret")

        self._request_token = RequestToken(
            oauth_token=oauth_token,
            oauth_token_secret=oauth_token_secret,
            oauth_callback_confirmed=fields.get("oauth_callback_confirmed") == "true",
        )
        self.state = FlowState.REQUEST_TOKEN_OBTAINED
        logger.info("Obtained OAuth request token")
        return f"{self.settings.authorize_url}?{urlencode({'oauth_token': oauth_token})}"

    def handle_callback(self, oauth_token: str, oauth_verifier: str) -> AccessTokens:
        """
        Exchange the verifier returned by the authorization page for access tokens.

        Raises:
            AuthenticationError: If no request token is pending
            TokenMismatchError: If ``oauth_token`` is not the pending request token
            HandshakeError: If the token endpoint answers with a non-2xx status
            ProtocolError: If the response lacks a required field
        """
        if self.state is not FlowState.REQUEST_TOKEN_OBTAINED or self._request_token is None:
            raise AuthenticationError(
                f"No pending request token (state '{self.state.value}'); "
                "call get_authorization_url first."
            )

        request_token = self._request_token
        if oauth_token != request_token.oauth_token:
            if self.strict_token_check:
                self._fail()
                raise TokenMismatchError(
                    "Callback oauth_token does not match the pending request token.",
                    field="oauth_token",
                )
            logger.warning("Callback oauth_token differs from the pending request token")

        url = self.settings.access_token_url
        header = self._signer.authorization_header(
            "POST",
            url,
            token=oauth_token,
            token_secret=request_token.oauth_token_secret,
            extra_params={"oauth_verifier": oauth_verifier},
        )
        fields = self._post_for_fields(url, header, "access token")
        tokens = AccessTokens(
            access_token=self._require(fields, "oauth_token"),
            access_token_secret=self._require(fields, "oauth_token_secret"),
            user_id=self._require(fields, "user_id"),
            screen_name=self._require(fields, "screen_name"),
        )

        self._request_token = None
        self.state = FlowState.ACCESS_TOKEN_OBTAINED
        logger.info("Obtained OAuth access token for @%s", tokens.screen_name)
        return tokens

    def close(self) -> None:
        """Close the HTTP session if this flow created it."""
        if self._owns_session:
            self._session.close()

    def _post_for_fields(self, url: str, header: str, label: str) -> dict[str, str]:
        try:
            response = self._session.post(
                url,
                headers={"Authorization": header, "Content-Length": "0"},
                timeout=self.settings.timeout,
            )
        except requests.RequestException as exc:
            self._fail()
            raise TransportError(f"Could not reach the {label} endpoint: {exc}") from exc

        if not 200 <= response.status_code < 300:
            self._fail()
            raise HandshakeError(
                f"X API error during {label} request. HTTP code: {response.status_code}. "
                f"Response: {response.text}",
                code=response.status_code,
                body=response.text,
            )

        self._last_body = response.text
        return dict(parse_qsl(response.text, keep_blank_values=False))

    def _require(self, fields: Mapping[str, str], name: str) -> str:
        value = fields.get(name)
        if not value:
            self._fail()
            raise ProtocolError(
                f"Invalid response from X: missing '{name}'. Response: {self._last_body}",
                field=name,
            )
        return value

    def _fail(self) -> None:
        self._request_token = None
        self.state = FlowState.FAILED
