"""
OAuth 1.0a HMAC-SHA1 request signing.

Everything here is a pure function of its inputs, so it can be shared by the
handshake and by every authenticated API call without locking.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import secrets
import time
from dataclasses import dataclass, field
from typing import Callable, Mapping
from urllib.parse import quote

logger = logging.getLogger(__name__)

SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"


def percent_encode(value: object) -> str:
    """RFC 3986 encoding: only unreserved characters stay literal."""

    return quote(str(value), safe="~")


def build_base_string(params: Mapping[str, object], url: str, method: str) -> str:
    """
    Build the signature base string ``METHOD&url&params``.

    Parameters are encoded and then sorted, so the result does not depend on
    the order of ``params``.
    """

    encoded = sorted((percent_encode(key), percent_encode(value)) for key, value in params.items())
    param_string = "&".join(f"{key}={value}" for key, value in encoded)
    return "&".join([method.upper(), percent_encode(url), percent_encode(param_string)])


def build_signing_key(consumer_secret: str, token_secret: str = "") -> str:
    return f"{percent_encode(consumer_secret)}&{percent_encode(token_secret)}"


def sign(base_string: str, signing_key: str) -> str:
    digest = hmac.new(signing_key.encode(), base_string.encode(), hashlib.sha1).digest()
    return base64.b64encode(digest).decode()


def build_authorization_header(params: Mapping[str, object]) -> str:
    """Render ``OAuth k="v", ...`` keeping the insertion order of ``params``."""

    rendered = ", ".join(
        f'{percent_encode(key)}="{percent_encode(value)}"' for key, value in params.items()
    )
    return f"OAuth {rendered}"


def generate_nonce() -> str:
    return secrets.token_hex(16)


@dataclass(slots=True)
class OAuth1Signer:
    """Builds signed ``Authorization`` headers for one consumer key pair."""

    consumer_key: str
    consumer_secret: str
    clock: Callable[[], float] = field(default=time.time)
    nonce_factory: Callable[[], str] = field(default=generate_nonce)

    def oauth_params(
        self,
        *,
        token: str | None = None,
        extra_params: Mapping[str, str] | None = None,
    ) -> dict[str, str]:
        params = {
            "oauth_consumer_key": self.consumer_key,
            "oauth_nonce": self.nonce_factory(),
            "oauth_signature_method": SIGNATURE_METHOD,
            "oauth_timestamp": str(int(self.clock())),
        }
        if token:
            params["oauth_token"] = token
        params["oauth_version"] = OAUTH_VERSION
        if extra_params:
            params.update(extra_params)
        return params

    def signed_params(
        self,
        method: str,
        url: str,
        *,
        token: str | None = None,
        token_secret: str = "",
        extra_params: Mapping[str, str] | None = None,
    ) -> dict[str, str]:
        params = self.oauth_params(token=token, extra_params=extra_params)
        base_string = build_base_string(params, url, method)
        params["oauth_signature"] = sign(
            base_string, build_signing_key(self.consumer_secret, token_secret)
        )
        logger.debug("Signed %s %s (nonce %s)", method.upper(), url, params["oauth_nonce"])
        return params

    def authorization_header(
        self,
        method: str,
        url: str,
        *,
        token: str | None = None,
        token_secret: str = "",
        extra_params: Mapping[str, str] | None = None,
    ) -> str:
        return build_authorization_header(
            self.signed_params(
                method,
                url,
                token=token,
                token_secret=token_secret,
                extra_params=extra_params,
            )
        )
