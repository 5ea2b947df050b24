"""
OAuth 1.0a building blocks: request signing, signed-header caching and the
three-legged token handshake.
"""

from x_poster.auth.flow import FlowState, OAuthFlow
from x_poster.auth.header_cache import HeaderCache
from x_poster.auth.signature import OAuth1Signer

__all__ = [
    "FlowState",
    "HeaderCache",
    "OAuth1Signer",
    "OAuthFlow",
]
