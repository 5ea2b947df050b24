"""
x_poster - OAuth 1.0a signed client for posting messages and threads to X.
"""

__version__ = "0.1.0"

from x_poster.config import AppCredentials, ClientSettings, XCredentials
from x_poster.factory import XClient, XClientFactory
from x_poster.models import Message

__all__ = [
    "AppCredentials",
    "ClientSettings",
    "Message",
    "XClient",
    "XClientFactory",
    "XCredentials",
]
