"""
Client adapters that talk to the X API over HTTP.
"""

__all__ = [
    "request_executor",
]
