"""
Service layer modules orchestrate domain workflows (posts, media, users)
on top of the authenticated request executor.
"""

__all__ = [
    "post_service",
    "media_service",
    "user_service",
]
