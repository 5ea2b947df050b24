"""
Authenticated account lookups.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from pydantic import ValidationError as PydanticValidationError

from x_poster.exceptions import DecodeError
from x_poster.models import User


class UserClient(Protocol):
    def execute(
        self,
        endpoint: str,
        payload: Any = None,
        method: str = "POST",
        *,
        is_media_upload: bool = False,
        max_retries: int | None = None,
    ) -> Any:
        ...


@dataclass(slots=True)
class UserService:
    client: UserClient

    def me(self) -> User:
        """Return the account the access token belongs to."""

        response = self.client.execute("/users/me", None, "GET")
        try:
            return User.from_api(response)
        except (PydanticValidationError, TypeError) as exc:
            raise DecodeError(f"User response carries no data.id: {response!r}") from exc
