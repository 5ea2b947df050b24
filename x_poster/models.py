"""
Pydantic models for X API payloads and caller input used by x_poster.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Union

from pydantic import BaseModel, ConfigDict, field_validator


def _to_mapping(payload: Any) -> Mapping[str, Any]:
    if isinstance(payload, Mapping):
        return payload
    if hasattr(payload, "__dict__"):
        return _to_mapping(vars(payload))
    raise TypeError(f"Cannot convert payload of type {type(payload)!r} to mapping.")


class Message(BaseModel):
    """One logical post: text plus an optional local image."""

    content: str = ""
    image: Path | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("image", mode="before")
    @classmethod
    def blank_image_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def has_content(self) -> bool:
        return bool(self.content.strip())

    @classmethod
    def coerce(cls, item: "MessageInput") -> "Message":
        """Resolve plain text, mappings and messages into a ``Message``."""

        if isinstance(item, Message):
            return item
        if isinstance(item, str):
            return cls(content=item)
        return cls.model_validate(_to_mapping(item))


MessageInput = Union[str, Message, Mapping[str, Any]]


class PostData(BaseModel):
    id: str
    text: str | None = None

    model_config = ConfigDict(extra="allow")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> str:
        if isinstance(value, int):
            return str(value)
        return value


class PostResult(BaseModel):
    """Decoded response of a created post."""

    data: PostData

    model_config = ConfigDict(extra="allow")

    @property
    def id(self) -> str:
        return self.data.id

    @classmethod
    def from_api(cls, payload: Any) -> "PostResult":
        return cls.model_validate(_to_mapping(payload))


class MediaUploadResult(BaseModel):
    """Normalized response from the media upload endpoint."""

    media_id_string: str
    media_id: int | None = None
    media_key: str | None = None
    size: int | None = None
    expires_after_secs: int | None = None

    model_config = ConfigDict(extra="allow")

    @classmethod
    def from_api(cls, payload: Any) -> "MediaUploadResult":
        return cls.model_validate(_to_mapping(payload))


class UserData(BaseModel):
    id: str
    name: str | None = None
    username: str | None = None

    model_config = ConfigDict(extra="allow")


class User(BaseModel):
    """The authenticated account as returned by ``/users/me``."""

    data: UserData

    model_config = ConfigDict(extra="allow")

    @classmethod
    def from_api(cls, payload: Any) -> "User":
        return cls.model_validate(_to_mapping(payload))


class RequestToken(BaseModel):
    """Temporary credentials issued by the first handshake leg."""

    oauth_token: str
    oauth_token_secret: str
    oauth_callback_confirmed: bool | None = None


class AccessTokens(BaseModel):
    """User access credentials issued by the second handshake leg."""

    access_token: str
    access_token_secret: str
    user_id: str
    screen_name: str

    def __repr__(self) -> str:
        return f"AccessTokens(user_id={self.user_id!r}, screen_name={self.screen_name!r})"


@dataclass(frozen=True, slots=True)
class MultipartPayload:
    """Raw file part for a multipart/form-data upload."""

    filename: str
    content: bytes
    mime_type: str
    field_name: str = "media"

    def as_files(self) -> dict[str, tuple[str, bytes, str]]:
        return {self.field_name: (self.filename, self.content, self.mime_type)}
