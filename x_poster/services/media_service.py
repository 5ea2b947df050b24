"""
Image validation and upload through the legacy media endpoint.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from PIL import Image, UnidentifiedImageError
from pydantic import ValidationError as PydanticValidationError

from x_poster.exceptions import MediaValidationError, UploadFailed
from x_poster.models import MediaUploadResult, MultipartPayload

logger = logging.getLogger(__name__)

IMAGE_MAX_BYTES = 5 * 1024 * 1024
ALLOWED_IMAGE_MIME_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}

# Multi-frame JPEGs (phone and camera photos) open as MPO.
_FORMAT_MIME_OVERRIDES = {"MPO": "image/jpeg"}


class MediaClient(Protocol):
    """Protocol capturing the executor behaviour the service relies on."""

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


def sniff_mime_type(path: Path) -> str | None:
    """Detect the image MIME type from file content, ignoring the extension."""

    try:
        with Image.open(path) as image:
            image_format = image.format
    except (UnidentifiedImageError, OSError):
        return None
    if image_format is None:
        return None
    image_format = image_format.upper()
    return _FORMAT_MIME_OVERRIDES.get(image_format, Image.MIME.get(image_format))


@dataclass(slots=True)
class MediaService:
    """Validates local images and uploads them for attachment to posts."""

    client: MediaClient

    def validate(self, path: Path | str) -> Path:
        """
        Check that ``path`` is an uploadable image.

        Raises:
            MediaValidationError: If the file is missing, larger than 5MB,
                or its content is not jpeg, png, gif or webp
        """
        resolved, _ = self._inspect(path)
        return resolved

    def upload(self, path: Path | str) -> str:
        """
        Upload an image file (up to 5MB).

        Args:
            path: Path to image file (jpeg, png, webp, gif)

        Returns:
            The media id string to reference from a post

        Raises:
            MediaValidationError: If the file fails validation
            UploadFailed: If the response carries no media id
        """
        resolved, mime_type = self._inspect(path)
        payload = MultipartPayload(
            filename=resolved.name,
            content=resolved.read_bytes(),
            mime_type=mime_type,
        )
        response = self.client.execute("/media/upload", payload, "POST", is_media_upload=True)

        try:
            result = MediaUploadResult.from_api(response)
        except (PydanticValidationError, TypeError) as exc:
            raise UploadFailed("Media upload failed: No media ID in response") from exc

        logger.info("Uploaded %s as media %s", resolved.name, result.media_id_string)
        return result.media_id_string

    @staticmethod
    def _inspect(path: Path | str) -> tuple[Path, str]:
        resolved = Path(path).expanduser()
        if not resolved.exists() or not resolved.is_file():
            raise MediaValidationError(f"Image not found: {path}")

        size = resolved.stat().st_size
        if size > IMAGE_MAX_BYTES:
            raise MediaValidationError(
                f"Image '{resolved}' exceeds the {IMAGE_MAX_BYTES} byte size limit."
            )

        mime_type = sniff_mime_type(resolved)
        if mime_type not in ALLOWED_IMAGE_MIME_TYPES:
            raise MediaValidationError(
                f"Unsupported image type '{mime_type or 'unknown'}' for '{resolved.name}'."
            )
        return resolved, mime_type
