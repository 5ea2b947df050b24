"""
Post and thread workflows built on top of the request executor.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping, Sequence
from typing import Any, Callable, Iterable, Protocol

from pydantic import ValidationError as PydanticValidationError

from x_poster.exceptions import DecodeError, ThreadTooLong, ValidationError
from x_poster.models import Message, MessageInput, PostResult
from x_poster.services.media_service import MediaService

logger = logging.getLogger(__name__)

MAX_THREAD_LENGTH = 25
THREAD_DELAY_SECONDS = 0.5


class PostClient(Protocol):
    """Protocol subset consumed by the service."""

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


class PostService:
    """Publishes single posts and reply-chained threads."""

    def __init__(
        self,
        client: PostClient,
        media: MediaService | None = None,
        max_thread_length: int = MAX_THREAD_LENGTH,
        thread_delay: float = THREAD_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.client = client
        self.media: MediaService = media if media is not None else MediaService(client)
        self.max_thread_length = max_thread_length
        self.thread_delay = thread_delay
        self.sleep = sleep

    def send(self, messages: MessageInput | Sequence[MessageInput]) -> PostResult:
        """
        Post one message, or several as a thread where each replies to the previous.

        Messages with empty content are skipped without breaking the reply
        chain. Posts already published are not rolled back when a later one
        fails.

        Returns:
            The response of the last published post

        Raises:
            ValidationError: If there is nothing to post
            ThreadTooLong: If more than ``max_thread_length`` messages are given
        """
        thread = self._normalize(messages)
        if len(thread) > 1:
            return self.post_thread(thread)

        message = thread[0]
        return self.create_post(message.content, media_ids=self._attach(message))

    def post_thread(self, messages: Sequence[MessageInput]) -> PostResult:
        thread = self._normalize(messages)
        previous_id: str | None = None
        last_result: PostResult | None = None
        posted_ids: list[str] = []

        for message in thread:
            if not message.has_content:
                continue

            if posted_ids:
                self.sleep(self.thread_delay)

            try:
                media_ids = self._attach(message)
                last_result = self.create_post(
                    message.content, media_ids=media_ids, in_reply_to=previous_id
                )
            except Exception:
                if posted_ids:
                    logger.warning(
                        "Thread aborted after %d published posts: %s",
                        len(posted_ids),
                        ", ".join(posted_ids),
                    )
                raise

            previous_id = last_result.id
            posted_ids.append(previous_id)

        if last_result is None:
            raise ValidationError("Invalid message format: every message is empty.")
        return last_result

    def create_post(
        self,
        text: str,
        *,
        media_ids: Iterable[str] | None = None,
        in_reply_to: str | None = None,
        **extra: Any,
    ) -> PostResult:
        payload: dict[str, Any] = {"text": text}
        if in_reply_to:
            payload["reply"] = {"in_reply_to_tweet_id": in_reply_to}
        if media_ids:
            payload["media"] = {"media_ids": list(media_ids)}
        payload.update(extra)

        response = self.client.execute("/tweets", payload, "POST")
        try:
            result = PostResult.from_api(response)
        except (PydanticValidationError, TypeError) as exc:
            raise DecodeError(f"Post response carries no data.id: {response!r}") from exc

        logger.info("Published post %s", result.id)
        return result

    def _attach(self, message: Message) -> list[str] | None:
        if message.image is None:
            return None
        return [self.media.upload(message.image)]

    def _normalize(self, messages: MessageInput | Sequence[MessageInput]) -> list[Message]:
        if isinstance(messages, (str, Message, Mapping)):
            items: list[MessageInput] = [messages]
        else:
            items = list(messages)

        if not items:
            raise ValidationError("Invalid message format: nothing to post.")
        if len(items) > self.max_thread_length:
            raise ThreadTooLong(
                f"Thread exceeds maximum allowed posts ({self.max_thread_length}).",
                length=len(items),
                limit=self.max_thread_length,
            )

        try:
            thread = [Message.coerce(item) for item in items]
        except (PydanticValidationError, TypeError) as exc:
            raise ValidationError(f"Invalid message format: {exc}") from exc
        if not any(message.has_content for message in thread):
            raise ValidationError("Invalid message format: every message is empty.")
        return thread
