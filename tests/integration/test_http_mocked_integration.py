"""Integration tests with HTTP mocking using responses library."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import requests
import responses
from PIL import Image

from x_poster.config import ClientSettings, XCredentials
from x_poster.exceptions import ApiResponseError, RateLimitExceeded, RequestFailed
from x_poster.factory import XClientFactory
from x_poster.models import Message

from .fixtures import (
    ACCESS_TOKEN_RESPONSE,
    ACCESS_TOKEN_URL,
    MEDIA_UPLOAD_IMAGE_RESPONSE,
    RATE_LIMIT_ERROR_RESPONSE,
    REQUEST_TOKEN_RESPONSE,
    REQUEST_TOKEN_URL,
    TWEETS_URL,
    UPLOAD_URL,
    USERS_ME_RESPONSE,
    USERS_ME_URL,
    tweet_response,
)


@pytest.fixture
def credentials() -> XCredentials:
    """Provide test credentials."""
    return XCredentials(
        consumer_key="test_api_key",
        consumer_secret="test_api_secret",
        access_token="test_access_token",
        access_token_secret="test_access_token_secret",
    )


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def client(credentials: XCredentials, sleeps: list[float]):
    return XClientFactory.create_from_credentials(credentials, sleep=sleeps.append)


@pytest.fixture
def image_file(tmp_path: Path) -> Path:
    """Create a temporary PNG file for testing."""
    file_path = tmp_path / "test_image.png"
    Image.new("RGB", (16, 9), color=(0, 120, 255)).save(file_path, format="PNG")
    return file_path


def _json_body(call: responses.Call) -> dict:
    body = call.request.body
    return json.loads(body.decode() if isinstance(body, bytes) else body)


@responses.activate
def test_post_single_message(client) -> None:
    """Integration: single post is signed and sent as JSON."""
    responses.add(responses.POST, TWEETS_URL, json=tweet_response("1", "Hello, X!"), status=201)

    result = client.post("Hello, X!")

    assert result.id == "1"
    assert len(responses.calls) == 1
    request = responses.calls[0].request
    assert request.url == TWEETS_URL
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["Authorization"].startswith('OAuth oauth_consumer_key="test_api_key"')
    assert _json_body(responses.calls[0]) == {"text": "Hello, X!"}


@responses.activate
def test_post_thread_with_images(client, image_file: Path, sleeps: list[float]) -> None:
    """Integration: thread uploads media per message and chains replies."""
    responses.add(responses.POST, UPLOAD_URL, json=MEDIA_UPLOAD_IMAGE_RESPONSE, status=200)
    responses.add(responses.POST, TWEETS_URL, json=tweet_response("10", "part A"), status=201)
    responses.add(responses.POST, TWEETS_URL, json=tweet_response("11", "part B"), status=201)

    thread = [
        Message(content="part A", image=image_file),
        Message(content="part B"),
    ]
    result = client.post(thread)

    assert result.id == "11"
    assert [call.request.url for call in responses.calls] == [UPLOAD_URL, TWEETS_URL, TWEETS_URL]

    upload_request = responses.calls[0].request
    assert upload_request.headers["Content-Type"].startswith("multipart/form-data; boundary=")
    assert b'name="media"; filename="test_image.png"' in upload_request.body
    assert b"Content-Type: image/png" in upload_request.body

    assert _json_body(responses.calls[1]) == {
        "text": "part A",
        "media": {"media_ids": ["1234567890123456789"]},
    }
    assert _json_body(responses.calls[2]) == {
        "text": "part B",
        "reply": {"in_reply_to_tweet_id": "10"},
    }
    assert sleeps == [0.5]


@responses.activate
def test_server_429_is_retried_with_backoff(client, sleeps: list[float]) -> None:
    """Integration: a server-side rate limit goes through the retry path."""
    responses.add(responses.POST, TWEETS_URL, json=RATE_LIMIT_ERROR_RESPONSE, status=429)
    responses.add(responses.POST, TWEETS_URL, json=tweet_response("5", "eventually"), status=201)

    result = client.post("eventually")

    assert result.id == "5"
    assert len(responses.calls) == 2
    assert sleeps == [1.0]
    first_auth = responses.calls[0].request.headers["Authorization"]
    second_auth = responses.calls[1].request.headers["Authorization"]
    assert first_auth != second_auth


@responses.activate
def test_persistent_failure_surfaces_request_failed(client, sleeps: list[float]) -> None:
    """Integration: exhausting attempts wraps the last API error."""
    responses.add(responses.POST, TWEETS_URL, json={"detail": "Service Unavailable"}, status=503)

    with pytest.raises(RequestFailed) as exc_info:
        client.post("never")

    assert len(responses.calls) == 3
    assert sleeps == [1.0, 2.0]
    last_error = exc_info.value.last_error
    assert isinstance(last_error, ApiResponseError)
    assert last_error.code == 503
    assert "Service Unavailable" in last_error.body


@responses.activate
def test_thread_aborts_on_failure_without_rollback(client) -> None:
    """Integration: posts already published stay; remaining ones are not sent."""
    responses.add(responses.POST, TWEETS_URL, json=tweet_response("20", "one"), status=201)
    responses.add(responses.POST, TWEETS_URL, body=requests.ConnectionError("reset"))

    with pytest.raises(RequestFailed):
        client.post(["one", "two", "three"])

    bodies = [_json_body(call) for call in responses.calls]
    assert bodies[0] == {"text": "one"}
    assert all(body["text"] == "two" for body in bodies[1:])
    assert len(bodies) == 4


@responses.activate
def test_local_rate_limit_blocks_before_network(credentials: XCredentials) -> None:
    """Integration: the local quota is enforced without touching the network."""
    responses.add(responses.POST, TWEETS_URL, json=tweet_response("1", "only"), status=201)
    client = XClientFactory.create_from_credentials(
        credentials, ClientSettings(rate_limit_quota=1), sleep=lambda _: None
    )
    client.post("only")

    with pytest.raises(RateLimitExceeded):
        client.post("one too many")

    assert len(responses.calls) == 1


@responses.activate
def test_me_returns_authenticated_user(client) -> None:
    """Integration: profile lookup is a signed GET without a body."""
    responses.add(responses.GET, USERS_ME_URL, json=USERS_ME_RESPONSE, status=200)

    user = client.me()

    assert user.data.name == "X Dev"
    request = responses.calls[0].request
    assert request.method == "GET"
    assert not request.body
    assert "oauth_signature=" in request.headers["Authorization"]


@responses.activate
def test_full_oauth_handshake(credentials: XCredentials) -> None:
    """Integration: request token, authorization URL and access token exchange."""
    responses.add(responses.POST, REQUEST_TOKEN_URL, body=REQUEST_TOKEN_RESPONSE, status=200)
    responses.add(responses.POST, ACCESS_TOKEN_URL, body=ACCESS_TOKEN_RESPONSE, status=200)
    flow = XClientFactory.create_auth_flow(credentials, "http://localhost:8080/callback")

    auth_url = flow.get_authorization_url()
    assert auth_url == (
        "https://api.twitter.com/oauth/authorize"
        "?oauth_token=NPcudxy0yU5T3tBzho7iCotZ3cnetKwcTIRlX0iwRl0"
    )

    tokens = flow.handle_callback(
        "NPcudxy0yU5T3tBzho7iCotZ3cnetKwcTIRlX0iwRl0",
        "uw7NjWHT6OJ1MpJOXsHfNxoAhPKpgI8BlYDhxEjIBY",
    )

    assert tokens.access_token == "7588892-kagSNqWge8gB1WwE3plnFsJHAZVfxWD7Vb57p0b4"
    assert tokens.user_id == "7588892"
    assert tokens.screen_name == "kaiserkrauts"

    new_credentials = XCredentials(
        credentials.consumer_key,
        credentials.consumer_secret,
        tokens.access_token,
        tokens.access_token_secret,
    )
    assert new_credentials.access_token == tokens.access_token
