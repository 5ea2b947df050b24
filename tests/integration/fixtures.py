"""Mock responses for X API integration tests."""

from __future__ import annotations

API_BASE = "https://api.x.com/2"
TWEETS_URL = f"{API_BASE}/tweets"
USERS_ME_URL = f"{API_BASE}/users/me"
UPLOAD_URL = "https://upload.twitter.com/1.1/media/upload.json"
REQUEST_TOKEN_URL = "https://api.twitter.com/oauth/request_token"
ACCESS_TOKEN_URL = "https://api.twitter.com/oauth/access_token"


def tweet_response(tweet_id: str, text: str) -> dict:
    return {
        "data": {
            "id": tweet_id,
            "text": text,
            "edit_history_tweet_ids": [tweet_id],
        }
    }


USERS_ME_RESPONSE = {
    "data": {
        "id": "2244994945",
        "name": "X Dev",
        "username": "XDevelopers",
    }
}

# v1.1 media upload response
MEDIA_UPLOAD_IMAGE_RESPONSE = {
    "media_id": 1234567890123456789,
    "media_id_string": "1234567890123456789",
    "media_key": "3_1234567890123456789",
    "size": 12345,
    "expires_after_secs": 86400,
    "image": {
        "image_type": "image/png",
        "w": 1200,
        "h": 675,
    },
}

RATE_LIMIT_ERROR_RESPONSE = {
    "title": "Too Many Requests",
    "detail": "Too Many Requests",
    "type": "about:blank",
    "status": 429,
}

REQUEST_TOKEN_RESPONSE = (
    "oauth_token=NPcudxy0yU5T3tBzho7iCotZ3cnetKwcTIRlX0iwRl0"
    "&oauth_token_secret=veNRnAWe6inFuo8o2u8SLLZLjolYDmDP7SzL0YfYI"
    "&oauth_callback_confirmed=true"
)

ACCESS_TOKEN_RESPONSE = (
    "oauth_token=7588892-kagSNqWge8gB1WwE3plnFsJHAZVfxWD7Vb57p0b4"
    "&oauth_token_secret=PbKfYqSryyeKDWz4ebtY3o5ogNLG11WJuZBc9fQrQo"
    "&user_id=7588892&screen_name=kaiserkrauts"
)
