"""
モックデータ

ソーシャルメディアのフィード、画像検証、ジオコーディングは固定値を返す
"""

from typing import Any

SOCIAL_MEDIA_POSTS: list[dict[str, str]] = [
    {"post": "#flood Need food urgently in NYC", "user": "citizen1"},
    {"post": "#earthquake need shelter!", "user": "local2"},
]

IMAGE_VERIFICATION_RESULT: dict[str, Any] = {
    "verified": True,
    "note": "No manipulation detected.",
}

GEOCODE_LOCATION_NAME = "Manhattan, NYC"
GEOCODE_COORDINATES: dict[str, float] = {"lat": 40.7831, "lon": -73.9712}


def get_social_media_posts() -> list[dict[str, str]]:
    """モック投稿を返す"""
    return [dict(post) for post in SOCIAL_MEDIA_POSTS]


def verify_image(image_url: str | None) -> dict[str, Any]:
    """画像検証（固定結果）"""
    return dict(IMAGE_VERIFICATION_RESULT)


def geocode(description: str | None) -> dict[str, Any]:
    """説明文から位置を返す（固定結果）"""
    return {"locationName": GEOCODE_LOCATION_NAME, **GEOCODE_COORDINATES}
