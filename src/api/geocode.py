"""
ジオコーディング API エンドポイント
"""

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from src.config.logging import get_logger
from src.services import mock_feeds

logger = get_logger(__name__)
router = APIRouter(tags=["Geocode"])


class GeocodeInput(BaseModel):
    """ジオコーディング入力スキーマ"""

    description: str | None = Field(default=None, description="位置を含む説明文")


@router.post("/geocode")
async def geocode(input_data: GeocodeInput) -> dict[str, Any]:
    """説明文から位置を取得（固定結果）

    Returns:
        {"locationName": 地名, "lat": 緯度, "lon": 経度}
    """
    logger.info("POST /geocode")
    return mock_feeds.geocode(input_data.description)
