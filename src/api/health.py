"""
ヘルスチェックエンドポイント
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

router = APIRouter()

API_NAME = "Disaster Coordination API"
API_VERSION = "0.1.0"


class HealthResponse(BaseModel):
    """ヘルスチェックレスポンス"""

    status: str
    timestamp: datetime
    version: str = API_VERSION


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """ヘルスチェック

    Returns:
        HealthResponse: ヘルスチェック結果
    """
    return HealthResponse(status="healthy", timestamp=datetime.now(timezone.utc))


@router.get("/")
async def root() -> dict[str, str]:
    """ルートエンドポイント

    Returns:
        dict: API情報
    """
    return {"name": API_NAME, "version": API_VERSION}
