"""
災害レポート API エンドポイント
"""

from typing import Any, AsyncGenerator

from fastapi import APIRouter, Depends, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.logging import get_logger, get_logger_with_context
from src.config.settings import get_settings
from src.database.connection import get_session
from src.services import mock_feeds
from src.services.broadcaster import DISASTER_UPDATED, ConnectionManager, get_connection_manager
from src.services.cache_store import CacheStore
from src.services.disaster_service import DisasterService
from src.services.error_handler import ScrapeError
from src.services.official_updates import (
    OfficialUpdateScraper,
    OfficialUpdatesService,
    cache_key_for,
)
from src.services.resource_service import ResourceService

logger = get_logger(__name__)
router = APIRouter(prefix="/disasters", tags=["Disasters"])


class DisasterInput(BaseModel):
    """災害レポート入力スキーマ"""

    title: str = Field(description="タイトル")
    location_name: str = Field(description="地名")
    description: str = Field(description="説明")
    tags: list[str] = Field(default_factory=list, description="タグ")
    owner_id: str = Field(description="登録ユーザー ID")


class VerifyImageInput(BaseModel):
    """画像検証入力スキーマ"""

    image_url: str | None = Field(default=None, description="検証する画像の URL")


async def get_update_scraper() -> AsyncGenerator[OfficialUpdateScraper, None]:
    """公式情報スクレイパーを取得（依存性注入用）"""
    scraper = OfficialUpdateScraper()
    try:
        yield scraper
    finally:
        await scraper.close()


@router.post("")
async def create_disaster(
    input_data: DisasterInput,
    session: AsyncSession = Depends(get_session),
    manager: ConnectionManager = Depends(get_connection_manager),
) -> list[dict[str, Any]]:
    """災害レポートを登録し、接続中のクライアントに配信

    Returns:
        登録した行のリスト
    """
    request_logger = get_logger_with_context(__name__, user_id=input_data.owner_id)
    request_logger.info(f"POST /disasters: title={input_data.title}")

    service = DisasterService(session)
    disasters = await service.create_disaster(
        title=input_data.title,
        location_name=input_data.location_name,
        description=input_data.description,
        tags=input_data.tags,
        owner_id=input_data.owner_id,
    )
    rows = [service.to_dict(d) for d in disasters]

    await manager.broadcast(DISASTER_UPDATED, rows)
    return rows


@router.get("")
async def list_disasters(
    tag: str | None = Query(None, description="このタグを含むレポートのみ返す"),
    session: AsyncSession = Depends(get_session),
) -> list[dict[str, Any]]:
    """災害レポート一覧を取得"""
    logger.info(f"GET /disasters: tag={tag}")

    service = DisasterService(session)
    disasters = await service.list_disasters(tag)
    return [service.to_dict(d) for d in disasters]


@router.get("/{disaster_id}/social-media")
async def get_social_media(disaster_id: str) -> list[dict[str, str]]:
    """ソーシャルメディア投稿（モック）"""
    logger.info(f"GET /disasters/{disaster_id}/social-media")
    return mock_feeds.get_social_media_posts()


@router.get("/{disaster_id}/resources")
async def get_resources(
    disaster_id: str,
    lat: float = Query(..., description="緯度"),
    lon: float = Query(..., description="経度"),
    session: AsyncSession = Depends(get_session),
):
    """周辺リソースを取得"""
    logger.info(f"GET /disasters/{disaster_id}/resources: lat={lat}, lon={lon}")

    settings = get_settings()
    service = ResourceService(session)
    resources = await service.find_within_distance(lat, lon, settings.resource_search_radius_km)
    return jsonable_encoder(resources)


@router.get("/{disaster_id}/official-updates")
async def get_official_updates(
    disaster_id: str,
    request: Request,
    session: AsyncSession = Depends(get_session),
    scraper: OfficialUpdateScraper = Depends(get_update_scraper),
):
    """公式情報を取得（リードスルーキャッシュ）

    取得に失敗した場合は 500 と {"error": "Scrape failed"} を返す
    """
    cache_key = cache_key_for(request)
    logger.info(f"GET /disasters/{disaster_id}/official-updates: cache_key={cache_key}")

    settings = get_settings()
    service = OfficialUpdatesService(
        CacheStore(session, ttl_seconds=settings.cache_ttl_seconds), scraper
    )
    try:
        return await service.get_updates(cache_key)
    except ScrapeError as e:
        logger.error(f"Scrape failed: {e.code} - {e.message}")
        return JSONResponse(status_code=500, content={"error": "Scrape failed"})


@router.post("/{disaster_id}/verify-image")
async def verify_image(disaster_id: str, input_data: VerifyImageInput) -> dict[str, Any]:
    """画像検証（固定結果）"""
    logger.info(f"POST /disasters/{disaster_id}/verify-image: image_url={input_data.image_url}")
    return mock_feeds.verify_image(input_data.image_url)
