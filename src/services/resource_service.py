"""
周辺リソース検索サービス

ストアのストアドプロシージャ get_resources_within_distance を呼び出す
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.logging import get_logger
from src.services.error_handler import DatabaseError

logger = get_logger(__name__)

RESOURCES_WITHIN_DISTANCE = text(
    "SELECT * FROM get_resources_within_distance(:lat, :lon, :distance_km)"
)


class ResourceService:
    """周辺リソース検索サービス"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_within_distance(
        self, lat: float, lon: float, distance_km: float = 10
    ) -> list[dict[str, Any]]:
        """指定地点から distance_km 以内のリソースを取得

        Raises:
            DatabaseError: ストアエラー
        """
        params = {"lat": lat, "lon": lon, "distance_km": distance_km}
        try:
            result = await self.session.execute(RESOURCES_WITHIN_DISTANCE, params)
            rows = [dict(row._mapping) for row in result]
        except SQLAlchemyError as e:
            logger.error(f"Resource search failed: {str(e)}")
            raise DatabaseError("Resource search failed", original_error=e)

        logger.info(f"Found {len(rows)} resources within {distance_km}km of ({lat}, {lon})")
        return rows
