"""
公式情報サービス

救援団体の Web サイトから公式情報をスクレイピングし、cache テーブルを介した
リードスルーキャッシュで提供
"""

import asyncio
from datetime import datetime
from typing import Any

import httpx
from bs4 import BeautifulSoup
from fastapi import Request

from src.config.logging import get_logger
from src.config.settings import get_settings
from src.models.cache import utcnow
from src.services.cache_store import CacheStore, is_fresh
from src.services.error_handler import ScrapeError, ScrapeTimeoutError

logger = get_logger(__name__)

DEFAULT_SELECTOR = ".disaster-info"


def extract_updates(html: str, selector: str = DEFAULT_SELECTOR) -> list[dict[str, Any]]:
    """HTML から公式情報を抽出

    Args:
        html: HTML 文字列
        selector: 抽出対象の CSS セレクタ

    Returns:
        文書順の [{"title": テキスト}, ...]。一致なしの場合は空リスト
    """
    soup = BeautifulSoup(html, "html.parser")
    return [{"title": node.get_text().strip()} for node in soup.select(selector)]


def cache_key_for(request: Request) -> str:
    """リクエスト URL（パス + クエリ文字列）をキャッシュキーにする"""
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


class OfficialUpdateScraper:
    """公式情報スクレイパー"""

    def __init__(
        self,
        url: str | None = None,
        selector: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self.url = url or settings.official_updates_url
        self.selector = selector or settings.official_updates_selector
        self.timeout = timeout if timeout is not None else settings.scrape_timeout
        self.client = httpx.AsyncClient(
            timeout=self.timeout, follow_redirects=True, transport=transport
        )

    async def close(self):
        """クライアントを閉じる"""
        await self.client.aclose()

    async def fetch(self) -> list[dict[str, Any]]:
        """取得元ページを取得して公式情報を抽出

        Returns:
            公式情報のリスト

        Raises:
            ScrapeTimeoutError: タイムアウト
            ScrapeError: 通信エラー、2xx 以外のステータス、デコード・パースエラー
        """
        try:
            logger.info(f"Fetching official updates from {self.url}")
            # 接続から本文の読み込みまで全体で timeout 秒以内
            async with asyncio.timeout(self.timeout):
                response = await self.client.get(self.url)
            response.raise_for_status()

            html = response.content.decode("utf-8")
            updates = extract_updates(html, self.selector)

            logger.info(f"Extracted {len(updates)} official updates")
            return updates

        except (httpx.TimeoutException, TimeoutError) as e:
            logger.error(f"Official updates fetch timed out after {self.timeout}s")
            raise ScrapeTimeoutError("Official updates fetch timed out", original_error=e)
        except httpx.HTTPStatusError as e:
            logger.error(f"Official updates source returned {e.response.status_code}")
            raise ScrapeError(
                "Official updates source returned an error status",
                details={"status_code": e.response.status_code},
                original_error=e,
            )
        except httpx.HTTPError as e:
            logger.error(f"HTTP error fetching official updates: {str(e)}")
            raise ScrapeError("Official updates fetch failed", original_error=e)
        except Exception as e:
            # デコード・パースエラー
            logger.error(f"Failed to parse official updates: {str(e)}")
            raise ScrapeError("Failed to parse official updates", original_error=e)


class OfficialUpdatesService:
    """公式情報のリードスルーキャッシュ

    キャッシュヒット時はキャッシュを返し、未登録・期限切れの場合は取得して
    保存してから返す。取得失敗時はキャッシュを変更しない。同一キーの同時ミスは
    それぞれ取得・保存する（後勝ち）。
    """

    def __init__(self, cache_store: CacheStore, scraper: OfficialUpdateScraper):
        self.cache_store = cache_store
        self.scraper = scraper

    async def get_updates(self, cache_key: str, now: datetime | None = None) -> Any:
        """公式情報を取得

        Args:
            cache_key: キャッシュキー（リクエスト URL）
            now: 判定時刻（省略時は現在時刻）

        Returns:
            公式情報のリスト

        Raises:
            ScrapeError: 取得エラー
            DatabaseError: ストアエラー
        """
        now = now or utcnow()

        cached = await self.cache_store.lookup(cache_key)
        if cached is not None and is_fresh(cached, now):
            logger.debug(f"Cache hit: {cache_key}")
            return cached.value

        logger.debug(f"Cache {'expired' if cached else 'miss'}: {cache_key}")

        updates = await self.scraper.fetch()
        await self.cache_store.upsert(cache_key, updates)

        logger.info(f"Official updates refreshed: {cache_key}")
        return updates
