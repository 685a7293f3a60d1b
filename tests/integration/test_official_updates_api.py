"""Integration tests for the cached official updates endpoint"""
from datetime import timedelta

import pytest

from src.models.cache import CacheEntry, utcnow
from src.services.cache_store import CacheStore

FLOOD_PAGE = '<div class="disaster-info"> Flood in NYC </div>'


@pytest.mark.asyncio
async def test_cache_miss_then_hit(async_client, upstream, test_db):
    """初回は取得してキャッシュし、2 回目はキャッシュから返す"""
    upstream.html = FLOOD_PAGE

    first = await async_client.get("/disasters/xyz/official-updates")
    assert first.status_code == 200
    assert first.json() == [{"title": "Flood in NYC"}]
    assert upstream.call_count == 1
    assert str(upstream.requests[0].url) == "https://relief.example.org/"

    cached = await CacheStore(test_db).lookup("/disasters/xyz/official-updates")
    assert cached is not None
    assert cached.value == [{"title": "Flood in NYC"}]
    assert cached.expires_at > utcnow() + timedelta(minutes=59)

    second = await async_client.get("/disasters/xyz/official-updates")
    assert second.status_code == 200
    assert second.content == first.content
    assert upstream.call_count == 1


@pytest.mark.asyncio
async def test_cache_expiry_refreshes(async_client, upstream, test_db):
    """期限切れのキャッシュは再取得して上書きする"""
    key = "/disasters/1/official-updates"
    test_db.add(
        CacheEntry(key=key, value=[{"title": "old"}], expires_at=utcnow() - timedelta(seconds=1))
    )
    await test_db.commit()
    upstream.html = '<div class="disaster-info">new</div>'

    response = await async_client.get(key)

    assert response.status_code == 200
    assert response.json() == [{"title": "new"}]
    assert upstream.call_count == 1

    cached = await CacheStore(test_db).lookup(key)
    assert cached.value == [{"title": "new"}]
    expected = utcnow() + timedelta(hours=1)
    assert abs(cached.expires_at - expected) < timedelta(minutes=1)


@pytest.mark.asyncio
async def test_scrape_failure_leaves_cache_unchanged(async_client, upstream, test_db):
    """取得元のエラーは 500 で、キャッシュは変更しない"""
    upstream.status_code = 503
    upstream.html = "Service Unavailable"

    response = await async_client.get("/disasters/1/official-updates")

    assert response.status_code == 500
    assert response.json() == {"error": "Scrape failed"}
    assert await CacheStore(test_db).lookup("/disasters/1/official-updates") is None


@pytest.mark.asyncio
async def test_scrape_failure_keeps_stale_entry(async_client, upstream, test_db):
    """取得失敗時は期限切れのエントリもそのまま残る"""
    key = "/disasters/1/official-updates"
    expires_at = utcnow() - timedelta(minutes=5)
    test_db.add(CacheEntry(key=key, value=[{"title": "old"}], expires_at=expires_at))
    await test_db.commit()
    upstream.status_code = 502

    response = await async_client.get(key)

    assert response.status_code == 500
    assert response.json() == {"error": "Scrape failed"}
    cached = await CacheStore(test_db).lookup(key)
    assert cached.value == [{"title": "old"}]
    assert cached.expires_at == expires_at


@pytest.mark.asyncio
async def test_no_matching_nodes_returns_empty_list(async_client, upstream):
    """一致するノードがなければ空リスト（200）"""
    upstream.html = "<html><body><h1>Red Cross</h1></body></html>"

    response = await async_client.get("/disasters/1/official-updates")

    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_query_string_is_part_of_cache_key(async_client, upstream, test_db):
    """クエリ文字列が違えば別のキャッシュエントリ"""
    upstream.html = FLOOD_PAGE

    await async_client.get("/disasters/1/official-updates")
    await async_client.get("/disasters/1/official-updates", params={"lang": "en"})

    assert upstream.call_count == 2
    store = CacheStore(test_db)
    assert await store.lookup("/disasters/1/official-updates") is not None
    assert await store.lookup("/disasters/1/official-updates?lang=en") is not None
