"""Integration tests for the real-time channel"""
import pytest
from fastapi.testclient import TestClient

from src.main import create_app


@pytest.fixture
def client():
    """Test client for FastAPI app"""
    with TestClient(create_app()) as client:
        yield client


def test_health(client):
    """ヘルスチェックのテスト"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"

    root = client.get("/")
    assert root.json()["name"] == "Disaster Coordination API"


def test_ping_pong(client):
    """ping に pong を返す"""
    with client.websocket_connect("/ws") as ws:
        ws.send_text("ping")
        assert ws.receive_json() == {"event": "pong"}


def test_create_disaster_broadcasts_once(client):
    """登録すると disaster_updated が 1 回配信される"""
    payload = {
        "title": "Quake",
        "location_name": "SF",
        "description": "Strong shaking downtown",
        "tags": ["earthquake"],
        "owner_id": "u1",
    }

    with client.websocket_connect("/ws") as ws:
        response = client.post("/disasters", json=payload)
        assert response.status_code == 200

        message = ws.receive_json()
        assert message["event"] == "disaster_updated"
        assert message["data"] == response.json()

        [row] = message["data"]
        assert row["audit_trail"][0]["action"] == "create"
        assert row["audit_trail"][0]["user_id"] == "u1"

        # 2 件目のイベントが無いことを確認
        ws.send_text("ping")
        assert ws.receive_json() == {"event": "pong"}

    listed = client.get("/disasters", params={"tag": "earthquake"})
    assert [d["title"] for d in listed.json()] == ["Quake"]
