import sys
import os
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from fastapi.testclient import TestClient
from main import app
from socket_manager import socket_manager


@pytest.fixture(autouse=True)
def clear_state():
    socket_manager.reset()
    yield
    socket_manager.reset()


client = TestClient(app)


class TestHealthEndpoints:
    def test_root(self):
        res = client.get("/")
        assert res.status_code == 200
        assert "message" in res.json()

    def test_health(self):
        res = client.get("/health")
        assert res.status_code == 200
        assert res.json()["status"] == "healthy"


class TestStateEndpoint:
    def test_empty_room(self):
        res = client.get("/state")
        assert res.status_code == 200
        data = res.json()
        assert data["type"] == "ROOM_STATE"
        assert data["players"] == []
        assert data["scores"] == {}
        assert data["master"] is None
        assert data["round"] == 1
        assert data["state"] == "IDLE"
        assert data["seconds_remaining"] is None

    def test_reflects_joined_players(self):
        roster = socket_manager.session.roster
        roster.join("Alice")
        roster.join("Bob")
        roster.award("Bob", 10)
        socket_manager.session.master = "Alice"
        data = client.get("/state").json()
        assert data["players"] == ["Alice", "Bob"]
        assert data["scores"] == {"Alice": 0, "Bob": 10}
        assert data["master"] == "Alice"

    def test_state_is_read_only(self):
        res = client.post("/state", json={"players": ["Mallory"]})
        assert res.status_code == 405
        assert socket_manager.session.roster.size() == 0
