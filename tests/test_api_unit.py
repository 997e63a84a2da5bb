"""
Unit tests using FastAPI TestClient (no separate server needed).
"""

import pytest
from fastapi.testclient import TestClient

from pheres.core.config import RuntimeConfig
from pheres.server.deps import reset_agent_store
from pheres.server.main import app, create_app


@pytest.fixture
def client():
    reset_agent_store()
    return TestClient(app)


@pytest.fixture
def hanoi_agent(client, hanoi_source):
    r = client.post("/api/agents", json={"name": "hanoi", "source": hanoi_source})
    assert r.status_code == 200
    return r.json()


class TestAgentsUnit:
    def test_root(self, client):
        assert client.get("/").json()["name"] == "pheres API"

    def test_cors_off_by_default(self):
        r = TestClient(create_app(RuntimeConfig())).get("/", headers={"Origin": "http://localhost:3000"})
        assert "access-control-allow-origin" not in r.headers

    def test_cors_origins_from_config(self):
        config = RuntimeConfig(cors_origins=["http://localhost:3000"])
        r = TestClient(create_app(config)).get("/", headers={"Origin": "http://localhost:3000"})
        assert r.headers["access-control-allow-origin"] == "http://localhost:3000"

    def test_create_runs_initial_goals(self, hanoi_agent):
        assert hanoi_agent["name"] == "hanoi"
        assert hanoi_agent["belief_count"] == 6
        assert hanoi_agent["plan_count"] == 1
        assert hanoi_agent["output"] == ["large"]
        assert hanoi_agent["pending"] == 0

    def test_create_without_running(self, client, hanoi_source):
        r = client.post("/api/agents", json={"name": "idle", "source": hanoi_source, "run": False})
        assert r.json()["output"] == []
        assert r.json()["pending"] == 7

    def test_create_parse_error(self, client, broken_path):
        r = client.post("/api/agents", json={"name": "broken", "source": broken_path.read_text()})
        assert r.status_code == 400
        assert "unterminated block comment" in r.json()["detail"]

    def test_create_lenient(self, client, broken_path):
        payload = {"name": "broken", "source": broken_path.read_text(), "lenient": True}
        r = client.post("/api/agents", json=payload)
        assert r.status_code == 200
        assert r.json()["belief_count"] == 5
        assert len(r.json()["errors"]) == 1

    def test_list_and_get(self, client, hanoi_agent):
        agents = client.get("/api/agents").json()["agents"]
        assert [a["id"] for a in agents] == [hanoi_agent["id"]]

        data = client.get(f"/api/agents/{hanoi_agent['id']}").json()
        assert data["name"] == "hanoi"
        assert "disc(large, 3)" in data["beliefs"]
        assert data["transcript"] == ["large"]

    def test_unknown_agent(self, client):
        assert client.get("/api/agents/nope").status_code == 404
        assert client.delete("/api/agents/nope").status_code == 404
        assert client.post("/api/agents/nope/query", json={"query": "a"}).status_code == 404

    def test_delete(self, client, hanoi_agent):
        r = client.delete(f"/api/agents/{hanoi_agent['id']}")
        assert r.json() == {"deleted": hanoi_agent["id"]}
        assert client.get("/api/agents").json()["agents"] == []


class TestEventsUnit:
    def test_achieve_returns_new_output(self, client, hanoi_agent):
        r = client.post(f"/api/agents/{hanoi_agent['id']}/events", json={"literal": "sort"})
        assert r.status_code == 200
        assert r.json()["output"] == ["large"]
        assert r.json()["handled"] == 1

    def test_belief_events_change_answers(self, client, hanoi_agent):
        agent_id = hanoi_agent["id"]
        client.post(f"/api/agents/{agent_id}/events", json={"kind": "remove", "literal": "on(large, 0, table)"})
        client.post(f"/api/agents/{agent_id}/events", json={"kind": "add", "literal": "on(large, 2, table)"})

        r = client.post(f"/api/agents/{agent_id}/query", json={"query": "top(Disc, Pin)"})
        assert r.json()["solutions"] == [
            {"Disc": "small", "Pin": "1"},
            {"Disc": "large", "Pin": "2"},
        ]

    def test_bad_event(self, client, hanoi_agent):
        r = client.post(f"/api/agents/{hanoi_agent['id']}/events", json={"kind": "add", "literal": "on(X, 1)"})
        assert r.status_code == 400
        assert "unbound variables" in r.json()["detail"]


class TestQueryUnit:
    def test_query(self, client, hanoi_agent):
        r = client.post(f"/api/agents/{hanoi_agent['id']}/query", json={"query": "top(Disc, Pin)"})
        assert r.json()["solutions"] == [
            {"Disc": "large", "Pin": "0"},
            {"Disc": "small", "Pin": "1"},
        ]

    def test_ground_query(self, client, hanoi_agent):
        r = client.post(f"/api/agents/{hanoi_agent['id']}/query", json={"query": "disc(med, 2)"})
        assert r.json()["solutions"] == [{}]

    def test_query_parse_error(self, client, hanoi_agent):
        r = client.post(f"/api/agents/{hanoi_agent['id']}/query", json={"query": "top(Disc"})
        assert r.status_code == 400
