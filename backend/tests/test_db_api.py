"""API tests for diagnostics, the envelope and collection setup."""

from fastapi.testclient import TestClient

from flowquest.main import create_app


class TestDatabaseCheck:

    def test_connection_only(self, client):
        res = client.get("/api/db/test")
        assert res.status_code == 200
        assert res.json()["data"] == {"connected": True, "initialized": None}

    def test_init_ensures_collections_and_seeds_agent(self, client):
        res = client.get("/api/db/test", params={"init": "true"})
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["initialized"] is True
        assert "interaction_reports" in data["collections"]
        assert "session_records" in data["collections"]

        agents = client.get("/api/agents").json()["data"]
        assert [a["name"] for a in agents] == ["Barista Bella"]

        # A second init leaves existing agents alone
        client.get("/api/db/test", params={"init": "true"})
        assert len(client.get("/api/agents").json()["data"]) == 1


class TestCollectionsOnDemand:

    def test_tables_created_on_first_use_without_startup_init(self, settings):
        app = create_app(settings.model_copy(update={"DB_INIT_ON_STARTUP": False}))
        with TestClient(app) as client:
            res = client.put("/api/reports", json={"activity_id": "a", "user_id": "u", "session_id": "s"})
            assert res.status_code == 200
            assert "interaction_reports" in app.state.store._ready
            assert "activities" not in app.state.store._ready


class TestEnvelope:

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "ok"
        assert client.get("/api/health").json()["chat_provider"] == "none"

    def test_unknown_route(self, client):
        res = client.get("/api/nothing-here")
        assert res.status_code == 404
        assert res.json() == {"success": False, "error": "Not Found"}

    def test_success_has_no_error_field(self, client):
        body = client.get("/api/reports").json()
        assert body == {"success": True, "data": []}
