"""API tests for /api/reports."""

KEY = {"activity_id": "a", "user_id": "u", "session_id": "s"}


class TestUpsertReport:

    def test_same_natural_key_twice_yields_one_report(self, client, ticking_clock):
        first = client.put("/api/reports", json={**KEY, "summary": "first"}).json()["data"]
        second = client.put("/api/reports", json={**KEY, "summary": "second"}).json()["data"]

        assert second["_id"] == first["_id"]
        assert second["generated_at"] > first["generated_at"]

        listed = client.get("/api/reports", params=KEY).json()["data"]
        assert len(listed) == 1
        assert listed[0]["summary"] == "second"

    def test_omitted_summary_resets_to_empty(self, client):
        client.put("/api/reports", json={**KEY, "summary": "x"})
        res = client.put("/api/reports", json={**KEY, "unit_results": []})
        assert res.status_code == 200
        assert res.json()["data"]["summary"] == ""

    def test_unit_results_are_replaced_whole(self, client):
        client.put("/api/reports", json={**KEY, "unit_results": [
            {"unit_id": "u1", "status": "passed", "turn_count": 3, "important_keywords": ["latte"]},
            {"unit_id": "u2", "status": "failed", "turn_count": 8},
        ]})
        res = client.put("/api/reports", json={**KEY, "unit_results": [
            {"unit_id": "u3", "status": "passed", "turn_count": 1},
        ]})
        assert [r["unit_id"] for r in res.json()["data"]["unit_results"]] == ["u3"]

    def test_missing_key_is_rejected(self, client):
        res = client.put("/api/reports", json={"activity_id": "a", "summary": "orphan"})
        assert res.status_code == 400
        assert res.json()["success"] is False
        assert client.get("/api/reports").json()["data"] == []

    def test_address_by_id(self, client):
        doc_id = "507f1f77bcf86cd799439011"
        res = client.put("/api/reports", json={"_id": doc_id, **KEY, "summary": "v1"})
        assert res.json()["data"]["_id"] == doc_id

        res = client.put("/api/reports", json={"_id": doc_id, "summary": "v2"})
        data = res.json()["data"]
        assert data["summary"] == "v2"
        assert data["session_id"] == "s"

    def test_generated_at_from_client_is_ignored(self, client):
        res = client.put("/api/reports", json={**KEY, "generated_at": "1999-01-01T00:00:00"})
        assert res.status_code == 200
        assert not res.json()["data"]["generated_at"].startswith("1999")

    def test_invalid_unit_result_status(self, client):
        res = client.put("/api/reports", json={**KEY, "unit_results": [{"unit_id": "u1", "status": "maybe"}]})
        assert res.status_code == 400


class TestReportQueries:

    def test_list_newest_first(self, client, ticking_clock):
        for session_id in ("s1", "s2", "s3"):
            client.put("/api/reports", json={"activity_id": "a", "user_id": "u", "session_id": session_id})
        client.put("/api/reports", json={"activity_id": "a", "user_id": "u", "session_id": "s1", "summary": "again"})

        listed = client.get("/api/reports", params={"activity_id": "a"}).json()["data"]
        assert [r["session_id"] for r in listed] == ["s1", "s3", "s2"]

    def test_get_by_id(self, client):
        created = client.put("/api/reports", json=KEY).json()["data"]
        res = client.get(f"/api/reports/{created['_id']}")
        assert res.status_code == 200
        assert res.json()["data"]["session_id"] == "s"

    def test_get_malformed_and_absent(self, client):
        assert client.get("/api/reports/abc").status_code == 400
        res = client.get("/api/reports/507f1f77bcf86cd799439000")
        assert res.status_code == 404
        assert "data" not in res.json()


class TestPatchReport:

    def test_partial_merge_refreshes_generated_at(self, client, ticking_clock):
        created = client.put("/api/reports", json={**KEY, "summary": "s1", "user_name": "Ann"}).json()["data"]
        res = client.patch(f"/api/reports/{created['_id']}", json={"summary": "s2"})
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["summary"] == "s2"
        assert data["user_name"] == "Ann"
        assert data["generated_at"] > created["generated_at"]

    def test_patch_absent_and_malformed(self, client):
        assert client.patch("/api/reports/507f1f77bcf86cd799439000", json={"summary": "x"}).status_code == 404
        assert client.patch("/api/reports/nope", json={"summary": "x"}).status_code == 400
