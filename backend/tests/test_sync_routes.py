"""Test sync endpoints."""

from unittest.mock import patch

from app.config import get_settings

from ohabits.sync import SyncReadError


def _push(client, headers, items):
    return client.post("/api/sync/push", json={"items": items}, headers=headers)


class TestSyncAll:
    """Test GET /api/sync/all."""

    def test_empty_snapshot_has_every_bucket(self, client, auth_headers):
        response = client.get("/api/sync/all", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert "lastSyncTimestamp" in body
        assert set(body["data"]) == {
            "habits",
            "habitCompletions",
            "medications",
            "medicationLogs",
            "moodRatings",
            "dailyNotes",
            "todos",
            "events",
            "workoutTemplates",
            "workoutLogs",
            "markdownNotes",
            "userSettings",
        }
        assert all(records == [] for records in body["data"].values())

    def test_read_failure_is_error_envelope(self, client, auth_headers):
        with patch(
            "app.routes.sync.read_snapshot",
            side_effect=SyncReadError("todos", RuntimeError("boom")),
        ):
            response = client.get("/api/sync/all", headers=auth_headers)

        assert response.status_code == 500
        assert response.json() == {"status": "error", "error": "Failed to retrieve sync data"}

    def test_delta_read_failure_hides_bucket(self, client, auth_headers):
        with patch(
            "app.routes.sync.read_delta",
            side_effect=SyncReadError("moodRatings", RuntimeError("database is locked")),
        ):
            response = client.post("/api/sync/changes", json={}, headers=auth_headers)

        assert response.status_code == 500
        assert "moodRatings" not in response.text
        assert response.json()["error"] == "Failed to retrieve sync data"


class TestSyncPush:
    """Test POST /api/sync/push."""

    def test_push_then_snapshot(self, client, auth_headers):
        response = _push(
            client,
            auth_headers,
            [
                {"local_id": "L1", "type": "habit", "data": {"name": "Read"}},
                {"local_id": "L2", "type": "mood", "data": {"rating": 4, "date": "2026-01-02"}},
            ],
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        results = body["results"]
        assert [r["local_id"] for r in results] == ["L1", "L2"]
        assert all(r["success"] for r in results)

        snapshot = client.get("/api/sync/all", headers=auth_headers).json()
        assert snapshot["data"]["habits"][0]["id"] == results[0]["server_id"]
        assert snapshot["data"]["habits"][0]["name"] == "Read"
        assert snapshot["data"]["moodRatings"][0]["id"] == results[1]["server_id"]

    def test_camel_case_keys_accepted(self, client, auth_headers):
        created = _push(
            client, auth_headers, [{"localId": "L1", "type": "habit", "data": {"name": "Read"}}]
        ).json()["results"][0]

        response = _push(
            client,
            auth_headers,
            [
                {
                    "localId": "L1",
                    "serverId": created["server_id"],
                    "type": "habit",
                    "isDeleted": True,
                    "updatedAt": "2026-01-02T10:00:00Z",
                }
            ],
        )

        result = response.json()["results"][0]
        assert result["success"] is True
        assert result["server_id"] == created["server_id"]

    def test_partial_failure_keeps_order(self, client, auth_headers):
        response = _push(
            client,
            auth_headers,
            [
                {"local_id": "A", "type": "habit", "data": {"name": "Read"}},
                {"local_id": "B", "type": "sleep", "data": {}},
                {"local_id": "C", "type": "todo", "data": {"text": "x", "date": "2026-01-02"}},
            ],
        )

        assert response.status_code == 200
        results = response.json()["results"]
        assert [r["success"] for r in results] == [True, False, True]
        assert results[1]["error"] == "Unknown item type: sleep"
        assert results[1]["server_id"] is None

    def test_never_synced_delete(self, client, auth_headers):
        response = _push(
            client, auth_headers, [{"local_id": "L1", "type": "todo", "is_deleted": True}]
        )

        result = response.json()["results"][0]
        assert result == {"local_id": "L1", "server_id": None, "success": True, "error": None}

    def test_infinite_weight_fails_item(self, client, auth_headers):
        # Python's json module reads the bare Infinity token
        body = (
            '{"items":[{"local_id":"L1","type":"workoutLog",'
            '"data":{"weight":Infinity,"date":"2026-01-02"}}]}'
        )
        response = client.post(
            "/api/sync/push",
            content=body,
            headers={**auth_headers, "Content-Type": "application/json"},
        )

        assert response.status_code == 200
        result = response.json()["results"][0]
        assert result["success"] is False
        assert result["error"].startswith("Invalid workoutLog payload: weight")

        snapshot = client.get("/api/sync/all", headers=auth_headers).json()
        assert snapshot["data"]["workoutLogs"] == []

    def test_empty_batch_rejected(self, client, auth_headers):
        response = _push(client, auth_headers, [])

        assert response.status_code == 400
        assert response.json() == {"status": "error", "error": "No items to sync"}

    def test_oversized_batch_rejected(self, client, auth_headers):
        limit = get_settings().sync_max_push_items
        items = [{"local_id": str(i), "type": "habit", "data": {"name": "x"}} for i in range(limit + 1)]

        response = _push(client, auth_headers, items)

        assert response.status_code == 400
        assert "Too many items" in response.json()["error"]

    def test_malformed_item_is_422(self, client, auth_headers):
        response = _push(client, auth_headers, [{"type": "habit", "data": {"name": "Read"}}])

        assert response.status_code == 422
        body = response.json()
        assert body["status"] == "error"
        assert "local_id" in body["error"] or "localId" in body["error"]


class TestSyncChanges:
    """Test POST /api/sync/changes."""

    def test_no_since_returns_everything(self, client, auth_headers):
        _push(client, auth_headers, [{"local_id": "L1", "type": "habit", "data": {"name": "Read"}}])

        response = client.post("/api/sync/changes", json={}, headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert list(body["data"]) == ["habits"]

    def test_missing_body_means_epoch(self, client, auth_headers):
        _push(client, auth_headers, [{"local_id": "L1", "type": "habit", "data": {"name": "Read"}}])

        response = client.post("/api/sync/changes", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["data"]["habits"][0]["name"] == "Read"

    def test_cursor_round_trip(self, client, auth_headers):
        _push(client, auth_headers, [{"local_id": "L1", "type": "habit", "data": {"name": "Old"}}])
        cursor = client.get("/api/sync/all", headers=auth_headers).json()["lastSyncTimestamp"]

        _push(
            client,
            auth_headers,
            [{"local_id": "L2", "type": "todo", "data": {"text": "New", "date": "2026-01-02"}}],
        )

        body = client.post("/api/sync/changes", json={"since": cursor}, headers=auth_headers).json()
        assert list(body["data"]) == ["todos"]
        assert body["data"]["todos"][0]["text"] == "New"
        assert body["lastSyncTimestamp"] >= cursor

    def test_invalid_since_is_422(self, client, auth_headers):
        response = client.post("/api/sync/changes", json={"since": "soon"}, headers=auth_headers)

        assert response.status_code == 422
        assert response.json()["status"] == "error"


class TestOwnerIsolation:
    def test_other_owner_sees_nothing(self, client, auth_headers, other_auth_headers):
        created = _push(
            client, auth_headers, [{"local_id": "L1", "type": "habit", "data": {"name": "Mine"}}]
        ).json()["results"][0]

        snapshot = client.get("/api/sync/all", headers=other_auth_headers).json()
        assert snapshot["data"]["habits"] == []

        hijack = _push(
            client,
            other_auth_headers,
            [
                {
                    "local_id": "X",
                    "server_id": created["server_id"],
                    "type": "habit",
                    "data": {"name": "Hijacked"},
                }
            ],
        ).json()["results"][0]
        assert hijack["success"] is False

        mine = client.get("/api/sync/all", headers=auth_headers).json()
        assert mine["data"]["habits"][0]["name"] == "Mine"


class TestSyncStatus:
    def test_status(self, client, auth_headers):
        response = client.get("/api/sync/status", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["userId"] == "usr_TEST_ONLY_000000"
        assert body["serverTimestamp"].endswith("+00:00")


class TestServiceEndpoints:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "database": "connected"}
