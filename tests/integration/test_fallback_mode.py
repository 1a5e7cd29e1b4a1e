"""Behaviour when no database is configured: stub data, never an error."""

import pytest


class TestFallbackLogin:
    def test_default_admin(self, fallback_client):
        res = fallback_client.post("/api/auth/login", json={"username": "admin", "password": "123"})
        assert res.status_code == 200
        assert res.json() == {"success": True, "user": {"username": "admin", "id": "default-admin"}}

    def test_anything_else_is_rejected(self, fallback_client):
        res = fallback_client.post("/api/auth/login", json={"username": "admin", "password": "admin"})
        assert res.status_code == 401


class TestFallbackReads:
    @pytest.mark.parametrize(
        "path",
        ["/api/employees", "/api/projects", "/api/billing", "/api/quotations", "/api/quote-requests", "/api/task-reminders"],
    )
    def test_lists_are_empty(self, fallback_client, path):
        res = fallback_client.get(path)
        assert res.status_code == 200
        assert res.json() == []

    def test_single_project_is_null(self, fallback_client):
        assert fallback_client.get("/api/projects/anything").json() is None

    def test_profile_is_mocked(self, fallback_client):
        body = fallback_client.get("/api/profile", params={"userId": "default-admin"}).json()
        assert body["id"] == "default-admin"
        assert body["username"] == "admin"

    def test_health_reports_database(self, fallback_client):
        assert fallback_client.get("/api/health").json()["status"] == "ok"


class TestFallbackWrites:
    def test_create_employee_echoes_with_temp_id(self, fallback_client):
        res = fallback_client.post("/api/employees", json={"username": "jdoe", "fullName": "John Doe"})
        assert res.status_code == 201
        body = res.json()
        assert body["id"].startswith("temp-")
        assert body["fullName"] == "John Doe"

    def test_project_update_echoes_camel_case(self, fallback_client):
        body = fallback_client.put("/api/projects/p1", json={"projectName": "Tower"}).json()
        assert body["id"] == "p1"
        assert body["projectName"] == "Tower"
        assert body["lastEditedBy"] == "Admin"
        assert body["tasks"] == []

    def test_task_create_stub(self, fallback_client):
        body = fallback_client.post("/api/projects/p1/tasks", json={"name": "Survey"}).json()
        assert body["id"].startswith("temp-")
        assert body["isFinished"] is False
        assert body["orderIndex"] == 0

    def test_batch_task_update_stub(self, fallback_client):
        res = fallback_client.put("/api/projects/p1/tasks", json={"tasks": [{"id": "t1", "name": "x"}]})
        assert res.json() == {"success": True, "updated": 0}

    def test_reminder_side_endpoints(self, fallback_client):
        assert fallback_client.post("/api/task-reminders/r1/complete").json() == {"success": True}
        assert fallback_client.get("/api/task-reminders/r1/tags").json() == []
        assert fallback_client.delete("/api/task-reminders/r1").json() == {"success": True}

    def test_quote_request_is_pending(self, fallback_client):
        res = fallback_client.post("/api/quote-requests", json={"fullName": "Pedro"})
        assert res.status_code == 201
        assert res.json()["status"] == "pending"
