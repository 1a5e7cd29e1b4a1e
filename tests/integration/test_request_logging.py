"""Request id propagation through the logging middleware."""

import uuid


class TestRequestId:
    def test_incoming_id_is_echoed(self, fallback_client):
        res = fallback_client.get("/api/health", headers={"X-Request-ID": "req-42"})
        assert res.status_code == 200
        assert res.headers["X-Request-ID"] == "req-42"

    def test_missing_id_is_generated(self, fallback_client):
        first = fallback_client.get("/api/health").headers["X-Request-ID"]
        second = fallback_client.get("/api/health").headers["X-Request-ID"]
        assert uuid.UUID(first)
        assert first != second

    def test_error_responses_carry_the_id(self, client):
        res = client.put(
            "/api/projects/00000000-0000-0000-0000-000000000000",
            json={"projectName": "x"},
            headers={"X-Request-ID": "req-404"},
        )
        assert res.status_code == 404
        assert res.headers["X-Request-ID"] == "req-404"
