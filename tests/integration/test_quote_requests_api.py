"""Integration tests for the public quote request intake and its review flow."""

import pytest


VALID_REQUEST = {
    "fullName": "Pedro Penduko",
    "email": "pedro.penduko@gmail.com",
    "phoneNumber": "09171234567",
    "projectType": "Renovation",
    "projectLocation": "Makati City",
    "projectDetails": "Kitchen and bathroom renovation",
}


@pytest.fixture
def quote_request(client):
    return client.post("/api/quote-requests", json=VALID_REQUEST).json()


class TestQuoteRequests:
    def test_create_forces_pending(self, client):
        res = client.post("/api/quote-requests", json={**VALID_REQUEST, "status": "approved"})
        assert res.status_code == 201
        body = res.json()
        assert body["status"] == "pending"
        assert body["estimated_budget"] is None
        assert body["reviewed_by"] is None

    @pytest.mark.parametrize("field", ["fullName", "email", "phoneNumber", "projectType", "projectLocation", "projectDetails"])
    def test_required_fields(self, client, field):
        res = client.post("/api/quote-requests", json={**VALID_REQUEST, field: ""})
        assert res.status_code == 400
        assert res.json()["error"] == "All required fields must be provided"

    def test_list_filters_by_status(self, client, quote_request):
        other = client.post("/api/quote-requests", json=VALID_REQUEST).json()
        client.put(f"/api/quote-requests/{other['id']}", json={"status": "contacted"})
        pending = client.get("/api/quote-requests", params={"status": "pending"}).json()
        assert [r["id"] for r in pending] == [quote_request["id"]]
        assert len(client.get("/api/quote-requests").json()) == 2

    def test_review_records_reviewer(self, client, quote_request, make_user, headers_for):
        reviewer = make_user()
        res = client.put(
            f"/api/quote-requests/{quote_request['id']}",
            json={"status": "reviewed"},
            headers=headers_for(reviewer),
        )
        body = res.json()
        assert body["status"] == "reviewed"
        assert body["reviewed_by"] == str(reviewer.id)
        assert body["reviewed_at"] is not None

    def test_back_to_pending_does_not_record_reviewer(self, client, quote_request, make_user, headers_for):
        reviewer = make_user()
        res = client.put(
            f"/api/quote-requests/{quote_request['id']}",
            json={"status": "pending"},
            headers=headers_for(reviewer),
        )
        assert res.json()["reviewed_by"] is None

    def test_missing_request(self, client):
        missing = "00000000-0000-0000-0000-000000000000"
        res = client.get(f"/api/quote-requests/{missing}")
        assert res.status_code == 404
        assert res.json() is None
        assert client.put(f"/api/quote-requests/{missing}", json={"status": "reviewed"}).status_code == 404

    def test_delete(self, client, quote_request):
        assert client.delete(f"/api/quote-requests/{quote_request['id']}").json() == {"success": True}
        assert client.get("/api/quote-requests").json() == []


class TestContactValidation:
    def test_valid_contact_details(self, client):
        res = client.post("/api/quote-requests/validate", json=VALID_REQUEST)
        assert res.status_code == 200
        assert res.json() == {"valid": True, "errors": {}}

    def test_international_phone_format(self, client):
        res = client.post("/api/quote-requests/validate", json={"phoneNumber": "+639171234567"})
        assert res.json()["valid"] is True

    def test_reports_each_bad_field(self, client):
        res = client.post(
            "/api/quote-requests/validate", json={"email": "pedro at gmail.com", "phoneNumber": "0812345678"}
        )
        assert res.json() == {
            "valid": False,
            "errors": {
                "email": "Please enter a valid email address",
                "phoneNumber": "Please enter a valid Philippine phone number (e.g., +639123456789 or 09123456789)",
            },
        }

    def test_works_without_database(self, fallback_client):
        res = fallback_client.post("/api/quote-requests/validate", json={"email": "pedro@"})
        assert res.json()["errors"] == {"email": "Please enter a valid email address"}

    def test_intake_only_checks_presence(self, client):
        res = client.post("/api/quote-requests", json={**VALID_REQUEST, "email": "pedro@", "phoneNumber": "12345"})
        assert res.status_code == 201
        assert res.json()["email"] == "pedro@"
