"""Integration tests for billing records and quotations."""


class TestBilling:
    def test_amount_is_normalized(self, client):
        res = client.post(
            "/api/billing",
            json={"date": "2024-04-01", "salesInvoiceNumber": 1001, "amount": "$1,234.56abc"},
        )
        assert res.status_code == 201
        body = res.json()
        assert body["amount"] == 1234.56
        assert body["sales_invoice_number"] == "1001"
        assert body["status"] == "Not Paid"

    def test_unparsable_amount_becomes_zero(self, client):
        assert client.post("/api/billing", json={"amount": "TBD"}).json()["amount"] == 0.0

    def test_list_newest_date_first(self, client):
        for day in ("2024-01-10", "2024-03-05", "2024-02-20"):
            client.post("/api/billing", json={"date": day, "amount": 1})
        dates = [b["date"] for b in client.get("/api/billing").json()]
        assert dates == ["2024-03-05", "2024-02-20", "2024-01-10"]

    def test_update_records_editor_name(self, client, make_user, headers_for):
        entry = client.post("/api/billing", json={"amount": 100}).json()
        editor = make_user(full_name="  Liza Santos ")
        res = client.put(
            f"/api/billing/{entry['id']}",
            json={"amount": "200", "status": "Paid", "lastEditedBy": "someone-else"},
            headers=headers_for(editor),
        )
        assert res.status_code == 200
        body = res.json()
        assert body["amount"] == 200.0
        assert body["status"] == "Paid"
        assert body["last_edited_by"] == "Liza Santos"

    def test_update_without_identity_keeps_client_editor(self, client):
        entry = client.post("/api/billing", json={"amount": 100}).json()
        res = client.put(f"/api/billing/{entry['id']}", json={"amount": 100, "lastEditedBy": "front desk"})
        assert res.json()["last_edited_by"] == "front desk"

    def test_missing_entry(self, client):
        missing = "00000000-0000-0000-0000-000000000000"
        assert client.get(f"/api/billing/{missing}").json() is None
        assert client.put(f"/api/billing/{missing}", json={"amount": 1}).status_code == 404

    def test_delete(self, client):
        entry = client.post("/api/billing", json={"amount": 100}).json()
        assert client.delete(f"/api/billing/{entry['id']}").json() == {"success": True}
        assert client.get("/api/billing").json() == []


class TestQuotations:
    def test_defaults(self, client):
        res = client.post("/api/quotations", json={"quotationNumber": 42, "clientName": "Ayala"})
        assert res.status_code == 201
        body = res.json()
        assert body["quotation_number"] == "42"
        assert body["terms_template"] == "template1"
        assert body["status"] == "Draft"

    def test_update_keeps_status_unless_sent(self, client):
        q = client.post("/api/quotations", json={"clientName": "Ayala", "status": "Sent"}).json()
        res = client.put(f"/api/quotations/{q['id']}", json={"clientName": "Ayala Land", "lastEditedBy": "jdoe"})
        body = res.json()
        assert body["client_name"] == "Ayala Land"
        assert body["status"] == "Sent"
        assert body["last_edited_by"] == "jdoe"

    def test_terms_use_item_total(self, client):
        q = client.post(
            "/api/quotations",
            json={
                "termsTemplate": "template2",
                "totalDue": "999",
                "items": [{"description": "Tiles", "price": "1,000"}, {"description": "Labor", "price": 234.5}],
            },
        ).json()
        terms = client.get(f"/api/quotations/{q['id']}/terms").json()
        assert terms["template"] == "template2"
        assert terms["totalFormatted"] == "Php 1,234.50"
        assert terms["proposalText"]

    def test_terms_fall_back_to_total_due(self, client):
        q = client.post("/api/quotations", json={"totalDue": "Php 5,000"}).json()
        terms = client.get(f"/api/quotations/{q['id']}/terms").json()
        assert terms["template"] == "template1"
        assert terms["totalFormatted"] == "Php 5,000.00"

    def test_client_facing_text_is_title_cased(self, client):
        body = client.post(
            "/api/quotations",
            json={
                "clientName": "ayala LAND inc",
                "jobDescription": "roof repair",
                "installationAddress": "makati city",
                "attention": "mr. juan cruz",
                "clientContact": "juan@ayala.ph",
                "items": [{"description": "gi sheets", "price": 100}, {"price": 5}],
            },
        ).json()
        assert body["client_name"] == "Ayala Land Inc"
        assert body["job_description"] == "Roof Repair"
        assert body["installation_address"] == "Makati City"
        assert body["attention"] == "Mr. Juan Cruz"
        assert body["client_contact"] == "juan@ayala.ph"
        assert body["items"] == [{"description": "Gi Sheets", "price": 100}, {"price": 5}]

    def test_terms_carry_short_dates(self, client):
        q = client.post("/api/quotations", json={"date": "2024-03-05", "validUntil": "2024-04-04"}).json()
        terms = client.get(f"/api/quotations/{q['id']}/terms").json()
        assert terms["dateFormatted"] == "03/05/24"
        assert terms["validUntilFormatted"] == "04/04/24"

        undated = client.post("/api/quotations", json={}).json()
        assert client.get(f"/api/quotations/{undated['id']}/terms").json()["dateFormatted"] is None

    def test_missing_quotation(self, client):
        missing = "00000000-0000-0000-0000-000000000000"
        assert client.get(f"/api/quotations/{missing}").json() is None
        assert client.get(f"/api/quotations/{missing}/terms").status_code == 404
