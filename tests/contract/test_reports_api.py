"""Contract tests for report endpoints."""

from datetime import timedelta

from membership.services import utc_today


class TestReportsApi:
    def test_generate_list_and_get(self, client, make_member):
        make_member()

        response = client.post(
            "/reports/generate",
            json={"name": "Centers", "type": "MembersByCenter", "parameters": {}},
        )

        assert response.status_code == 200
        report = response.json()
        assert report["type"] == "MembersByCenter"
        assert report["generatedBy"] == "staff-1"
        assert report["status"] == "Generated"
        assert report["data"]["total"] == 1

        listed = client.get("/reports").json()
        assert [r["id"] for r in listed] == [report["id"]]
        assert "data" not in listed[0]
        assert client.get(f"/reports/{report['id']}").json()["data"] == report["data"]

    def test_delinquency(self, client, make_member):
        member = make_member(last_payment_date=utc_today() - timedelta(days=45))
        make_member(last_payment_date=utc_today() - timedelta(days=5))

        data = client.post(
            "/reports/generate", json={"name": "Late", "type": "Delinquency"}
        ).json()["data"]

        assert [row["memberId"] for row in data["rows"]] == [member.id]
        assert data["rows"][0]["daysOverdue"] == 45

    def test_unknown_type_is_400(self, client):
        response = client.post("/reports/generate", json={"name": "X", "type": "Nope"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "validation_failed"

    def test_bad_parameters_are_400(self, client):
        response = client.post(
            "/reports/generate",
            json={"name": "X", "type": "PaymentsByPeriod", "parameters": {"startDate": "soon"}},
        )

        assert response.status_code == 400

    def test_missing_report_is_404(self, client):
        assert client.get("/reports/404").status_code == 404
