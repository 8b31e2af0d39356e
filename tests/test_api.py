"""Tests for the financial HTTP endpoints."""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app.api.deps import get_currency_service, get_finance_source
from app.core.auth import User, get_current_user
from app.finance.collaborators import BillRecord, MoneyFact, PropertyRecord, TransactionRecord
from app.main import app

from conftest import FailingSource, FakeCurrency, FakeFinanceSource


def build_source():
    now = datetime.now()
    return FakeFinanceSource(
        facts=[MoneyFact(1000, now, True), MoneyFact(250, now, False)],
        properties=[PropertyRecord("p1", "Sunrise Apartments", "APARTMENT", 3)],
        property_figures={"p1": (1000, 250)},
        bills=[
            BillRecord(id="b1", rent_amount=1000, total_amount=1000, due_date=now + timedelta(days=2),
                       property_id="p1", property_name="Sunrise Apartments"),
        ],
        property_counts=(1, 1),
        tenant_counts=(2, 1),
        unit_count=3,
        transactions=[
            TransactionRecord(id="pay1", amount=1000, occurred_at=now, is_revenue=True,
                              property_id="p1", property_name="Sunrise Apartments", tenant_name="Tran Thi B"),
            TransactionRecord(id="pay2", amount=250, occurred_at=now, is_revenue=False, property_id="p1"),
        ],
    )


@pytest.fixture
def source():
    return build_source()


@pytest.fixture
def client(source):
    """Create test client with an authenticated owner and in-memory sources."""
    app.dependency_overrides[get_current_user] = lambda: User(user_id="owner-1")
    app.dependency_overrides[get_finance_source] = lambda: source
    app.dependency_overrides[get_currency_service] = lambda: FakeCurrency()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def failing_client():
    app.dependency_overrides[get_current_user] = lambda: User(user_id="owner-1")
    app.dependency_overrides[get_finance_source] = lambda: FailingSource()
    app.dependency_overrides[get_currency_service] = lambda: FakeCurrency()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class TestHealthEndpoint:

    def test_health_returns_200(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["ok"] is True


class TestOverviewEndpoint:

    def test_overview(self, client):
        resp = client.get("/financial/overview", params={"period": "year"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["period"] == "year"
        assert data["total_revenue"] == 1000
        assert data["total_expenses"] == 250
        assert data["net_profit"] == 750
        assert len(data["chart_data"]["labels"]) == 12
        assert data["currency"] == "VND"

    def test_invalid_range_is_400(self, client):
        resp = client.get(
            "/financial/overview", params={"start_date": "2024-02-01", "end_date": "2024-01-01"}
        )
        assert resp.status_code == 400
        assert resp.json()["code"] == "validation_error"

    def test_malformed_date_is_400(self, client):
        resp = client.get(
            "/financial/overview", params={"start_date": "yesterday", "end_date": "2024-01-01"}
        )
        assert resp.status_code == 400

    def test_unsupported_currency_is_400(self, client):
        resp = client.get("/financial/overview", params={"currency": "EUR"})
        assert resp.status_code == 400

    def test_overview_has_no_property_filter(self, client):
        params = client.get("/openapi.json").json()["paths"]["/financial/overview"]["get"]["parameters"]
        names = {p["name"] for p in params}
        assert "period" in names
        assert "property_id" not in names


class TestTransactionsEndpoint:

    def test_transactions(self, client):
        resp = client.get("/financial/transactions")
        assert resp.status_code == 200
        data = resp.json()
        assert data["total_items"] == 2
        assert data["total_pages"] == 1
        assert data["limit"] == 10
        assert [t["type"] for t in data["items"]] == ["rent", "maintenance"]
        assert data["items"][1]["tenant_name"] == "Unknown"

    def test_type_filter(self, client):
        data = client.get("/financial/transactions", params={"type": "rent"}).json()
        assert [t["id"] for t in data["items"]] == ["pay1"]

    def test_bad_sort_is_400(self, client):
        resp = client.get("/financial/transactions", params={"sort_by": "tenant"})
        assert resp.status_code == 400

    def test_failure_falls_back(self, failing_client):
        resp = failing_client.get("/financial/transactions", params={"fallback": "true"})
        assert resp.status_code == 200
        assert resp.json()["items"] == []


class TestDistributionEndpoint:

    def test_distribution(self, client):
        data = client.get("/financial/property-distribution").json()
        assert data["total_properties"] == 1
        assert data["items"][0]["percentage"] == 100.0
        assert data["items"][0]["profit"] == 750


class TestPendingTasksEndpoint:

    def test_pending_tasks(self, client):
        data = client.get("/financial/pending-tasks", params={"type": "rent"}).json()
        assert data["total"] == 1
        assert data["tasks"][0]["title"] == "Collect rent"
        assert data["limit"] == 5

    def test_bad_sort_is_400(self, client):
        resp = client.get("/financial/pending-tasks", params={"sort_by": "title"})
        assert resp.status_code == 400


class TestDashboardSummaryEndpoint:

    def test_summary(self, client):
        data = client.get("/financial/dashboard-summary").json()
        assert data["properties"]["count"] == 1
        assert data["tenants"]["change"] == 100.0
        assert data["pending_payments"] == 1
        assert data["financial_status"]["upcoming"] == 1000


class TestBillQuoteEndpoint:

    def test_quote(self, client):
        resp = client.post("/financial/bills/quote", json={
            "rent_amount": 1000,
            "electricity_previous_reading": 0,
            "electricity_current_reading": 120,
            "uses_tiered_pricing": True,
            "electricity_tier_details": [
                {"limit": 50, "rate": 1678}, {"limit": 100, "rate": 1734}, {"limit": 200, "rate": 2014},
            ],
        })
        assert resp.status_code == 200
        assert resp.json()["total_amount"] == 1000 + 210880

    def test_negative_tier_limit_is_422(self, client):
        resp = client.post("/financial/bills/quote", json={
            "electricity_previous_reading": 0,
            "electricity_current_reading": 5,
            "uses_tiered_pricing": True,
            "electricity_tier_details": [{"limit": -10, "rate": 5}, {"limit": 20, "rate": 1}],
        })
        assert resp.status_code == 422

    def test_negative_consumption_is_400(self, client):
        resp = client.post("/financial/bills/quote", json={
            "electricity_previous_reading": 10,
            "electricity_current_reading": 5,
            "electricity_rate": 3000,
        })
        assert resp.status_code == 400


class TestSourceFailure:

    def test_failure_is_502(self, failing_client):
        resp = failing_client.get("/financial/overview")
        assert resp.status_code == 502
        body = resp.json()
        assert body["code"] == "collaborator_error"
        assert "get_overview" in body["detail"]

    def test_fallback_returns_empty_payload(self, failing_client):
        resp = failing_client.get("/financial/pending-tasks", params={"fallback": "true"})
        assert resp.status_code == 200
        assert resp.json()["tasks"] == []

    def test_fallback_overview(self, failing_client):
        data = failing_client.get("/financial/overview", params={"period": "week", "fallback": "true"}).json()
        assert data["total_revenue"] == 0
        assert len(data["chart_data"]["income"]) == 7


class TestAuth:

    def test_missing_token_rejected(self, source):
        app.dependency_overrides[get_finance_source] = lambda: source
        try:
            with TestClient(app) as c:
                resp = c.get("/financial/overview")
        finally:
            app.dependency_overrides.clear()
        assert resp.status_code in (401, 403)

    def test_valid_token_accepted(self, source):
        token = jwt.encode({"sub": "owner-1", "aud": "authenticated"}, "test-secret", algorithm="HS256")
        app.dependency_overrides[get_finance_source] = lambda: source
        app.dependency_overrides[get_currency_service] = lambda: FakeCurrency()
        try:
            with TestClient(app) as c:
                resp = c.get("/financial/overview", headers={"Authorization": f"Bearer {token}"})
        finally:
            app.dependency_overrides.clear()
        assert resp.status_code == 200
