"""Tests for the dashboard summary."""

from datetime import datetime

import pytest

from app.finance.collaborators import BillRecord, MoneyFact
from app.finance.errors import CollaboratorError
from app.finance.summary import DashboardSummaryService

from conftest import FakeFinanceSource


@pytest.fixture
def source():
    return FakeFinanceSource(
        facts=[
            MoneyFact(1000, datetime(2024, 5, 2), True),
            MoneyFact(500, datetime(2024, 5, 9), False),
            MoneyFact(2000, datetime(2024, 5, 16), True),
            MoneyFact(800, datetime(2024, 5, 30), False),
            MoneyFact(2500, datetime(2024, 4, 10), True),
        ],
        bills=[
            BillRecord(id="b1", rent_amount=5000, total_amount=5600, due_date=datetime(2024, 5, 14), property_id="p1"),
            BillRecord(id="b2", rent_amount=0, total_amount=300, due_date=datetime(2024, 5, 20), property_id="p1"),
            BillRecord(id="b3", rent_amount=4000, total_amount=4000, due_date=datetime(2024, 6, 1), property_id="p2"),
        ],
        property_counts=(5, 4),
        tenant_counts=(10, 8),
        unit_count=12,
    )


class TestDashboardSummary:

    def test_counts_compared_with_last_month(self, source, clock):
        out = DashboardSummaryService(source, source, clock).get_dashboard_summary("owner-1")
        assert out.properties.count == 5
        assert out.properties.change == 25.0
        assert out.tenants.count == 10
        assert out.tenants.change == 25.0
        assert out.units.count == 12

    def test_revenue_counts_all_payments(self, source, clock):
        out = DashboardSummaryService(source, source, clock).get_dashboard_summary("owner-1")
        assert out.revenue.amount == 4300
        assert out.revenue.change == 72.0

    def test_unpaid_bills_split_by_due_date(self, source, clock):
        out = DashboardSummaryService(source, source, clock).get_dashboard_summary("owner-1")
        assert out.financial_status.overdue == 5600
        assert out.financial_status.upcoming == 4300
        assert out.pending_payments == 2

    def test_empty_portfolio(self, clock):
        source = FakeFinanceSource()
        out = DashboardSummaryService(source, source, clock).get_dashboard_summary("owner-1")
        assert out.properties.count == 0
        assert out.properties.change == 0.0
        assert out.revenue.amount == 0


class TestDashboardSummaryFailure:

    def test_propagates(self, clock, failing_source):
        with pytest.raises(CollaboratorError) as exc:
            DashboardSummaryService(failing_source, failing_source, clock).get_dashboard_summary("owner-1")
        assert exc.value.operation == "get_dashboard_summary"

    def test_fallback(self, clock, failing_source):
        out = DashboardSummaryService(failing_source, failing_source, clock).get_dashboard_summary(
            "owner-1", fallback_on_error=True
        )
        assert out.pending_payments == 0
        assert out.revenue.amount == 0
