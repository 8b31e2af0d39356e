"""
Shared fixtures and in-memory data sources for the financial engine tests.
"""
import os

# Settings are read at import time; configure before any app module is imported.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

from datetime import datetime
from typing import Dict, List, Optional

import pytest

from app.finance.collaborators import (
    EXPENSE,
    REVENUE,
    BillRecord,
    CurrencyPreference,
    LeaseRecord,
    MaintenanceRecord,
    MoneyFact,
    PropertyRecord,
    TransactionPage,
)

# Wednesday, mid-May
NOW = datetime(2024, 5, 15, 12, 0, 0)


class FakeFinanceSource:
    """In-memory implementation of every finance source contract."""

    def __init__(
        self,
        facts: Optional[List[MoneyFact]] = None,
        properties: Optional[List[PropertyRecord]] = None,
        property_figures: Optional[Dict[str, tuple]] = None,
        maintenance: Optional[List[MaintenanceRecord]] = None,
        bills: Optional[List[BillRecord]] = None,
        leases: Optional[List[LeaseRecord]] = None,
        property_counts: tuple = (0, 0),
        tenant_counts: tuple = (0, 0),
        unit_count: int = 0,
        transactions: Optional[list] = None,
    ):
        self.facts = facts or []
        self.properties = properties or []
        self.property_figures = property_figures or {}
        self.maintenance = maintenance or []
        self.bills = bills or []
        self.leases = leases or []
        self.property_counts = property_counts
        self.tenant_counts = tenant_counts
        self.unit_count = unit_count
        self.transactions = transactions or []
        self.queries: list = []
        self.calls: List[str] = []

    # payments
    def sum_payments(self, user_id, date_range, classify):
        self.calls.append("sum_payments")
        total = 0.0
        for fact in self.facts:
            if not date_range.contains(fact.occurred_at):
                continue
            if classify == REVENUE and not fact.is_revenue:
                continue
            if classify == EXPENSE and fact.is_revenue:
                continue
            total += fact.amount
        return total

    def list_payment_facts(self, user_id, date_range):
        self.calls.append("list_payment_facts")
        return [f for f in self.facts if date_range.contains(f.occurred_at)]

    # properties
    def list_owned_properties(self, user_id, type_filter=None):
        self.calls.append("list_owned_properties")
        if type_filter:
            return [p for p in self.properties if (p.type or "").upper() == type_filter.upper()]
        return list(self.properties)

    def sum_property_revenue(self, property_id, date_range):
        return self.property_figures.get(property_id, (0, 0))[0]

    def estimate_property_expense(self, property_id, date_range):
        return self.property_figures.get(property_id, (0, 0))[1]

    # tasks
    def list_open_maintenance(self, user_id):
        self.calls.append("list_open_maintenance")
        return list(self.maintenance)

    def list_due_soon_bills(self, user_id, lookahead_days):
        self.calls.append("list_due_soon_bills")
        return list(self.bills)

    def list_expiring_leases(self, user_id, lookahead_days):
        self.calls.append("list_expiring_leases")
        return list(self.leases)

    # portfolio
    def count_properties(self, user_id, created_before=None):
        return self.property_counts[1] if created_before else self.property_counts[0]

    def count_units(self, user_id):
        return self.unit_count

    def count_tenants(self, user_id, created_before=None):
        return self.tenant_counts[1] if created_before else self.tenant_counts[0]

    def list_unpaid_bills(self, user_id):
        return list(self.bills)

    # transactions
    def list_transactions(self, user_id, query):
        self.calls.append("list_transactions")
        self.queries.append(query)
        records = self.transactions
        if query.is_revenue is not None:
            records = [r for r in records if r.is_revenue == query.is_revenue]
        return TransactionPage(records=records[query.offset:query.offset + query.limit], total=len(records))


class FailingSource:
    """Every data-source call raises."""

    def __init__(self, error: Exception = None):
        self.error = error or TimeoutError("query timed out")

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise self.error
        fail.__name__ = name
        return fail


class FakeCurrency:
    def __init__(self, preferred: str = "VND", rate_per_vnd: float = 0.00004, auto_convert: bool = True):
        self.preferred = preferred
        self.rate_per_vnd = rate_per_vnd
        self.auto_convert = auto_convert
        self.preference_calls = 0

    def convert(self, amount, from_currency, to_currency):
        if from_currency == to_currency:
            return amount
        if from_currency == "VND" and to_currency == "USD":
            return amount * self.rate_per_vnd
        return amount / self.rate_per_vnd

    def get_user_currency_preference(self, user_id):
        self.preference_calls += 1
        return CurrencyPreference(preferred_currency=self.preferred, auto_convert=self.auto_convert)


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def fake_source():
    return FakeFinanceSource()


@pytest.fixture
def failing_source():
    return FailingSource()
