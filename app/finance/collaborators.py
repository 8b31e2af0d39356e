"""
Data-source contracts consumed by the financial engine.

Each engine component receives the sources it needs at construction. The
engine only ever reads through these interfaces; the SQLAlchemy
implementation lives in app.services.sql_source.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Protocol

from app.finance.periods import DateRange

REVENUE = "revenue"
EXPENSE = "expense"


@dataclass(frozen=True)
class MoneyFact:
    amount: float
    occurred_at: datetime
    is_revenue: bool


@dataclass(frozen=True)
class PropertyRecord:
    id: str
    name: str
    type: Optional[str] = None
    unit_count: int = 0


@dataclass(frozen=True)
class MaintenanceRecord:
    id: str
    title: str
    priority: str
    status: str
    property_id: str
    property_name: str = ""
    description: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    unit_id: Optional[str] = None
    unit_name: Optional[str] = None


@dataclass(frozen=True)
class BillRecord:
    id: str
    rent_amount: float
    total_amount: float
    due_date: datetime
    property_id: str
    property_name: str = ""
    unit_id: Optional[str] = None
    unit_name: Optional[str] = None
    priority: str = "medium"


@dataclass(frozen=True)
class LeaseRecord:
    id: str
    tenant_name: str
    contract_end_date: datetime
    property_id: str
    property_name: str = ""
    unit_id: Optional[str] = None
    unit_name: Optional[str] = None


@dataclass(frozen=True)
class CurrencyPreference:
    preferred_currency: str
    auto_convert: bool = True


@dataclass(frozen=True)
class TransactionRecord:
    id: str
    amount: float
    occurred_at: datetime
    is_revenue: bool
    property_id: str
    property_name: str = ""
    unit_name: Optional[str] = None
    tenant_name: Optional[str] = None
    status: str = "completed"
    payment_method: Optional[str] = None


@dataclass(frozen=True)
class TransactionQuery:
    """Owner-scoped payment listing criteria; `is_revenue` None means both kinds."""
    date_range: Optional[DateRange] = None
    property_id: Optional[str] = None
    status: Optional[str] = None
    is_revenue: Optional[bool] = None
    search: Optional[str] = None
    sort_by: str = "date"
    sort_order: str = "desc"
    offset: int = 0
    limit: int = 10


@dataclass(frozen=True)
class TransactionPage:
    records: List[TransactionRecord]
    total: int


class PaymentSource(Protocol):
    def sum_payments(self, user_id: str, date_range: DateRange, classify: Optional[str]) -> float:
        """Summed payments in range; `classify` is 'revenue', 'expense' or None for all. 0 when none."""

    def list_payment_facts(self, user_id: str, date_range: DateRange) -> List[MoneyFact]:
        ...


class PropertySource(Protocol):
    def list_owned_properties(self, user_id: str, type_filter: Optional[str] = None) -> List[PropertyRecord]:
        ...

    def sum_property_revenue(self, property_id: str, date_range: DateRange) -> float:
        ...

    def estimate_property_expense(self, property_id: str, date_range: DateRange) -> float:
        ...


class TaskSource(Protocol):
    def list_open_maintenance(self, user_id: str) -> List[MaintenanceRecord]:
        ...

    def list_due_soon_bills(self, user_id: str, lookahead_days: int) -> List[BillRecord]:
        ...

    def list_expiring_leases(self, user_id: str, lookahead_days: int) -> List[LeaseRecord]:
        ...


class PortfolioSource(Protocol):
    def count_properties(self, user_id: str, created_before: Optional[datetime] = None) -> int:
        ...

    def count_units(self, user_id: str) -> int:
        ...

    def count_tenants(self, user_id: str, created_before: Optional[datetime] = None) -> int:
        ...

    def list_unpaid_bills(self, user_id: str) -> List[BillRecord]:
        ...


class CurrencySource(Protocol):
    def convert(self, amount: float, from_currency: str, to_currency: str) -> float:
        ...

    def get_user_currency_preference(self, user_id: str) -> CurrencyPreference:
        ...


class TransactionSource(Protocol):
    def list_transactions(self, user_id: str, query: TransactionQuery) -> TransactionPage:
        """One page of the owner's payments plus the total matching count."""
