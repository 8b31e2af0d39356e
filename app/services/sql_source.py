"""
SQLAlchemy-backed data source for the financial engine.

Implements every source contract in app.finance.collaborators against the
application tables. Ownership is always resolved through Property.user_id.
"""
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.finance.collaborators import (
    EXPENSE,
    REVENUE,
    BillRecord,
    LeaseRecord,
    MaintenanceRecord,
    MoneyFact,
    PropertyRecord,
    TransactionPage,
    TransactionQuery,
    TransactionRecord,
)
from app.finance.periods import DateRange
from app.models.bill import Bill
from app.models.maintenance_request import MaintenanceRequest
from app.models.payment import Payment
from app.models.property import Property
from app.models.tenant import Tenant, TenantUnit
from app.models.unit import Unit

OPEN_MAINTENANCE_STATUSES = ("PENDING", "IN_PROGRESS", "SCHEDULED")
CANCELLED_PAYMENT_STATUS = "cancelled"


def _naive(value: Optional[datetime]) -> Optional[datetime]:
    """Timezone-aware values from the DB become naive local time, matching the engine clock."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def _aware(value: datetime) -> datetime:
    """Naive engine times are local; bind them with an explicit offset for timestamptz columns."""
    if value.tzinfo is not None:
        return value
    return value.astimezone()


def _float(value) -> float:
    return float(value or 0)


class SqlFinanceSource:
    """Payment, property, task and portfolio source over one DB session."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = datetime.now):
        self.db = db
        self.clock = clock

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    def _owned_payments(self, query, user_id: str, date_range: DateRange):
        return (
            query.join(Bill, Payment.bill_id == Bill.id)
            .join(Property, Bill.property_id == Property.id)
            .filter(
                Property.user_id == user_id,
                Payment.status != CANCELLED_PAYMENT_STATUS,
                Payment.payment_date >= _aware(date_range.start),
                Payment.payment_date <= _aware(date_range.end),
            )
        )

    def sum_payments(self, user_id: str, date_range: DateRange, classify: Optional[str]) -> float:
        q = self._owned_payments(
            self.db.query(func.coalesce(func.sum(Payment.amount), 0)), user_id, date_range
        )
        if classify == REVENUE:
            q = q.filter(Bill.rent_amount > 0)
        elif classify == EXPENSE:
            q = q.filter(Bill.rent_amount == 0)
        return _float(q.scalar())

    def list_payment_facts(self, user_id: str, date_range: DateRange) -> List[MoneyFact]:
        rows = self._owned_payments(
            self.db.query(Payment.amount, Payment.payment_date, Bill.rent_amount), user_id, date_range
        ).all()
        return [
            MoneyFact(amount=_float(amount), occurred_at=_naive(paid_at), is_revenue=_float(rent) > 0)
            for amount, paid_at, rent in rows
        ]

    def list_transactions(self, user_id: str, query: TransactionQuery) -> TransactionPage:
        q = (
            self.db.query(Payment, Bill.property_id, Bill.rent_amount, Property.name, Unit.name, Tenant.name)
            .join(Bill, Payment.bill_id == Bill.id)
            .join(Property, Bill.property_id == Property.id)
            .outerjoin(Unit, Bill.unit_id == Unit.id)
            .outerjoin(Tenant, Payment.tenant_id == Tenant.id)
            .filter(Property.user_id == user_id)
        )
        if query.date_range is not None:
            q = q.filter(
                Payment.payment_date >= _aware(query.date_range.start),
                Payment.payment_date <= _aware(query.date_range.end),
            )
        if query.property_id:
            q = q.filter(Bill.property_id == query.property_id)
        if query.status:
            q = q.filter(Payment.status == query.status)
        if query.is_revenue is True:
            q = q.filter(Bill.rent_amount > 0)
        elif query.is_revenue is False:
            q = q.filter(Bill.rent_amount == 0)
        if query.search:
            pattern = f"%{query.search}%"
            q = q.filter(or_(
                Tenant.name.ilike(pattern),
                Property.name.ilike(pattern),
                Payment.id.contains(query.search),
            ))

        total = q.count()

        column = Payment.amount if query.sort_by == "amount" else Payment.payment_date
        if query.sort_order == "asc":
            q = q.order_by(column.asc(), Payment.id.asc())
        else:
            q = q.order_by(column.desc(), Payment.id.desc())
        rows = q.offset(query.offset).limit(query.limit).all()

        records = [
            TransactionRecord(
                id=payment.id,
                amount=_float(payment.amount),
                occurred_at=_naive(payment.payment_date),
                is_revenue=_float(rent) > 0,
                property_id=property_id,
                property_name=property_name or "",
                unit_name=unit_name,
                tenant_name=tenant_name,
                status=payment.status,
                payment_method=payment.payment_method,
            )
            for payment, property_id, rent, property_name, unit_name, tenant_name in rows
        ]
        return TransactionPage(records=records, total=total)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    def list_owned_properties(self, user_id: str, type_filter: Optional[str] = None) -> List[PropertyRecord]:
        q = (
            self.db.query(Property.id, Property.name, Property.type, func.count(Unit.id))
            .outerjoin(Unit, Unit.property_id == Property.id)
            .filter(Property.user_id == user_id)
        )
        if type_filter:
            q = q.filter(func.upper(Property.type) == type_filter.upper())
        rows = q.group_by(Property.id, Property.name, Property.type).all()
        return [
            PropertyRecord(id=pid, name=name, type=ptype, unit_count=int(units or 0))
            for pid, name, ptype, units in rows
        ]

    def _property_payments(self, property_id: str, date_range: DateRange):
        return (
            self.db.query(func.coalesce(func.sum(Payment.amount), 0))
            .join(Bill, Payment.bill_id == Bill.id)
            .filter(
                Bill.property_id == property_id,
                Payment.status != CANCELLED_PAYMENT_STATUS,
                Payment.payment_date >= _aware(date_range.start),
                Payment.payment_date <= _aware(date_range.end),
            )
        )

    def sum_property_revenue(self, property_id: str, date_range: DateRange) -> float:
        return _float(self._property_payments(property_id, date_range).filter(Bill.rent_amount > 0).scalar())

    def estimate_property_expense(self, property_id: str, date_range: DateRange) -> float:
        # Service / maintenance fee bills (no rent component) count as the property's expenses
        return _float(self._property_payments(property_id, date_range).filter(Bill.rent_amount == 0).scalar())

    # ------------------------------------------------------------------
    # Pending-task inputs
    # ------------------------------------------------------------------

    def list_open_maintenance(self, user_id: str) -> List[MaintenanceRecord]:
        rows = (
            self.db.query(MaintenanceRequest, Property.name, Unit.name)
            .join(Property, MaintenanceRequest.property_id == Property.id)
            .outerjoin(Unit, MaintenanceRequest.unit_id == Unit.id)
            .filter(
                Property.user_id == user_id,
                func.upper(MaintenanceRequest.status).in_(OPEN_MAINTENANCE_STATUSES),
            )
            .all()
        )
        return [
            MaintenanceRecord(
                id=m.id,
                title=m.title,
                priority=(m.priority or "").lower(),
                status=m.status,
                property_id=m.property_id,
                property_name=property_name or "",
                description=m.description,
                scheduled_date=_naive(m.scheduled_date),
                unit_id=m.unit_id,
                unit_name=unit_name,
            )
            for m, property_name, unit_name in rows
        ]

    def _bill_rows(self, user_id: str):
        return (
            self.db.query(Bill, Property.name, Unit.name)
            .join(Property, Bill.property_id == Property.id)
            .outerjoin(Unit, Bill.unit_id == Unit.id)
            .filter(Property.user_id == user_id, Bill.is_paid.is_(False))
        )

    @staticmethod
    def _bill_record(bill: Bill, property_name: Optional[str], unit_name: Optional[str]) -> BillRecord:
        return BillRecord(
            id=bill.id,
            rent_amount=_float(bill.rent_amount),
            total_amount=_float(bill.total_amount),
            due_date=_naive(bill.due_date),
            property_id=bill.property_id,
            property_name=property_name or "",
            unit_id=bill.unit_id,
            unit_name=unit_name,
            priority=(bill.priority or "medium").lower(),
        )

    def list_due_soon_bills(self, user_id: str, lookahead_days: int) -> List[BillRecord]:
        horizon = _aware(self.clock() + timedelta(days=lookahead_days))
        rows = self._bill_rows(user_id).filter(Bill.due_date <= horizon).all()
        return [self._bill_record(*row) for row in rows]

    def list_expiring_leases(self, user_id: str, lookahead_days: int) -> List[LeaseRecord]:
        now = _aware(self.clock())
        rows = (
            self.db.query(TenantUnit, Tenant.name, Unit.name, Property.id, Property.name)
            .join(Tenant, TenantUnit.tenant_id == Tenant.id)
            .join(Unit, TenantUnit.unit_id == Unit.id)
            .join(Property, Unit.property_id == Property.id)
            .filter(
                Property.user_id == user_id,
                TenantUnit.contract_status == "ACTIVE",
                TenantUnit.contract_end_date > now,
                TenantUnit.contract_end_date <= now + timedelta(days=lookahead_days),
            )
            .all()
        )
        return [
            LeaseRecord(
                id=lease.id,
                tenant_name=tenant_name,
                contract_end_date=_naive(lease.contract_end_date),
                property_id=property_id,
                property_name=property_name or "",
                unit_id=lease.unit_id,
                unit_name=unit_name,
            )
            for lease, tenant_name, unit_name, property_id, property_name in rows
        ]

    # ------------------------------------------------------------------
    # Portfolio counts
    # ------------------------------------------------------------------

    def count_properties(self, user_id: str, created_before: Optional[datetime] = None) -> int:
        q = self.db.query(func.count(Property.id)).filter(Property.user_id == user_id)
        if created_before is not None:
            q = q.filter(Property.created_at <= _aware(created_before))
        return int(q.scalar() or 0)

    def count_units(self, user_id: str) -> int:
        q = (
            self.db.query(func.count(Unit.id))
            .join(Property, Unit.property_id == Property.id)
            .filter(Property.user_id == user_id)
        )
        return int(q.scalar() or 0)

    def count_tenants(self, user_id: str, created_before: Optional[datetime] = None) -> int:
        q = self.db.query(func.count(Tenant.id)).filter(Tenant.user_id == user_id)
        if created_before is not None:
            q = q.filter(Tenant.created_at <= _aware(created_before))
        return int(q.scalar() or 0)

    def list_unpaid_bills(self, user_id: str) -> List[BillRecord]:
        return [self._bill_record(*row) for row in self._bill_rows(user_id).all()]
