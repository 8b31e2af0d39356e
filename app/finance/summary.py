"""
Dashboard summary: portfolio counts, period revenue and the unpaid-bill position.
"""
import logging
from datetime import datetime
from typing import Callable, Optional

from app.finance.collaborators import PaymentSource, PortfolioSource
from app.finance.errors import CollaboratorError, call_source
from app.finance.metrics import pct_change
from app.finance.periods import add_months, resolve_filter_range
from app.schemas.financial import (
    CountWithChange,
    DashboardSummaryFilter,
    DashboardSummaryOut,
    FinancialStatus,
    RevenueWithChange,
)

logger = logging.getLogger(__name__)

OPERATION = "get_dashboard_summary"


def empty_dashboard_summary() -> DashboardSummaryOut:
    return DashboardSummaryOut()


class DashboardSummaryService:
    def __init__(
        self,
        portfolio: PortfolioSource,
        payments: PaymentSource,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.portfolio = portfolio
        self.payments = payments
        self.clock = clock

    def get_dashboard_summary(
        self,
        user_id: str,
        filters: Optional[DashboardSummaryFilter] = None,
        fallback_on_error: bool = False,
    ) -> DashboardSummaryOut:
        filters = filters or DashboardSummaryFilter()
        now = self.clock()
        current, previous = resolve_filter_range(filters.period, filters.start_date, filters.end_date, now)

        try:
            return self._build(user_id, filters, now, current, previous)
        except CollaboratorError:
            if not fallback_on_error:
                raise
            logger.warning(f"Returning empty dashboard summary after data source failure | user_id={user_id}")
            return empty_dashboard_summary()

    def _call(self, filters, fn, *args):
        return call_source(OPERATION, filters, fn, *args)

    def _build(self, user_id, filters, now, current, previous) -> DashboardSummaryOut:
        # Counts are compared with the portfolio as it stood one month ago.
        month_ago = datetime.combine(add_months(now.date(), -1), now.time())

        properties = int(self._call(filters, self.portfolio.count_properties, user_id, None) or 0)
        prev_properties = int(self._call(filters, self.portfolio.count_properties, user_id, month_ago) or 0)
        tenants = int(self._call(filters, self.portfolio.count_tenants, user_id, None) or 0)
        prev_tenants = int(self._call(filters, self.portfolio.count_tenants, user_id, month_ago) or 0)
        units = int(self._call(filters, self.portfolio.count_units, user_id) or 0)

        revenue = float(self._call(filters, self.payments.sum_payments, user_id, current, None) or 0)
        revenue_change = 0.0
        if previous is not None:
            prev_revenue = float(self._call(filters, self.payments.sum_payments, user_id, previous, None) or 0)
            revenue_change = pct_change(revenue, prev_revenue)

        unpaid = self._call(filters, self.portfolio.list_unpaid_bills, user_id) or []
        overdue = sum(float(b.total_amount or 0) for b in unpaid if b.due_date < now)
        upcoming = sum(float(b.total_amount or 0) for b in unpaid if b.due_date >= now)
        pending_payments = sum(1 for b in unpaid if b.due_date >= now)

        return DashboardSummaryOut(
            properties=CountWithChange(count=properties, change=pct_change(properties, prev_properties)),
            units=CountWithChange(count=units, change=0.0),
            tenants=CountWithChange(count=tenants, change=pct_change(tenants, prev_tenants)),
            revenue=RevenueWithChange(amount=revenue, change=revenue_change),
            pending_payments=pending_payments,
            financial_status=FinancialStatus(overdue=overdue, upcoming=upcoming),
        )
