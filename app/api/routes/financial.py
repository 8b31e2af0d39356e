"""
Financial dashboard endpoints.

Every endpoint is scoped to the authenticated owner. Pass `fallback=true` to
get an empty, well-formed payload instead of a 502 when a data source fails.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_currency_service, get_finance_source
from app.core.auth import get_current_user, User
from app.core.config import settings
from app.core.currency import CurrencyService, SUPPORTED_CURRENCIES
from app.finance.billing import compute_bill_amounts
from app.finance.distribution import PropertyDistributionCalculator
from app.finance.overview import FinancialAggregator
from app.finance.pending_tasks import PendingTaskAggregator
from app.finance.summary import DashboardSummaryService
from app.finance.transactions import TransactionLister
from app.schemas.financial import (
    BillQuoteIn,
    BillQuoteOut,
    DashboardSummaryFilter,
    DashboardSummaryOut,
    FinancialOverviewFilter,
    FinancialOverviewOut,
    PendingTasksFilter,
    PendingTasksOut,
    PropertyDistributionFilter,
    PropertyDistributionOut,
    TransactionListOut,
    TransactionsFilter,
)
from app.services.sql_source import SqlFinanceSource

router = APIRouter(prefix="/financial", tags=["financial"])

PERIOD_HELP = "day | week | month | quarter | year (unknown values mean month)"


@router.get("/overview", response_model=FinancialOverviewOut)
def get_financial_overview(
    source: SqlFinanceSource = Depends(get_finance_source),
    currency_service: CurrencyService = Depends(get_currency_service),
    current_user: User = Depends(get_current_user),
    period: Optional[str] = Query("month", description=PERIOD_HELP),
    start_date: Optional[str] = Query(None, description="ISO date (YYYY-MM-DD)"),
    end_date: Optional[str] = Query(None, description="ISO date (YYYY-MM-DD)"),
    compare_with_previous: bool = Query(True),
    currency: Optional[str] = Query(None, description="VND | USD"),
    convert_to_preferred: bool = Query(True, description="Use the owner's preferred currency"),
    fallback: bool = Query(False, description="Return an empty overview if a data source fails"),
):
    """Revenue, expenses and profit for the period, with change vs. the previous period."""
    filters = FinancialOverviewFilter(
        period=period,
        start_date=start_date,
        end_date=end_date,
        compare_with_previous=compare_with_previous,
        currency=currency,
        convert_to_preferred=convert_to_preferred,
    )
    aggregator = FinancialAggregator(
        source,
        currency=currency_service,
        base_currency=settings.BASE_CURRENCY,
        supported_currencies=SUPPORTED_CURRENCIES,
    )
    return aggregator.get_overview(current_user.id, filters, fallback_on_error=fallback)


@router.get("/property-distribution", response_model=PropertyDistributionOut)
def get_property_distribution(
    source: SqlFinanceSource = Depends(get_finance_source),
    current_user: User = Depends(get_current_user),
    period: Optional[str] = Query("month", description=PERIOD_HELP),
    start_date: Optional[str] = Query(None, description="ISO date (YYYY-MM-DD)"),
    end_date: Optional[str] = Query(None, description="ISO date (YYYY-MM-DD)"),
    property_id: Optional[str] = Query(None, description="Filter by property ID"),
    type: Optional[str] = Query(None, description="Property type, e.g. APARTMENT"),
    fallback: bool = Query(False),
):
    filters = PropertyDistributionFilter(
        period=period, start_date=start_date, end_date=end_date, property_id=property_id, type=type
    )
    return PropertyDistributionCalculator(source).get_distribution(
        current_user.id, filters, fallback_on_error=fallback
    )


@router.get("/pending-tasks", response_model=PendingTasksOut)
def get_pending_tasks(
    source: SqlFinanceSource = Depends(get_finance_source),
    current_user: User = Depends(get_current_user),
    limit: int = Query(5, description="Page size"),
    page: int = Query(1, description="1-based page number"),
    status: Optional[str] = Query(None, description="pending | in_progress | completed"),
    priority: Optional[str] = Query(None, description="high | medium | low"),
    type: Optional[str] = Query(None, description="maintenance | rent | contract"),
    property_id: Optional[str] = Query(None, description="Filter by property ID"),
    sort_by: str = Query("due_date", description="due_date | priority"),
    sort_order: str = Query("asc", description="asc | desc"),
    fallback: bool = Query(False),
):
    """Open maintenance, bills falling due and expiring leases as one task list."""
    filters = PendingTasksFilter(
        limit=limit,
        page=page,
        status=status,
        priority=priority,
        type=type,
        property_id=property_id,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return PendingTaskAggregator(source).get_pending_tasks(current_user.id, filters, fallback_on_error=fallback)


@router.get("/transactions", response_model=TransactionListOut)
def get_transactions(
    source: SqlFinanceSource = Depends(get_finance_source),
    currency_service: CurrencyService = Depends(get_currency_service),
    current_user: User = Depends(get_current_user),
    limit: int = Query(10, description="Page size"),
    page: int = Query(1, description="1-based page number"),
    start_date: Optional[str] = Query(None, description="ISO date (YYYY-MM-DD)"),
    end_date: Optional[str] = Query(None, description="ISO date (YYYY-MM-DD)"),
    property_id: Optional[str] = Query(None, description="Filter by property ID"),
    status: Optional[str] = Query(None, description="completed | pending | cancelled"),
    type: Optional[str] = Query(None, description="rent | maintenance"),
    search: Optional[str] = Query(None, description="Tenant name, property name or transaction ID"),
    sort_by: str = Query("date", description="date | amount"),
    sort_order: str = Query("desc", description="asc | desc"),
    currency: Optional[str] = Query(None, description="VND | USD"),
    convert_to_preferred: bool = Query(True, description="Use the owner's preferred currency"),
    fallback: bool = Query(False),
):
    """The owner's payments, newest first by default."""
    filters = TransactionsFilter(
        limit=limit,
        page=page,
        start_date=start_date,
        end_date=end_date,
        property_id=property_id,
        status=status,
        type=type,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        currency=currency,
        convert_to_preferred=convert_to_preferred,
    )
    lister = TransactionLister(
        source,
        currency=currency_service,
        base_currency=settings.BASE_CURRENCY,
        supported_currencies=SUPPORTED_CURRENCIES,
    )
    return lister.list_transactions(current_user.id, filters, fallback_on_error=fallback)


@router.get("/dashboard-summary", response_model=DashboardSummaryOut)
def get_dashboard_summary(
    source: SqlFinanceSource = Depends(get_finance_source),
    current_user: User = Depends(get_current_user),
    period: Optional[str] = Query("month", description=PERIOD_HELP),
    start_date: Optional[str] = Query(None, description="ISO date (YYYY-MM-DD)"),
    end_date: Optional[str] = Query(None, description="ISO date (YYYY-MM-DD)"),
    fallback: bool = Query(False),
):
    filters = DashboardSummaryFilter(period=period, start_date=start_date, end_date=end_date)
    return DashboardSummaryService(source, source).get_dashboard_summary(
        current_user.id, filters, fallback_on_error=fallback
    )


@router.post("/bills/quote", response_model=BillQuoteOut)
def quote_bill(
    payload: BillQuoteIn,
    current_user: User = Depends(get_current_user),
):
    """Price a bill (rent + metered utilities + fees) without saving it."""
    return compute_bill_amounts(payload)
