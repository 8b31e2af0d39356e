"""
Financial overview: revenue, expenses, profit, change against the previous
period, and a bucketed chart series for the current period.
"""
import logging
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Tuple

from app.finance.buckets import bucket_count, bucket_index, bucket_labels
from app.finance.collaborators import EXPENSE, REVENUE, CurrencySource, MoneyFact, PaymentSource
from app.finance.errors import CollaboratorError, ValidationError, call_source
from app.finance.metrics import pct_change
from app.finance.periods import DateRange, normalize_period, resolve_filter_range
from app.schemas.financial import ChartSeries, FinancialFilter, FinancialOverviewFilter, FinancialOverviewOut

logger = logging.getLogger(__name__)

OPERATION = "get_overview"
SUPPORTED_CURRENCIES = ("VND", "USD")


def empty_chart(period: Optional[str]) -> ChartSeries:
    n = bucket_count(period)
    return ChartSeries(income=[0.0] * n, expense=[0.0] * n, profit=[0.0] * n, labels=bucket_labels(period))


def empty_overview(period: Optional[str], currency: str = "VND") -> FinancialOverviewOut:
    """Zero-valued overview with a chart of the right length for `period`."""
    period = normalize_period(period)
    return FinancialOverviewOut(period=period, chart_data=empty_chart(period), currency=currency)


def build_chart(facts: Sequence[MoneyFact], date_range: DateRange, period: Optional[str]) -> ChartSeries:
    """
    Accumulate payment facts into the period's buckets.

    Facts outside `date_range` are skipped before indexing.
    """
    chart = empty_chart(period)
    for fact in facts:
        if not date_range.contains(fact.occurred_at):
            continue
        index = bucket_index(fact.occurred_at, date_range.start, period)
        if fact.is_revenue:
            chart.income[index] += float(fact.amount or 0)
        else:
            chart.expense[index] += float(fact.amount or 0)
    chart.profit = [inc - exp for inc, exp in zip(chart.income, chart.expense)]
    return chart


def resolve_display_currency(
    currency: Optional[CurrencySource],
    user_id: str,
    filters,
    base_currency: str,
    operation: str,
) -> str:
    """
    Currency amounts are shown in.

    The owner's stored preference applies when `convert_to_preferred` is set and
    the preference has auto-convert on; otherwise an explicit `currency`, then base.
    """
    if currency is None:
        return base_currency
    if filters.convert_to_preferred:
        preference = call_source(operation, filters, currency.get_user_currency_preference, user_id)
        if preference.auto_convert:
            return (preference.preferred_currency or base_currency).upper()
    if filters.currency:
        return filters.currency.upper()
    return base_currency


class FinancialAggregator:
    """Builds the financial overview for one owner from a payment source."""

    def __init__(
        self,
        payments: PaymentSource,
        currency: Optional[CurrencySource] = None,
        base_currency: str = "VND",
        supported_currencies: Sequence[str] = SUPPORTED_CURRENCIES,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.payments = payments
        self.currency = currency
        self.base_currency = base_currency
        self.supported_currencies = tuple(supported_currencies)
        self.clock = clock

    def date_ranges(self, filters: FinancialFilter) -> Tuple[DateRange, Optional[DateRange]]:
        """(current, previous) for a filter; previous is None for explicit dates."""
        current, previous = resolve_filter_range(filters.period, filters.start_date, filters.end_date, self.clock())
        if not getattr(filters, "compare_with_previous", True):
            previous = None
        return current, previous

    def get_overview(
        self,
        user_id: str,
        filters: Optional[FinancialOverviewFilter] = None,
        fallback_on_error: bool = False,
    ) -> FinancialOverviewOut:
        filters = filters or FinancialOverviewFilter()
        period = normalize_period(filters.period)
        current, previous = self.date_ranges(filters)
        self._validate_currency(filters)

        try:
            return self._build(user_id, filters, period, current, previous)
        except CollaboratorError:
            if not fallback_on_error:
                raise
            logger.warning(f"Returning empty overview after data source failure | user_id={user_id}")
            return empty_overview(period, self.base_currency)

    def _validate_currency(self, filters: FinancialOverviewFilter) -> None:
        if filters.currency and filters.currency.upper() not in self.supported_currencies:
            raise ValidationError(
                f"currency must be one of: {', '.join(self.supported_currencies)}",
                details={"currency": filters.currency},
            )

    def _sum(self, user_id: str, filters, date_range: DateRange, classify: str) -> float:
        total = call_source(OPERATION, filters, self.payments.sum_payments, user_id, date_range, classify)
        return float(total or 0)

    def _build(
        self,
        user_id: str,
        filters: FinancialOverviewFilter,
        period: str,
        current: DateRange,
        previous: Optional[DateRange],
    ) -> FinancialOverviewOut:
        revenue = self._sum(user_id, filters, current, REVENUE)
        expenses = self._sum(user_id, filters, current, EXPENSE)
        net_profit = revenue - expenses

        revenue_change = expense_change = profit_change = 0.0
        if previous is not None:
            prev_revenue = self._sum(user_id, filters, previous, REVENUE)
            prev_expenses = self._sum(user_id, filters, previous, EXPENSE)
            revenue_change = pct_change(revenue, prev_revenue)
            expense_change = pct_change(expenses, prev_expenses)
            profit_change = pct_change(net_profit, prev_revenue - prev_expenses)

        facts: List[MoneyFact] = call_source(
            OPERATION, filters, self.payments.list_payment_facts, user_id, current
        ) or []
        chart = build_chart(facts, current, period)

        overview = FinancialOverviewOut(
            period=period,
            total_revenue=revenue,
            revenue_change=revenue_change,
            total_expenses=expenses,
            expense_change=expense_change,
            net_profit=net_profit,
            profit_change=profit_change,
            chart_data=chart,
            currency=self.base_currency,
        )
        return self._apply_currency(user_id, filters, overview)

    def _apply_currency(
        self, user_id: str, filters: FinancialOverviewFilter, overview: FinancialOverviewOut
    ) -> FinancialOverviewOut:
        """Convert the monetary totals (never the change percentages) to the display currency."""
        display = resolve_display_currency(self.currency, user_id, filters, self.base_currency, OPERATION)
        if display == self.base_currency:
            return overview

        def convert(amount: float) -> float:
            return float(call_source(OPERATION, filters, self.currency.convert, amount, self.base_currency, display))

        overview.total_revenue = convert(overview.total_revenue)
        overview.total_expenses = convert(overview.total_expenses)
        overview.net_profit = convert(overview.net_profit)
        overview.currency = display
        overview.original_currency = self.base_currency
        return overview
