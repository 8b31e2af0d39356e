"""Tests for the financial overview aggregator."""

from datetime import datetime

import pytest

from app.finance.collaborators import MoneyFact
from app.finance.errors import CollaboratorError, ValidationError
from app.finance.overview import FinancialAggregator, build_chart, empty_overview
from app.finance.periods import resolve_current
from app.schemas.financial import FinancialOverviewFilter

from conftest import NOW, FailingSource, FakeCurrency, FakeFinanceSource


def month_facts():
    return [
        # May 2024 (current month)
        MoneyFact(1000, datetime(2024, 5, 2, 10), True),
        MoneyFact(500, datetime(2024, 5, 9, 10), False),
        MoneyFact(2000, datetime(2024, 5, 16, 10), True),
        MoneyFact(800, datetime(2024, 5, 30, 10), False),
        # April 2024 (previous month)
        MoneyFact(1500, datetime(2024, 4, 10), True),
        MoneyFact(1000, datetime(2024, 4, 20), False),
    ]


@pytest.fixture
def aggregator(clock):
    return FinancialAggregator(FakeFinanceSource(facts=month_facts()), FakeCurrency(), clock=clock)


class TestMonthOverview:

    def test_totals(self, aggregator):
        out = aggregator.get_overview("owner-1")
        assert out.period == "month"
        assert out.total_revenue == 3000
        assert out.total_expenses == 1300
        assert out.net_profit == 1700

    def test_changes_against_previous_month(self, aggregator):
        out = aggregator.get_overview("owner-1")
        assert out.revenue_change == 100.0
        assert out.expense_change == 30.0
        assert out.profit_change == 240.0

    def test_chart_series(self, aggregator):
        chart = aggregator.get_overview("owner-1").chart_data
        assert chart.labels == ["Week 1", "Week 2", "Week 3", "Week 4"]
        assert chart.income == [1000, 0, 2000, 0]
        assert chart.expense == [0, 500, 0, 800]
        assert chart.profit == [1000, -500, 2000, -800]

    def test_chart_sums_match_totals(self, aggregator):
        out = aggregator.get_overview("owner-1")
        assert sum(out.chart_data.income) == out.total_revenue
        assert sum(out.chart_data.expense) == out.total_expenses

    def test_unknown_period_treated_as_month(self, aggregator):
        out = aggregator.get_overview("owner-1", FinancialOverviewFilter(period="fortnight"))
        assert out.period == "month"
        assert len(out.chart_data.income) == 4


class TestExplicitDates:

    def test_changes_are_zero(self, clock):
        source = FakeFinanceSource(facts=month_facts())
        aggregator = FinancialAggregator(source, clock=clock)
        out = aggregator.get_overview(
            "owner-1", FinancialOverviewFilter(start_date="2024-05-01", end_date="2024-05-31")
        )
        assert out.total_revenue == 3000
        assert out.revenue_change == out.expense_change == out.profit_change == 0.0
        assert source.calls.count("sum_payments") == 2

    def test_end_before_start_rejected_before_any_query(self, clock):
        source = FakeFinanceSource()
        aggregator = FinancialAggregator(source, clock=clock)
        with pytest.raises(ValidationError):
            aggregator.get_overview(
                "owner-1", FinancialOverviewFilter(start_date="2024-05-31", end_date="2024-05-01")
            )
        assert source.calls == []

    def test_compare_disabled(self, clock):
        aggregator = FinancialAggregator(FakeFinanceSource(facts=month_facts()), clock=clock)
        out = aggregator.get_overview("owner-1", FinancialOverviewFilter(compare_with_previous=False))
        assert out.revenue_change == 0.0


class TestCurrency:

    def test_preferred_currency_converts_totals_only(self, clock):
        aggregator = FinancialAggregator(
            FakeFinanceSource(facts=month_facts()), FakeCurrency(preferred="USD"), clock=clock
        )
        out = aggregator.get_overview("owner-1")
        assert out.currency == "USD"
        assert out.original_currency == "VND"
        assert out.total_revenue == pytest.approx(3000 * 0.00004)
        assert out.net_profit == pytest.approx(1700 * 0.00004)
        assert out.revenue_change == 100.0
        assert out.chart_data.income == [1000, 0, 2000, 0]

    def test_preference_wins_over_explicit_currency(self, clock):
        currency = FakeCurrency(preferred="VND")
        aggregator = FinancialAggregator(FakeFinanceSource(facts=month_facts()), currency, clock=clock)
        out = aggregator.get_overview("owner-1", FinancialOverviewFilter(currency="USD"))
        assert out.currency == "VND"
        assert out.original_currency is None
        assert currency.preference_calls == 1

    def test_preference_without_auto_convert_falls_back_to_explicit_currency(self, clock):
        currency = FakeCurrency(preferred="USD", auto_convert=False)
        aggregator = FinancialAggregator(FakeFinanceSource(facts=month_facts()), currency, clock=clock)
        assert aggregator.get_overview("owner-1").currency == "VND"
        out = aggregator.get_overview("owner-1", FinancialOverviewFilter(currency="USD"))
        assert out.currency == "USD"
        assert out.total_revenue == pytest.approx(3000 * 0.00004)

    def test_explicit_currency_when_preference_disabled(self, clock):
        aggregator = FinancialAggregator(FakeFinanceSource(facts=month_facts()), FakeCurrency(), clock=clock)
        out = aggregator.get_overview(
            "owner-1", FinancialOverviewFilter(currency="usd", convert_to_preferred=False)
        )
        assert out.currency == "USD"
        assert out.total_expenses == pytest.approx(1300 * 0.00004)

    def test_unsupported_currency_rejected(self, clock):
        source = FakeFinanceSource()
        aggregator = FinancialAggregator(source, FakeCurrency(), clock=clock)
        with pytest.raises(ValidationError):
            aggregator.get_overview("owner-1", FinancialOverviewFilter(currency="EUR"))
        assert source.calls == []

    def test_no_currency_service_keeps_base(self, clock):
        aggregator = FinancialAggregator(FakeFinanceSource(facts=month_facts()), clock=clock)
        assert aggregator.get_overview("owner-1").currency == "VND"


class TestSourceFailure:

    def test_error_propagates_with_context(self, clock, failing_source):
        aggregator = FinancialAggregator(failing_source, clock=clock)
        with pytest.raises(CollaboratorError) as exc:
            aggregator.get_overview("owner-1", FinancialOverviewFilter(period="week"))
        assert exc.value.operation == "get_overview"
        assert "TimeoutError" in exc.value.message
        assert exc.value.details["filters"]["period"] == "week"
        assert isinstance(exc.value.cause, TimeoutError)

    def test_fallback_returns_empty_overview(self, clock, failing_source):
        aggregator = FinancialAggregator(failing_source, clock=clock)
        out = aggregator.get_overview(
            "owner-1", FinancialOverviewFilter(period="year"), fallback_on_error=True
        )
        assert out.total_revenue == 0
        assert out.chart_data.income == [0.0] * 12
        assert out.chart_data.labels[0] == "Jan"

    def test_currency_failure_also_falls_back(self, clock):
        aggregator = FinancialAggregator(
            FakeFinanceSource(facts=month_facts()), FailingSource(), clock=clock
        )
        out = aggregator.get_overview("owner-1", fallback_on_error=True)
        assert out == empty_overview("month")


class TestBuildChart:

    def test_facts_outside_range_are_skipped(self):
        current = resolve_current("week", NOW)
        facts = [
            MoneyFact(100, datetime(2024, 5, 13, 9), True),
            MoneyFact(999, datetime(2024, 5, 12, 9), True),
            MoneyFact(40, datetime(2024, 5, 19, 22), False),
        ]
        chart = build_chart(facts, current, "week")
        assert chart.income == [100, 0, 0, 0, 0, 0, 0]
        assert chart.expense == [0, 0, 0, 0, 0, 0, 40]
        assert chart.profit[6] == -40
