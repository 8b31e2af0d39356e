from datetime import date, datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

class FinancialFilter(BaseModel):
    """Common reporting filter: a symbolic period or explicit bounds."""
    period: Optional[str] = "month"  # day|week|month|quarter|year
    start_date: Optional[Union[date, str]] = None  # ISO date (YYYY-MM-DD)
    end_date: Optional[Union[date, str]] = None


class FinancialOverviewFilter(FinancialFilter):
    compare_with_previous: bool = True
    currency: Optional[str] = None  # explicit display currency
    convert_to_preferred: bool = True  # stored preference wins over `currency` when it auto-converts


class PropertyDistributionFilter(FinancialFilter):
    property_id: Optional[str] = None
    type: Optional[str] = None  # APARTMENT|HOUSE|COMMERCIAL|OFFICE|WAREHOUSE


class DashboardSummaryFilter(FinancialFilter):
    pass


class PendingTasksFilter(BaseModel):
    limit: int = 5
    page: int = 1
    status: Optional[str] = None    # pending|in_progress|completed
    priority: Optional[str] = None  # high|medium|low
    type: Optional[str] = None      # maintenance|rent|contract
    property_id: Optional[str] = None
    sort_by: str = "due_date"       # due_date|priority
    sort_order: str = "asc"         # asc|desc


class TransactionsFilter(BaseModel):
    limit: int = 10
    page: int = 1
    start_date: Optional[Union[date, str]] = None
    end_date: Optional[Union[date, str]] = None
    property_id: Optional[str] = None
    status: Optional[str] = None    # completed|pending|cancelled
    type: Optional[str] = None      # rent|maintenance
    search: Optional[str] = None    # tenant name, property name or transaction id
    sort_by: str = "date"           # date|amount
    sort_order: str = "desc"        # asc|desc
    currency: Optional[str] = None
    convert_to_preferred: bool = True


# ---------------------------------------------------------------------------
# Overview
# ---------------------------------------------------------------------------

class ChartSeries(BaseModel):
    """Bucketed income / expense / profit series; all four lists share one length."""
    income: List[float] = []
    expense: List[float] = []
    profit: List[float] = []
    labels: List[str] = []


class FinancialOverviewOut(BaseModel):
    period: str = "month"
    total_revenue: float = 0.0
    revenue_change: float = 0.0
    total_expenses: float = 0.0
    expense_change: float = 0.0
    net_profit: float = 0.0
    profit_change: float = 0.0
    chart_data: ChartSeries = ChartSeries()
    currency: str = "VND"
    original_currency: Optional[str] = None  # set only when amounts were converted


# ---------------------------------------------------------------------------
# Property distribution
# ---------------------------------------------------------------------------

class DistributionItem(BaseModel):
    id: str
    name: str
    revenue: float = 0.0
    expenses: float = 0.0
    profit: float = 0.0
    percentage: float = 0.0  # share of total revenue
    unit_count: int = 0


class PropertyDistributionOut(BaseModel):
    items: List[DistributionItem] = []
    total_properties: int = 0
    total_units: int = 0
    total_revenue: float = 0.0


# ---------------------------------------------------------------------------
# Pending tasks
# ---------------------------------------------------------------------------

class PendingTask(BaseModel):
    id: str
    title: str
    description: str = ""
    due_date: datetime
    priority: str  # high|medium|low
    status: str    # pending|in_progress|completed
    type: str      # maintenance|rent|contract
    property_id: str
    property_name: str = ""
    unit_id: Optional[str] = None
    unit_name: Optional[str] = None


class PendingTasksOut(BaseModel):
    tasks: List[PendingTask] = []
    total: int = 0
    page: int = 1
    limit: int = 5


# ---------------------------------------------------------------------------
# Dashboard summary
# ---------------------------------------------------------------------------

class CountWithChange(BaseModel):
    count: int = 0
    change: float = 0.0


class RevenueWithChange(BaseModel):
    amount: float = 0.0
    change: float = 0.0


class FinancialStatus(BaseModel):
    """Unpaid bill totals: already overdue vs. still upcoming."""
    overdue: float = 0.0
    upcoming: float = 0.0


class DashboardSummaryOut(BaseModel):
    properties: CountWithChange = CountWithChange()
    units: CountWithChange = CountWithChange()
    tenants: CountWithChange = CountWithChange()
    revenue: RevenueWithChange = RevenueWithChange()
    pending_payments: int = 0
    financial_status: FinancialStatus = FinancialStatus()


# ---------------------------------------------------------------------------
# Bill quote
# ---------------------------------------------------------------------------

class TierStepIn(BaseModel):
    limit: float  # cumulative kWh threshold
    rate: float

    @field_validator("limit", "rate")
    @classmethod
    def must_be_non_negative(cls, v, info):
        if v < 0:
            raise ValueError(f"{info.field_name} cannot be negative")
        return v


class AdditionalFee(BaseModel):
    name: str
    amount: float


class BillQuoteIn(BaseModel):
    rent_amount: float = 0.0
    electricity_previous_reading: Optional[float] = None
    electricity_current_reading: Optional[float] = None
    electricity_rate: Optional[float] = None
    uses_tiered_pricing: bool = False
    electricity_tier_details: List[TierStepIn] = []
    water_previous_reading: Optional[float] = None
    water_current_reading: Optional[float] = None
    water_rate: Optional[float] = None
    additional_fees: List[AdditionalFee] = Field(default_factory=list)


class BillQuoteOut(BaseModel):
    rent_amount: float = 0.0
    electricity_consumption: Optional[float] = None
    electricity_amount: Optional[float] = None
    water_consumption: Optional[float] = None
    water_amount: Optional[float] = None
    additional_fees_total: float = 0.0
    total_amount: float = 0.0


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------

class Transaction(BaseModel):
    id: str
    property_id: str
    property_name: str = ""
    unit_name: str = ""
    tenant_name: str = "Unknown"
    amount: float
    currency: str = "VND"
    converted_amount: Optional[float] = None  # set only when converted
    converted_currency: Optional[str] = None
    date: datetime
    payment_method: Optional[str] = None
    status: str = "completed"
    type: str  # rent|maintenance


class TransactionListOut(BaseModel):
    items: List[Transaction] = []
    total_items: int = 0
    page: int = 1
    limit: int = 10
    total_pages: int = 0
