"""
Transaction listing: the owner's payments, filtered, sorted and paginated by
the source, typed as rent or maintenance and optionally converted to the
display currency.
"""
import logging
import math
from typing import Iterable, Optional, Sequence

from app.finance.collaborators import CurrencySource, TransactionQuery, TransactionRecord, TransactionSource
from app.finance.errors import CollaboratorError, ValidationError, call_source
from app.finance.overview import SUPPORTED_CURRENCIES, resolve_display_currency
from app.finance.periods import explicit_range
from app.schemas.financial import Transaction, TransactionListOut, TransactionsFilter

logger = logging.getLogger(__name__)

OPERATION = "get_transactions"

STATUSES = ("completed", "pending", "cancelled")
TRANSACTION_TYPES = ("rent", "maintenance")
SORT_FIELDS = ("date", "amount")
SORT_ORDERS = ("asc", "desc")


def empty_transactions(page: int = 1, limit: int = 10) -> TransactionListOut:
    return TransactionListOut(items=[], total_items=0, page=page, limit=limit, total_pages=0)


def _choice(value: Optional[str], allowed: Iterable[str], field: str) -> None:
    allowed = tuple(allowed)
    if value is not None and value not in allowed:
        raise ValidationError(f"{field} must be one of: {', '.join(allowed)}", details={field: value})


def validate_filter(filters: TransactionsFilter, supported_currencies: Sequence[str] = SUPPORTED_CURRENCIES) -> None:
    if filters.page < 1:
        raise ValidationError("page must be >= 1", details={"page": filters.page})
    if filters.limit < 1:
        raise ValidationError("limit must be >= 1", details={"limit": filters.limit})
    _choice(filters.status, STATUSES, "status")
    _choice(filters.type, TRANSACTION_TYPES, "type")
    _choice(filters.sort_by, SORT_FIELDS, "sort_by")
    _choice(filters.sort_order, SORT_ORDERS, "sort_order")
    if filters.currency and filters.currency.upper() not in supported_currencies:
        raise ValidationError(
            f"currency must be one of: {', '.join(supported_currencies)}",
            details={"currency": filters.currency},
        )


def build_query(filters: TransactionsFilter) -> TransactionQuery:
    is_revenue = None
    if filters.type == "rent":
        is_revenue = True
    elif filters.type == "maintenance":
        is_revenue = False
    return TransactionQuery(
        date_range=explicit_range(filters.start_date, filters.end_date),
        property_id=filters.property_id,
        status=filters.status,
        is_revenue=is_revenue,
        search=(filters.search or "").strip() or None,
        sort_by=filters.sort_by,
        sort_order=filters.sort_order,
        offset=(filters.page - 1) * filters.limit,
        limit=filters.limit,
    )


def record_to_transaction(record: TransactionRecord, currency: str) -> Transaction:
    return Transaction(
        id=str(record.id),
        property_id=str(record.property_id),
        property_name=record.property_name or "",
        unit_name=record.unit_name or "",
        tenant_name=record.tenant_name or "Unknown",
        amount=float(record.amount or 0),
        currency=currency,
        date=record.occurred_at,
        payment_method=record.payment_method,
        status=record.status or "completed",
        type="rent" if record.is_revenue else "maintenance",
    )


class TransactionLister:
    def __init__(
        self,
        transactions: TransactionSource,
        currency: Optional[CurrencySource] = None,
        base_currency: str = "VND",
        supported_currencies: Sequence[str] = SUPPORTED_CURRENCIES,
    ):
        self.transactions = transactions
        self.currency = currency
        self.base_currency = base_currency
        self.supported_currencies = tuple(supported_currencies)

    def list_transactions(
        self,
        user_id: str,
        filters: Optional[TransactionsFilter] = None,
        fallback_on_error: bool = False,
    ) -> TransactionListOut:
        filters = filters or TransactionsFilter()
        validate_filter(filters, self.supported_currencies)
        query = build_query(filters)

        try:
            return self._build(user_id, filters, query)
        except CollaboratorError:
            if not fallback_on_error:
                raise
            logger.warning(f"Returning empty transaction list after data source failure | user_id={user_id}")
            return empty_transactions(filters.page, filters.limit)

    def _build(self, user_id: str, filters: TransactionsFilter, query: TransactionQuery) -> TransactionListOut:
        page = call_source(OPERATION, filters, self.transactions.list_transactions, user_id, query)
        items = [record_to_transaction(r, self.base_currency) for r in page.records]

        display = resolve_display_currency(self.currency, user_id, filters, self.base_currency, OPERATION)
        if display != self.base_currency:
            for item in items:
                item.converted_amount = float(call_source(
                    OPERATION, filters, self.currency.convert, item.amount, self.base_currency, display
                ))
                item.converted_currency = display

        total = int(page.total or 0)
        return TransactionListOut(
            items=items,
            total_items=total,
            page=filters.page,
            limit=filters.limit,
            total_pages=math.ceil(total / filters.limit),
        )
