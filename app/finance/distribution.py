"""
Revenue / expense / profit per property, with each property's share of the
owner's total revenue.
"""
import logging
from datetime import datetime
from typing import Callable, List, Optional

from app.finance.collaborators import PropertySource
from app.finance.errors import CollaboratorError, call_source
from app.finance.metrics import share_pct
from app.finance.periods import resolve_filter_range
from app.schemas.financial import DistributionItem, PropertyDistributionFilter, PropertyDistributionOut

logger = logging.getLogger(__name__)

OPERATION = "get_distribution"


def empty_distribution() -> PropertyDistributionOut:
    return PropertyDistributionOut(items=[], total_properties=0, total_units=0, total_revenue=0.0)


def normalize_shares(items: List[DistributionItem]) -> List[DistributionItem]:
    """
    Fill in each item's percentage of total revenue, then sort by revenue (desc).

    Runs only once every item's revenue is known; the total is taken over the
    whole list before any share is computed.
    """
    total_revenue = sum(item.revenue for item in items)
    for item in items:
        item.percentage = share_pct(item.revenue, total_revenue)
    items.sort(key=lambda item: item.revenue, reverse=True)
    return items


class PropertyDistributionCalculator:
    def __init__(self, properties: PropertySource, clock: Callable[[], datetime] = datetime.now):
        self.properties = properties
        self.clock = clock

    def get_distribution(
        self,
        user_id: str,
        filters: Optional[PropertyDistributionFilter] = None,
        fallback_on_error: bool = False,
    ) -> PropertyDistributionOut:
        filters = filters or PropertyDistributionFilter()
        current, _ = resolve_filter_range(filters.period, filters.start_date, filters.end_date, self.clock())

        try:
            owned = call_source(
                OPERATION, filters, self.properties.list_owned_properties, user_id, filters.type
            ) or []
            if filters.property_id:
                owned = [p for p in owned if str(p.id) == str(filters.property_id)]

            # First pass: raw figures per property.
            items: List[DistributionItem] = []
            for prop in owned:
                revenue = float(call_source(
                    OPERATION, filters, self.properties.sum_property_revenue, prop.id, current
                ) or 0)
                expenses = float(call_source(
                    OPERATION, filters, self.properties.estimate_property_expense, prop.id, current
                ) or 0)
                items.append(DistributionItem(
                    id=str(prop.id),
                    name=prop.name,
                    revenue=revenue,
                    expenses=expenses,
                    profit=revenue - expenses,
                    percentage=0.0,
                    unit_count=int(prop.unit_count or 0),
                ))
        except CollaboratorError:
            if not fallback_on_error:
                raise
            logger.warning(f"Returning empty distribution after data source failure | user_id={user_id}")
            return empty_distribution()

        # Second pass: shares against the complete total.
        items = normalize_shares(items)
        return PropertyDistributionOut(
            items=items,
            total_properties=len(items),
            total_units=sum(item.unit_count for item in items),
            total_revenue=sum(item.revenue for item in items),
        )
