from typing import Optional

from app.finance.errors import ValidationError
from app.finance.tiered_rate import compute_tiered
from app.schemas.financial import BillQuoteIn, BillQuoteOut


def _consumption(previous: Optional[float], current: Optional[float], meter: str) -> Optional[float]:
    """Metered consumption between two readings; None when either reading is missing."""
    if previous is None or current is None:
        return None
    consumption = current - previous
    if consumption < 0:
        raise ValidationError(
            f"current {meter} reading cannot be lower than the previous reading",
            details={"previous": previous, "current": current},
        )
    return consumption


def compute_bill_amounts(payload: BillQuoteIn) -> BillQuoteOut:
    """
    Price a bill from its rent, meter readings and extra fees.

    Electricity uses the tier schedule when tiered pricing is on and tiers are
    given, otherwise the flat rate. Water is always flat-rate.
    """
    electricity_consumption = _consumption(
        payload.electricity_previous_reading, payload.electricity_current_reading, "electricity"
    )
    electricity_amount = None
    if electricity_consumption is not None:
        if payload.uses_tiered_pricing and payload.electricity_tier_details:
            electricity_amount = compute_tiered(electricity_consumption, payload.electricity_tier_details)
        elif payload.electricity_rate:
            electricity_amount = electricity_consumption * payload.electricity_rate

    water_consumption = None
    water_amount = None
    if payload.water_rate is not None:
        water_consumption = _consumption(payload.water_previous_reading, payload.water_current_reading, "water")
        if water_consumption is not None:
            water_amount = water_consumption * payload.water_rate

    fees_total = sum(fee.amount for fee in payload.additional_fees)
    total = payload.rent_amount + (electricity_amount or 0) + (water_amount or 0) + fees_total

    return BillQuoteOut(
        rent_amount=payload.rent_amount,
        electricity_consumption=electricity_consumption,
        electricity_amount=electricity_amount,
        water_consumption=water_consumption,
        water_amount=water_amount,
        additional_fees_total=fees_total,
        total_amount=total,
    )
