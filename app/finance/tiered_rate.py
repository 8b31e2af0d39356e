from dataclasses import dataclass
from typing import Iterable, Union

from app.finance.errors import ValidationError


@dataclass(frozen=True)
class TierStep:
    limit: float  # cumulative consumption threshold
    rate: float   # price per unit inside this step


def _as_step(tier: Union[TierStep, dict]) -> TierStep:
    if isinstance(tier, TierStep):
        return tier
    if isinstance(tier, dict):
        return TierStep(limit=float(tier["limit"]), rate=float(tier["rate"]))
    # pydantic models and other attribute carriers
    return TierStep(limit=float(tier.limit), rate=float(tier.rate))


def compute_tiered(consumption: float, tiers: Iterable) -> float:
    """
    Bill `consumption` against a tiered rate schedule.

    Tiers are sorted by limit first. Each step bills the band between the previous
    limit and its own limit. Consumption above the highest limit is billed at the
    last step's rate. Empty schedules and zero consumption bill nothing;
    negative limits or rates are rejected.

    Example: tiers [(50, 1678), (100, 1734), (200, 2014)], consumption 120
    -> 50*1678 + 50*1734 + 20*2014 = 210880.
    """
    if consumption is None or consumption < 0:
        raise ValidationError("consumption cannot be negative", details={"consumption": consumption})

    steps = sorted((_as_step(t) for t in tiers), key=lambda s: s.limit)
    for step in steps:
        if step.limit < 0 or step.rate < 0:
            raise ValidationError(
                "tier limit and rate cannot be negative",
                details={"limit": step.limit, "rate": step.rate},
            )
    if not steps or consumption == 0:
        return 0

    amount = 0
    remaining = consumption
    previous_limit = 0

    for step in steps:
        if remaining <= 0:
            break
        band = step.limit - previous_limit
        consumed = min(remaining, band)
        amount += consumed * step.rate
        remaining -= consumed
        previous_limit = step.limit

    if remaining > 0:
        amount += remaining * steps[-1].rate

    return amount
