"""
Currency conversion and per-user display currency.

Exchange rates come from EXCHANGE_RATE_API_URL and are cached in-process for
EXCHANGE_RATE_CACHE_TTL_SECONDS. Amounts are stored in BASE_CURRENCY.
"""
import logging
import time
from typing import Optional

import requests
from sqlalchemy.orm import Session

from app.core.config import settings
from app.finance.collaborators import CurrencyPreference
from app.models.user import User as UserModel

logger = logging.getLogger(__name__)

SUPPORTED_CURRENCIES = ("VND", "USD")

# Cache for exchange rates (to avoid fetching on every request)
_rates_cache: Optional[dict] = None
_rates_fetched_at: Optional[float] = None


def _rates_expired() -> bool:
    if _rates_fetched_at is None:
        return True
    return time.monotonic() - _rates_fetched_at > settings.EXCHANGE_RATE_CACHE_TTL_SECONDS


def get_exchange_rates() -> dict:
    """
    Return {"base": ..., "rates": {...}}, refreshing the cache when it has expired.

    If a refresh fails the previously fetched rates are reused; with nothing
    cached the request error propagates.
    """
    global _rates_cache, _rates_fetched_at

    if _rates_cache is not None and not _rates_expired():
        return _rates_cache

    try:
        response = requests.get(settings.EXCHANGE_RATE_API_URL, timeout=settings.EXCHANGE_RATE_TIMEOUT_SECONDS)
        response.raise_for_status()
        data = response.json()
    except requests.RequestException as e:
        if _rates_cache is None:
            raise
        logger.warning(f"Failed to refresh exchange rates, keeping cached rates: {e}")
        return _rates_cache

    _rates_cache = {
        "base": (data.get("base") or settings.BASE_CURRENCY).upper(),
        "rates": {k.upper(): float(v) for k, v in (data.get("rates") or {}).items()},
    }
    _rates_fetched_at = time.monotonic()
    return _rates_cache


def convert_amount(amount: float, from_currency: str, to_currency: str, rates: dict) -> float:
    """Convert through the rates' base currency."""
    from_currency, to_currency = from_currency.upper(), to_currency.upper()
    if from_currency == to_currency:
        return amount

    table = rates["rates"]
    base = rates["base"]
    for code in (from_currency, to_currency):
        if code != base and code not in table:
            raise KeyError(f"No exchange rate for {code}")

    value = amount if from_currency == base else amount / table[from_currency]
    return value if to_currency == base else value * table[to_currency]


class CurrencyService:
    """Currency collaborator for the financial engine, backed by the users table."""

    def __init__(self, db: Session):
        self.db = db

    def convert(self, amount: float, from_currency: str, to_currency: str) -> float:
        if from_currency.upper() == to_currency.upper():
            return amount
        return convert_amount(amount, from_currency, to_currency, get_exchange_rates())

    def get_user_currency_preference(self, user_id: str) -> CurrencyPreference:
        user = self.db.query(UserModel).filter(UserModel.id == user_id).first()
        if user is None or not user.preferred_currency:
            return CurrencyPreference(preferred_currency=settings.BASE_CURRENCY, auto_convert=True)
        return CurrencyPreference(
            preferred_currency=user.preferred_currency.upper(),
            auto_convert=bool(user.auto_convert),
        )
