import logging
import math

from sqlalchemy import select
from sqlalchemy.orm import Session

from .errors import ConversionError, UnknownCurrencyError
from .models import CurrencyModel

logger = logging.getLogger(__name__)


def _coerce_rate(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def convert_to_base(amount: float, rate: object) -> float:
    """Convert ``amount`` to the base currency using ``rate`` units per USD.

    Raises :class:`ConversionError` instead of producing ``inf``/``nan``.
    """
    rate_value = _coerce_rate(rate)
    if rate_value is None or not math.isfinite(rate_value) or rate_value == 0:
        raise ConversionError(f"Invalid exchange rate: {rate!r}")
    if not math.isfinite(amount):
        raise ConversionError(f"Invalid amount: {amount!r}")
    return round(amount / rate_value, 2)


def get_currency(db: Session, code: str) -> CurrencyModel | None:
    return db.scalar(select(CurrencyModel).where(CurrencyModel.code == code.upper()))


def get_exchange_rate(db: Session, code: str) -> float:
    """Return the USD exchange rate for ``code``, validated for conversion."""
    currency = get_currency(db, code)
    if currency is None:
        raise UnknownCurrencyError(code.upper())
    rate = _coerce_rate(currency.exchange_rate_to_usd)
    if rate is None or not math.isfinite(rate) or rate == 0:
        logger.error("Currency %s has an unusable exchange rate: %r", currency.code, currency.exchange_rate_to_usd)
        raise ConversionError(f"Invalid exchange rate for {currency.code}")
    return rate
