import math

import pytest

from budgetbot.currency import convert_to_base, get_exchange_rate
from budgetbot.errors import ConversionError, UnknownCurrencyError
from budgetbot.models import CurrencyModel


@pytest.mark.parametrize(
    ("amount", "rate", "expected"),
    [(10, 1.0, 10.0), (10, 0.92, 10.87), (100, 3.95, 25.32), (1500, 150.0, 10.0), (0.01, 3.0, 0.0)],
)
def test_convert_to_base_rounds_to_cents(amount, rate, expected):
    assert convert_to_base(amount, rate) == expected
    assert convert_to_base(amount, rate) == round(amount / rate, 2)


@pytest.mark.parametrize("rate", [0, 0.0, None, math.nan, math.inf, -math.inf, True, "abc"])
def test_convert_to_base_rejects_unusable_rates(rate):
    with pytest.raises(ConversionError):
        convert_to_base(10, rate)


def test_convert_to_base_rejects_non_finite_amount():
    with pytest.raises(ConversionError):
        convert_to_base(math.inf, 1.0)


def test_get_exchange_rate_is_case_insensitive(db):
    assert get_exchange_rate(db, "eur") == 0.92


def test_get_exchange_rate_unknown_currency(db):
    with pytest.raises(UnknownCurrencyError) as excinfo:
        get_exchange_rate(db, "xyz")
    assert excinfo.value.code == "XYZ"
    assert excinfo.value.to_dict() == {"error": "Unknown currency: XYZ", "currency": "XYZ"}


@pytest.mark.parametrize("rate", [None, 0.0])
def test_get_exchange_rate_unusable_row(db, rate):
    db.add(CurrencyModel(code="ZZZ", name="Broken", symbol="z", exchange_rate_to_usd=rate, display_order=99))
    db.commit()
    with pytest.raises(ConversionError):
        get_exchange_rate(db, "ZZZ")
