from datetime import date, datetime, timezone
from types import SimpleNamespace

import pytest

from budgetbot.analysis import build_analysis_context, period_start, summarize_period


def _row(category_id, amount):
    return SimpleNamespace(category_id=category_id, amount_in_base_currency=amount)


THURSDAY = datetime(2025, 11, 6, 15, 30, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    ("period", "expected"),
    [
        ("week", datetime(2025, 11, 3, tzinfo=timezone.utc)),
        ("month", datetime(2025, 11, 1, tzinfo=timezone.utc)),
        ("year", datetime(2025, 1, 1, tzinfo=timezone.utc)),
    ],
)
def test_period_start(period, expected):
    assert period_start(period, THURSDAY) == expected


def test_period_start_rejects_unknown_period():
    with pytest.raises(ValueError):
        period_start("decade", THURSDAY)


def test_summarize_period():
    start = datetime(2025, 11, 1, tzinfo=timezone.utc)
    end = datetime(2025, 11, 10, 12, tzinfo=timezone.utc)
    summary = summarize_period(
        "month",
        start,
        end,
        spendings=[_row("g", 20), _row("g", 10), _row(None, 10)],
        earnings=[_row("s", 100)],
        category_names={"g": "Groceries"},
        earnings_category_names={"s": "Salary"},
    )

    assert summary.total_spent == 40
    assert summary.total_income == 100
    assert summary.net_difference == 60
    assert summary.income_to_expenses_ratio == 2.5
    assert summary.savings_rate == "60.0%"
    assert summary.average_spent_per_day == 4.0
    assert summary.total_spending_transactions == 3
    assert summary.total_earnings_transactions == 1
    assert [(s.category, s.total, s.percentage) for s in summary.expenses_by_category] == [
        ("Groceries", 30, 75.0),
        ("Undefined", 10, 25.0),
    ]
    assert [(s.category, s.percentage) for s in summary.income_by_category] == [("Salary", 100.0)]


def test_summarize_empty_period():
    summary = summarize_period("week", THURSDAY, THURSDAY, [], [], {}, {})

    assert summary.total_spent == 0
    assert summary.income_to_expenses_ratio is None
    assert summary.savings_rate == "N/A"
    assert summary.average_spent_per_day == 0
    assert summary.expenses_by_category == []


def test_build_analysis_context_defaults():
    user = SimpleNamespace(first_name=None, username=None, language_code=None)
    context = build_analysis_context(user, "€", "November 2025", date(2025, 11, 6))

    assert context == {
        "period_label": "November 2025",
        "currency_symbol": "€",
        "locale": "en",
        "user_name": "there",
        "current_date": "2025-11-06",
        "date_range": "November 2025",
    }
