from collections import defaultdict
from collections.abc import Iterable, Mapping
from datetime import date, datetime, timedelta
from typing import Any, Protocol

from .schemas import CategoryShare, Period, PeriodSummary

UNCATEGORIZED = "Undefined"


class _Row(Protocol):
    category_id: str | None
    amount_in_base_currency: float


def period_start(period: Period, now: datetime) -> datetime:
    """Start of the current week (Monday), month or year, at midnight."""
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "week":
        return midnight - timedelta(days=midnight.weekday())
    if period == "month":
        return midnight.replace(day=1)
    if period == "year":
        return midnight.replace(month=1, day=1)
    raise ValueError(f"Unsupported period: {period}")


def _totals_by_category(rows: Iterable[_Row], names: Mapping[str, str]) -> dict[str, float]:
    totals: defaultdict[str, float] = defaultdict(float)
    for row in rows:
        name = names.get(row.category_id or "", UNCATEGORIZED)
        totals[name] += float(row.amount_in_base_currency)
    return dict(totals)


def _shares(totals: Mapping[str, float], grand_total: float) -> list[CategoryShare]:
    ordered = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [
        CategoryShare(
            category=name,
            total=round(total, 2),
            percentage=round(total / grand_total * 100, 1) if grand_total else 0.0,
        )
        for name, total in ordered
    ]


def summarize_period(
    period: Period,
    start: datetime,
    end: datetime,
    spendings: list[_Row],
    earnings: list[_Row],
    category_names: Mapping[str, str],
    earnings_category_names: Mapping[str, str],
    base_currency: str = "USD",
) -> PeriodSummary:
    """Aggregate spendings and earnings of one period in the base currency."""
    total_spent = round(sum(float(tx.amount_in_base_currency) for tx in spendings), 2)
    total_income = round(sum(float(tx.amount_in_base_currency) for tx in earnings), 2)
    net = round(total_income - total_spent, 2)
    days = max(1, (end.date() - start.date()).days + 1)

    return PeriodSummary(
        period=period,
        start=start,
        end=end,
        base_currency=base_currency,
        total_spent=total_spent,
        total_income=total_income,
        net_difference=net,
        income_to_expenses_ratio=round(total_income / total_spent, 2) if total_spent else None,
        savings_rate=f"{net / total_income * 100:.1f}%" if total_income else "N/A",
        average_spent_per_day=round(total_spent / days, 2),
        total_spending_transactions=len(spendings),
        total_earnings_transactions=len(earnings),
        expenses_by_category=_shares(_totals_by_category(spendings, category_names), total_spent),
        income_by_category=_shares(_totals_by_category(earnings, earnings_category_names), total_income),
    )


def build_analysis_context(
    user: Any,
    currency_symbol: str,
    date_range: str,
    today: date,
) -> dict[str, str]:
    return {
        "period_label": date_range,
        "currency_symbol": currency_symbol,
        "locale": user.language_code or "en",
        "user_name": user.first_name or user.username or "there",
        "current_date": today.isoformat(),
        "date_range": date_range,
    }
