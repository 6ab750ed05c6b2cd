from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .models import CategoryModel, CurrencyModel, EarningsCategoryModel

logger = logging.getLogger(__name__)

# (name, emoji, color, text_color, color_dark, text_color_dark)
SPENDING_CATEGORIES = [
    ("Undefined", "❔", "#E0E0E0", "#424242", "#424242", "#E0E0E0"),
    ("Eating Out", "🍔", "#FFE0B2", "#E65100", "#5D4037", "#FFCC80"),
    ("Groceries", "🛒", "#C8E6C9", "#1B5E20", "#1B5E20", "#A5D6A7"),
    ("Housing", "🏠", "#D1C4E9", "#311B92", "#311B92", "#B39DDB"),
    ("Transport", "🚕", "#BBDEFB", "#0D47A1", "#0D47A1", "#90CAF9"),
    ("Utilities", "💡", "#FFF9C4", "#F57F17", "#5D4037", "#FFF59D"),
    ("Healthcare", "💊", "#FFCDD2", "#B71C1C", "#B71C1C", "#EF9A9A"),
    ("Entertainment", "🎬", "#F8BBD0", "#880E4F", "#880E4F", "#F48FB1"),
    ("Shopping", "🛍", "#B2EBF2", "#006064", "#006064", "#80DEEA"),
    ("Travel", "✈️", "#B2DFDB", "#004D40", "#004D40", "#80CBC4"),
    ("Education", "📚", "#DCEDC8", "#33691E", "#33691E", "#C5E1A5"),
]

EARNING_CATEGORIES = [
    ("Undefined", "❔", "#E0E0E0", "#424242", "#424242", "#E0E0E0"),
    ("Salary", "💼", "#C8E6C9", "#1B5E20", "#1B5E20", "#A5D6A7"),
    ("Freelance", "🧑‍💻", "#BBDEFB", "#0D47A1", "#0D47A1", "#90CAF9"),
    ("Investments", "📈", "#FFF9C4", "#F57F17", "#5D4037", "#FFF59D"),
    ("Gifts", "🎁", "#F8BBD0", "#880E4F", "#880E4F", "#F48FB1"),
    ("Refunds", "↩️", "#D1C4E9", "#311B92", "#311B92", "#B39DDB"),
]

# (code, name, symbol, units per USD)
CURRENCIES = [
    ("USD", "US Dollar", "$", 1.0),
    ("EUR", "Euro", "€", 0.92),
    ("PLN", "Polish Zloty", "zł", 3.95),
    ("GBP", "British Pound", "£", 0.79),
    ("JPY", "Japanese Yen", "¥", 150.0),
    ("INR", "Indian Rupee", "₹", 83.0),
    ("RUB", "Russian Ruble", "₽", 92.0),
    ("TRY", "Turkish Lira", "₺", 32.0),
    ("SEK", "Swedish Krona", "kr", 10.5),
    ("BRL", "Brazilian Real", "R$", 5.0),
    ("CAD", "Canadian Dollar", "C$", 1.36),
    ("AUD", "Australian Dollar", "A$", 1.52),
    ("MXN", "Mexican Peso", "MX$", 17.0),
    ("SGD", "Singapore Dollar", "S$", 1.34),
    ("HKD", "Hong Kong Dollar", "HK$", 7.8),
]


def _ensure_categories(db: Session, model: type[CategoryModel] | type[EarningsCategoryModel], rows: list) -> int:
    existing = {name.lower() for name in db.scalars(select(model.name))}
    added = 0
    for order, (name, emoji, color, text_color, color_dark, text_color_dark) in enumerate(rows):
        if name.lower() in existing:
            continue
        db.add(
            model(
                name=name,
                emoji=emoji,
                color=color,
                text_color=text_color,
                color_dark=color_dark,
                text_color_dark=text_color_dark,
                display_order=order,
            )
        )
        added += 1
    return added


def _ensure_currencies(db: Session) -> int:
    existing = set(db.scalars(select(CurrencyModel.code)))
    added = 0
    for order, (code, name, symbol, rate) in enumerate(CURRENCIES):
        if code in existing:
            continue
        db.add(CurrencyModel(code=code, name=name, symbol=symbol, exchange_rate_to_usd=rate, display_order=order))
        added += 1
    return added


def seed_reference_data(engine: Engine) -> None:
    """Insert missing default categories and currencies; existing rows are left untouched."""
    try:
        with Session(engine) as db:
            added = (
                _ensure_categories(db, CategoryModel, SPENDING_CATEGORIES)
                + _ensure_categories(db, EarningsCategoryModel, EARNING_CATEGORIES)
                + _ensure_currencies(db)
            )
            db.commit()
    except SQLAlchemyError as exc:
        logger.error("Failed to seed reference data: %s", exc)
        raise
    if added:
        logger.info("Seeded %d reference rows.", added)
