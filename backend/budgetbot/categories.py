"""Category resolution strategies for parsed transactions."""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy.orm import Session

from . import crud
from .models import TransactionKind

logger = logging.getLogger(__name__)

UNDEFINED_CATEGORY = "Undefined"

SPENDING_KEYWORDS: dict[str, str] = {
    "food": "Eating Out",
    "restaurant": "Eating Out",
    "eat": "Eating Out",
    "dining": "Eating Out",
    "cafe": "Eating Out",
    "coffee": "Eating Out",
    "house": "Housing",
    "rent": "Housing",
    "home": "Housing",
    "car": "Transport",
    "taxi": "Transport",
    "uber": "Transport",
    "bus": "Transport",
    "train": "Transport",
    "grocery": "Groceries",
    "supermarket": "Groceries",
    "pharmacy": "Healthcare",
    "doctor": "Healthcare",
    "medicine": "Healthcare",
    "movie": "Entertainment",
    "cinema": "Entertainment",
    "game": "Entertainment",
    "shopping": "Shopping",
    "store": "Shopping",
    "bill": "Utilities",
    "electricity": "Utilities",
    "water": "Utilities",
    "internet": "Utilities",
    "flight": "Travel",
    "hotel": "Travel",
    "school": "Education",
    "course": "Education",
    "book": "Education",
}

EARNING_KEYWORDS: dict[str, str] = {
    "salary": "Salary",
    "wage": "Salary",
    "payroll": "Salary",
    "freelance": "Freelance",
    "invoice": "Freelance",
    "client": "Freelance",
    "dividend": "Investments",
    "interest": "Investments",
    "gift": "Gifts",
    "refund": "Refunds",
    "cashback": "Refunds",
}


class CategoryMatcher(Protocol):
    def resolve(self, name: str) -> str | None:
        """Return the category id for a transaction name, or ``None``."""


class UndefinedCategoryMatcher:
    """Always assigns the sentinel "Undefined" category.

    Users sort transactions into real categories themselves; ``None`` is
    returned when the sentinel row is missing.
    """

    def __init__(self, db: Session, kind: TransactionKind) -> None:
        self.db = db
        self.kind = kind

    def resolve(self, name: str) -> str | None:
        category = crud.get_category_by_name(self.db, self.kind, UNDEFINED_CATEGORY)
        if category is None:
            logger.warning("Sentinel %s category is missing for %s", UNDEFINED_CATEGORY, self.kind.value)
            return None
        return category.id


class KeywordCategoryMatcher:
    """Exact name, then substring, then keyword matching, else the sentinel."""

    def __init__(self, db: Session, kind: TransactionKind, keywords: dict[str, str] | None = None) -> None:
        self.db = db
        self.kind = kind
        if keywords is None:
            keywords = SPENDING_KEYWORDS if kind == TransactionKind.SPENDING else EARNING_KEYWORDS
        self.keywords = keywords
        self.fallback = UndefinedCategoryMatcher(db, kind)

    def resolve(self, name: str) -> str | None:
        lowered = name.lower().strip()
        categories = [
            category
            for category in crud.list_categories(self.db, self.kind)
            if category.name.lower() != UNDEFINED_CATEGORY.lower()
        ]

        for category in categories:
            if category.name.lower() == lowered:
                return category.id

        for category in categories:
            category_name = category.name.lower()
            if category_name in lowered or lowered in category_name:
                return category.id

        for keyword, category_name in self.keywords.items():
            if keyword in lowered:
                category = crud.get_category_by_name(self.db, self.kind, category_name)
                if category is not None:
                    return category.id

        return self.fallback.resolve(name)


def build_category_matcher(db: Session, kind: TransactionKind, strategy: str = "undefined") -> CategoryMatcher:
    if strategy == "keyword":
        return KeywordCategoryMatcher(db, kind)
    return UndefinedCategoryMatcher(db, kind)
