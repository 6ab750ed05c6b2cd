"""Transaction ingestion shared by the webhook, the log endpoint, the bot and the UI."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from . import crud
from .categories import CategoryMatcher, build_category_matcher
from .config import get_settings
from .currency import convert_to_base, get_exchange_rate
from .errors import BudgetError, ParseError, RequestError, UnknownCurrencyError
from .models import TransactionKind, UserModel
from .parser import parse_transaction_message, split_income_marker
from .schemas import LoggedTransaction, TransactionCreate, TransactionUpdate

logger = logging.getLogger(__name__)

settings = get_settings()

PARSE_HELP_TEXT = (
    '❌ Could not parse transaction. Format: "10.12 $ Food" or "10.12 USD Food" or "10.12 Food". '
    'Start with "+" to log income, e.g. "+25 Freelance".'
)


@dataclass(slots=True)
class RecordedTransaction:
    kind: TransactionKind
    transaction: crud.Transaction

    def summary(self) -> LoggedTransaction:
        return LoggedTransaction(
            id=self.transaction.id,
            amount=self.transaction.amount,
            currency=self.transaction.currency_code,
            name=self.transaction.name,
        )


def format_amount(amount: float) -> str:
    return f"{amount:.2f}".rstrip("0").rstrip(".")


def _persist(
    db: Session,
    user: UserModel,
    kind: TransactionKind,
    name: str,
    amount: float,
    currency_code: str,
    category_id: str | None = None,
    matcher: CategoryMatcher | None = None,
) -> crud.Transaction:
    rate = get_exchange_rate(db, currency_code)
    amount_in_base = convert_to_base(amount, rate)

    if category_id is None:
        matcher = matcher or build_category_matcher(db, kind, settings.category_matcher)
        category_id = matcher.resolve(name)
        if category_id is None:
            logger.warning("Storing %s %r without a category", kind.value, name)

    transaction = crud.insert_transaction(
        db,
        kind,
        user_id=user.id,
        name=name,
        category_id=category_id,
        amount=amount,
        currency_code=currency_code,
        exchange_rate=rate,
        amount_in_base_currency=amount_in_base,
    )
    logger.info(
        "Created %s %s: %s %s (%s %s)",
        kind.value,
        transaction.id,
        amount,
        currency_code,
        amount_in_base,
        settings.base_currency,
    )
    return transaction


def create_transaction_from_message(
    db: Session,
    user: UserModel,
    message: str,
    kind: TransactionKind = TransactionKind.SPENDING,
    matcher: CategoryMatcher | None = None,
) -> crud.Transaction:
    """Parse ``message`` and store it as a spending or earning for ``user``."""
    parsed = parse_transaction_message(message)
    if not parsed or parsed.amount <= 0:
        raise ParseError("Failed to parse transaction", text=message)

    currency_code = parsed.currency_code or user.default_currency or settings.base_currency
    return _persist(db, user, kind, parsed.name, parsed.amount, currency_code, matcher=matcher)


def record_chat_message(db: Session, user: UserModel, text: str) -> RecordedTransaction:
    """Store a chat line, where a leading ``+`` marks income."""
    is_income, body = split_income_marker(text)
    kind = TransactionKind.EARNING if is_income else TransactionKind.SPENDING
    transaction = create_transaction_from_message(db, user, body, kind)
    return RecordedTransaction(kind=kind, transaction=transaction)


def confirmation_text(recorded: RecordedTransaction) -> str:
    tx = recorded.transaction
    label = "Logged income" if recorded.kind == TransactionKind.EARNING else "Logged"
    return f"✅ {label}: {format_amount(tx.amount)} {tx.currency_code} - {tx.name}"


def failure_text(error: BudgetError) -> str:
    if isinstance(error, UnknownCurrencyError):
        return f"❌ Unknown currency {error.code}. Use a supported currency code or symbol."
    if isinstance(error, ParseError):
        return PARSE_HELP_TEXT
    return "❌ Could not log the transaction, please try again later."


def _check_category(db: Session, kind: TransactionKind, category_id: str) -> None:
    if crud.get_category(db, kind, category_id) is None:
        raise RequestError("Unknown category", category_id=category_id)


def create_transaction(
    db: Session, user: UserModel, kind: TransactionKind, data: TransactionCreate
) -> crud.Transaction:
    """Store structured fields from the UI, bypassing the parser."""
    name = data.name.strip()
    if not name:
        raise RequestError("Name must not be blank")
    if data.category_id is not None:
        _check_category(db, kind, data.category_id)
    currency_code = data.currency_code or user.default_currency or settings.base_currency
    return _persist(
        db,
        user,
        kind,
        name,
        data.amount,
        currency_code,
        category_id=data.category_id,
    )


def update_transaction(
    db: Session, kind: TransactionKind, transaction: crud.Transaction, data: TransactionUpdate
) -> crud.Transaction:
    changes = data.model_dump(exclude_unset=True)
    for field in ("name", "amount", "currency_code"):
        if changes.get(field, 0) is None:
            changes.pop(field)
    if "name" in changes:
        changes["name"] = changes["name"].strip()
        if not changes["name"]:
            raise RequestError("Name must not be blank")
    if changes.get("category_id") is not None:
        _check_category(db, kind, changes["category_id"])

    if "amount" in changes or "currency_code" in changes:
        amount = changes.get("amount", transaction.amount)
        currency_code = changes.get("currency_code", transaction.currency_code)
        rate = get_exchange_rate(db, currency_code)
        changes["exchange_rate"] = rate
        changes["amount_in_base_currency"] = convert_to_base(amount, rate)

    if not changes:
        return transaction
    return crud.update_transaction(db, transaction, **changes)
