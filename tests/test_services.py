import pytest
from sqlalchemy import func, select

from budgetbot import crud
from budgetbot.categories import KeywordCategoryMatcher
from budgetbot.errors import ConversionError, ParseError, RequestError, UnknownCurrencyError
from budgetbot.models import CurrencyModel, SpendingModel, TransactionKind
from budgetbot.schemas import TransactionCreate, TransactionUpdate
from budgetbot.services import (
    PARSE_HELP_TEXT,
    confirmation_text,
    create_transaction,
    create_transaction_from_message,
    failure_text,
    record_chat_message,
    update_transaction,
)


def _spending_count(db) -> int:
    return db.scalar(select(func.count()).select_from(SpendingModel))


def test_message_becomes_spending_in_sentinel_category(db, user):
    spending = create_transaction_from_message(db, user, "10.12 $ Food")

    assert spending.name == "Food"
    assert spending.amount == 10.12
    assert spending.currency_code == "USD"
    assert spending.exchange_rate == 1.0
    assert spending.amount_in_base_currency == 10.12
    assert spending.category_id == crud.get_category_by_name(db, TransactionKind.SPENDING, "Undefined").id


def test_message_without_currency_uses_user_default(db, user):
    crud.update_user(db, user, default_currency="EUR")
    spending = create_transaction_from_message(db, user, "10 Coffee")

    assert spending.currency_code == "EUR"
    assert spending.exchange_rate == 0.92
    assert spending.amount_in_base_currency == round(10 / 0.92, 2)


@pytest.mark.parametrize("message", ["hello", "200.00", "0 Food", ""])
def test_unparseable_or_non_positive_message_raises(db, user, message):
    with pytest.raises(ParseError) as excinfo:
        create_transaction_from_message(db, user, message)
    assert excinfo.value.to_dict()["text"] == message
    assert _spending_count(db) == 0


def test_unknown_currency_aborts_persistence(db, user):
    with pytest.raises(UnknownCurrencyError):
        create_transaction_from_message(db, user, "10 XYZ Stuff")
    assert _spending_count(db) == 0


def test_broken_rate_aborts_persistence(db, user):
    currency = db.scalar(select(CurrencyModel).where(CurrencyModel.code == "EUR"))
    currency.exchange_rate_to_usd = 0.0
    db.commit()

    with pytest.raises(ConversionError):
        create_transaction_from_message(db, user, "10 EUR Lunch")
    assert _spending_count(db) == 0


def test_custom_matcher_is_used(db, user):
    matcher = KeywordCategoryMatcher(db, TransactionKind.SPENDING)
    spending = create_transaction_from_message(db, user, "15 Uber ride", matcher=matcher)
    assert spending.category_id == crud.get_category_by_name(db, TransactionKind.SPENDING, "Transport").id


def test_record_chat_message_detects_income(db, user):
    recorded = record_chat_message(db, user, "+25 Freelance")

    assert recorded.kind == TransactionKind.EARNING
    assert recorded.transaction.amount == 25
    assert recorded.transaction.category_id == crud.get_category_by_name(db, TransactionKind.EARNING, "Undefined").id
    assert confirmation_text(recorded) == "✅ Logged income: 25 USD - Freelance"


def test_record_chat_message_spending_confirmation(db, user):
    recorded = record_chat_message(db, user, "10,50 EUR Coffee")

    assert recorded.kind == TransactionKind.SPENDING
    assert confirmation_text(recorded) == "✅ Logged: 10.5 EUR - Coffee"
    assert recorded.summary().model_dump() == {
        "id": recorded.transaction.id,
        "amount": 10.5,
        "currency": "EUR",
        "name": "Coffee",
    }


def test_failure_text():
    assert failure_text(ParseError("nope")) == PARSE_HELP_TEXT
    assert "XYZ" in failure_text(UnknownCurrencyError("XYZ"))
    assert failure_text(ConversionError("broken")).startswith("❌")


def test_create_transaction_from_structured_fields(db, user):
    groceries = crud.get_category_by_name(db, TransactionKind.SPENDING, "Groceries")
    data = TransactionCreate(name=" Lidl ", amount=39.5, currency_code="pln", category_id=groceries.id)

    spending = create_transaction(db, user, TransactionKind.SPENDING, data)

    assert spending.name == "Lidl"
    assert spending.currency_code == "PLN"
    assert spending.category_id == groceries.id
    assert spending.amount_in_base_currency == round(39.5 / 3.95, 2)


def test_create_transaction_rejects_unknown_category(db, user):
    data = TransactionCreate(name="Lidl", amount=10, category_id="missing")
    with pytest.raises(RequestError):
        create_transaction(db, user, TransactionKind.SPENDING, data)


def test_create_transaction_rejects_blank_name(db, user):
    with pytest.raises(RequestError):
        create_transaction(db, user, TransactionKind.SPENDING, TransactionCreate(name="   ", amount=10))


def test_update_recomputes_base_amount(db, user):
    spending = create_transaction_from_message(db, user, "10 EUR Lunch")

    updated = update_transaction(db, TransactionKind.SPENDING, spending, TransactionUpdate(amount=20))
    assert updated.amount_in_base_currency == round(20 / 0.92, 2)

    updated = update_transaction(db, TransactionKind.SPENDING, updated, TransactionUpdate(currency_code="usd"))
    assert updated.currency_code == "USD"
    assert updated.exchange_rate == 1.0
    assert updated.amount_in_base_currency == 20.0


def test_update_name_keeps_conversion(db, user):
    spending = create_transaction_from_message(db, user, "10 EUR Lunch")
    updated = update_transaction(db, TransactionKind.SPENDING, spending, TransactionUpdate(name="Dinner"))

    assert updated.name == "Dinner"
    assert updated.amount_in_base_currency == round(10 / 0.92, 2)
