from datetime import datetime

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from .config import get_settings
from .models import (
    CATEGORY_MODELS,
    TRANSACTION_MODELS,
    CategoryModel,
    CurrencyModel,
    EarningModel,
    EarningsCategoryModel,
    SpendingModel,
    TransactionKind,
    UserModel,
)
from .schemas import TelegramUserIn

settings = get_settings()

Transaction = SpendingModel | EarningModel
Category = CategoryModel | EarningsCategoryModel


def get_user(db: Session, user_id: str) -> UserModel | None:
    return db.get(UserModel, user_id)


def get_user_by_telegram_id(db: Session, telegram_id: int) -> UserModel | None:
    return db.scalar(select(UserModel).where(UserModel.telegram_id == telegram_id))


def create_user(db: Session, data: TelegramUserIn) -> UserModel:
    user = UserModel(
        telegram_id=data.id,
        username=data.username,
        first_name=data.first_name,
        last_name=data.last_name,
        language_code=data.language_code,
        photo_url=data.photo_url,
        ai_features_enabled=False,
        default_currency=settings.default_currency,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def get_or_create_user(db: Session, data: TelegramUserIn) -> tuple[UserModel, bool]:
    """Return the user bound to a Telegram account and whether it was created."""
    user = get_user_by_telegram_id(db, data.id)
    if user is not None:
        return user, False
    return create_user(db, data), True


def update_user(db: Session, user: UserModel, **changes: object) -> UserModel:
    for key, value in changes.items():
        if hasattr(user, key) and value is not None:
            setattr(user, key, value)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def list_currencies(db: Session) -> list[CurrencyModel]:
    return list(db.scalars(select(CurrencyModel).order_by(CurrencyModel.display_order, CurrencyModel.code)))


def list_categories(db: Session, kind: TransactionKind) -> list[Category]:
    model = CATEGORY_MODELS[kind]
    return list(db.scalars(select(model).order_by(model.display_order, model.name)))


def get_category(db: Session, kind: TransactionKind, category_id: str) -> Category | None:
    return db.get(CATEGORY_MODELS[kind], category_id)


def get_category_by_name(db: Session, kind: TransactionKind, name: str) -> Category | None:
    model = CATEGORY_MODELS[kind]
    stmt = select(model).where(func.lower(model.name) == name.lower()).order_by(model.display_order).limit(1)
    return db.scalar(stmt)


def insert_transaction(db: Session, kind: TransactionKind, **fields: object) -> Transaction:
    transaction = TRANSACTION_MODELS[kind](**fields)
    db.add(transaction)
    db.commit()
    db.refresh(transaction)
    return transaction


def get_transaction(db: Session, kind: TransactionKind, transaction_id: str, user_id: str) -> Transaction | None:
    model = TRANSACTION_MODELS[kind]
    stmt = select(model).where(model.id == transaction_id, model.user_id == user_id)
    return db.scalar(stmt)


def list_transactions(
    db: Session,
    kind: TransactionKind,
    user_id: str,
    start: datetime | None = None,
    end: datetime | None = None,
    uncategorized: bool = False,
) -> list[Transaction]:
    model = TRANSACTION_MODELS[kind]
    stmt = select(model).where(model.user_id == user_id)

    if start:
        stmt = stmt.where(model.created_at >= start)
    if end:
        stmt = stmt.where(model.created_at <= end)
    if uncategorized:
        sentinel = get_category_by_name(db, kind, "Undefined")
        if sentinel is not None:
            stmt = stmt.where(or_(model.category_id.is_(None), model.category_id == sentinel.id))
        else:
            stmt = stmt.where(model.category_id.is_(None))

    stmt = stmt.order_by(model.created_at.desc(), model.id.desc())
    return list(db.scalars(stmt))


def update_transaction(db: Session, transaction: Transaction, **changes: object) -> Transaction:
    for key, value in changes.items():
        setattr(transaction, key, value)
    db.add(transaction)
    db.commit()
    db.refresh(transaction)
    return transaction


def delete_transaction(db: Session, transaction: Transaction) -> None:
    db.delete(transaction)
    db.commit()
