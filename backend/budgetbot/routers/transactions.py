from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import crud, services
from ..analysis import period_start
from ..db import get_db
from ..models import TransactionKind, UserModel
from ..schemas import Period, TransactionCreate, TransactionOut, TransactionUpdate


def get_user_or_404(user_id: str, db: Session = Depends(get_db)) -> UserModel:
    user = crud.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def _build_router(kind: TransactionKind, path: str) -> APIRouter:
    """CRUD routes for one transaction kind, scoped to a single user."""
    router = APIRouter(prefix=f"/users/{{user_id}}/{path}", tags=[path])
    not_found = f"{kind.value.capitalize()} not found"

    def _get_or_404(db: Session, transaction_id: str, user: UserModel) -> crud.Transaction:
        transaction = crud.get_transaction(db, kind, transaction_id, user.id)
        if not transaction:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found)
        return transaction

    @router.get("", response_model=list[TransactionOut])
    def list_transactions(
        period: Period | None = Query(default=None),
        uncategorized: bool = Query(default=False),
        db: Session = Depends(get_db),
        user: UserModel = Depends(get_user_or_404),
    ) -> list[TransactionOut]:
        start = period_start(period, datetime.now(timezone.utc)) if period else None
        transactions = crud.list_transactions(db, kind, user.id, start=start, uncategorized=uncategorized)
        return [TransactionOut.model_validate(tx) for tx in transactions]

    @router.post("", response_model=TransactionOut, status_code=status.HTTP_201_CREATED)
    def create_transaction(
        data: TransactionCreate,
        db: Session = Depends(get_db),
        user: UserModel = Depends(get_user_or_404),
    ) -> TransactionOut:
        transaction = services.create_transaction(db, user, kind, data)
        return TransactionOut.model_validate(transaction)

    @router.get("/{transaction_id}", response_model=TransactionOut)
    def get_transaction(
        transaction_id: str,
        db: Session = Depends(get_db),
        user: UserModel = Depends(get_user_or_404),
    ) -> TransactionOut:
        return TransactionOut.model_validate(_get_or_404(db, transaction_id, user))

    @router.patch("/{transaction_id}", response_model=TransactionOut)
    def update_transaction(
        transaction_id: str,
        data: TransactionUpdate,
        db: Session = Depends(get_db),
        user: UserModel = Depends(get_user_or_404),
    ) -> TransactionOut:
        transaction = _get_or_404(db, transaction_id, user)
        updated = services.update_transaction(db, kind, transaction, data)
        return TransactionOut.model_validate(updated)

    @router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_transaction(
        transaction_id: str,
        db: Session = Depends(get_db),
        user: UserModel = Depends(get_user_or_404),
    ) -> None:
        crud.delete_transaction(db, _get_or_404(db, transaction_id, user))

    return router


spendings_router = _build_router(TransactionKind.SPENDING, "spendings")
earnings_router = _build_router(TransactionKind.EARNING, "earnings")
