from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .. import crud
from ..analysis import period_start, summarize_period
from ..config import get_settings
from ..db import get_db
from ..models import TransactionKind, UserModel
from ..schemas import Period, PeriodSummary
from .transactions import get_user_or_404

settings = get_settings()

router = APIRouter(prefix="/users/{user_id}", tags=["reports"])


@router.get("/summary", response_model=PeriodSummary)
def get_period_summary(
    period: Period = Query(default="month"),
    db: Session = Depends(get_db),
    user: UserModel = Depends(get_user_or_404),
) -> PeriodSummary:
    end = datetime.now(timezone.utc)
    start = period_start(period, end)

    spendings = crud.list_transactions(db, TransactionKind.SPENDING, user.id, start=start, end=end)
    earnings = crud.list_transactions(db, TransactionKind.EARNING, user.id, start=start, end=end)
    category_names = {c.id: c.name for c in crud.list_categories(db, TransactionKind.SPENDING)}
    earnings_category_names = {c.id: c.name for c in crud.list_categories(db, TransactionKind.EARNING)}

    return summarize_period(
        period,
        start,
        end,
        spendings,
        earnings,
        category_names,
        earnings_category_names,
        base_currency=settings.base_currency,
    )
