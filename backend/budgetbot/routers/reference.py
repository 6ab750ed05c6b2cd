from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import crud
from ..db import get_db
from ..models import TransactionKind
from ..schemas import CategoryOut, CurrencyOut

router = APIRouter(tags=["reference"])


@router.get("/categories", response_model=list[CategoryOut])
def list_categories(db: Session = Depends(get_db)) -> list[CategoryOut]:
    return [CategoryOut.model_validate(c) for c in crud.list_categories(db, TransactionKind.SPENDING)]


@router.get("/earnings-categories", response_model=list[CategoryOut])
def list_earnings_categories(db: Session = Depends(get_db)) -> list[CategoryOut]:
    return [CategoryOut.model_validate(c) for c in crud.list_categories(db, TransactionKind.EARNING)]


@router.get("/currencies", response_model=list[CurrencyOut])
def list_currencies(db: Session = Depends(get_db)) -> list[CurrencyOut]:
    return [CurrencyOut.model_validate(c) for c in crud.list_currencies(db)]
