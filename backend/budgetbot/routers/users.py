import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from .. import crud
from ..currency import get_currency
from ..db import get_db
from ..errors import UnknownCurrencyError
from ..schemas import TelegramUserIn, UserOut, UserSettingsUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users/telegram", tags=["users"])


@router.post("", response_model=UserOut)
def open_mini_app(data: TelegramUserIn, response: Response, db: Session = Depends(get_db)) -> UserOut:
    """Get or create the user behind a Mini App session."""
    user, created = crud.get_or_create_user(db, data)
    if created:
        logger.info("Created user %s for telegram id %s", user.id, data.id)
        response.status_code = status.HTTP_201_CREATED
    return UserOut.model_validate(user)


@router.get("/{telegram_id}", response_model=UserOut)
def get_user(telegram_id: int, db: Session = Depends(get_db)) -> UserOut:
    user = crud.get_user_by_telegram_id(db, telegram_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserOut.model_validate(user)


@router.patch("/{telegram_id}/settings", response_model=UserOut)
def update_settings(telegram_id: int, data: UserSettingsUpdate, db: Session = Depends(get_db)) -> UserOut:
    user = crud.get_user_by_telegram_id(db, telegram_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if data.default_currency and get_currency(db, data.default_currency) is None:
        raise UnknownCurrencyError(data.default_currency)

    updated = crud.update_user(db, user, **data.model_dump(exclude_unset=True))
    return UserOut.model_validate(updated)
