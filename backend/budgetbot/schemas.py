from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


Period = Literal["week", "month", "year"]


def _upper_code(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip().upper()


class TelegramUserIn(BaseModel):
    """Telegram account data, as sent by a webhook update or the Mini App."""

    id: int
    is_bot: bool = False
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    language_code: Optional[str] = None
    photo_url: Optional[str] = None


class UserOut(BaseModel):
    id: str
    telegram_id: int
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    language_code: Optional[str] = None
    photo_url: Optional[str] = None
    default_currency: str
    ai_features_enabled: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UserSettingsUpdate(BaseModel):
    ai_features_enabled: Optional[bool] = None
    default_currency: Optional[str] = Field(default=None, min_length=3, max_length=3)

    @field_validator("default_currency")
    @classmethod
    def normalize_currency(cls, value: Optional[str]) -> Optional[str]:
        return _upper_code(value)


class CategoryOut(BaseModel):
    id: str
    name: str
    emoji: str
    color: str
    text_color: str
    color_dark: Optional[str] = None
    text_color_dark: Optional[str] = None
    display_order: int

    class Config:
        from_attributes = True


class CurrencyOut(BaseModel):
    code: str
    name: str
    symbol: str
    exchange_rate_to_usd: Optional[float] = None
    display_order: int

    class Config:
        from_attributes = True


class TransactionCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    amount: float = Field(gt=0, allow_inf_nan=False)
    currency_code: Optional[str] = Field(default=None, min_length=3, max_length=3)
    category_id: Optional[str] = None

    @field_validator("currency_code")
    @classmethod
    def normalize_currency(cls, value: Optional[str]) -> Optional[str]:
        return _upper_code(value)


class TransactionUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    amount: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)
    currency_code: Optional[str] = Field(default=None, min_length=3, max_length=3)
    category_id: Optional[str] = None

    @field_validator("currency_code")
    @classmethod
    def normalize_currency(cls, value: Optional[str]) -> Optional[str]:
        return _upper_code(value)


class TransactionOut(BaseModel):
    id: str
    user_id: str
    name: str
    category_id: Optional[str] = None
    amount: float
    currency_code: str
    exchange_rate: float
    amount_in_base_currency: float
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class LoggedTransaction(BaseModel):
    """Short confirmation payload returned by the ingestion endpoints."""

    id: str
    amount: float
    currency: str
    name: str


class LogBody(BaseModel):
    message: Optional[str] = None
    text: Optional[str] = None
    sms: Optional[str] = None

    def first_text(self) -> Optional[str]:
        return self.message or self.text or self.sms


class AnalysisTransaction(BaseModel):
    date: str
    amount: float
    currency: str
    category: str
    merchant: str
    notes: Optional[str] = None
    is_recurring: Optional[bool] = None


class CategoryTotal(BaseModel):
    category: str
    total: float
    percentage: float


class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    transactions: list[AnalysisTransaction]
    category_stats: list[CategoryTotal] = Field(alias="categoryStats")
    total_spent: float = Field(default=0.0, alias="totalSpent")
    period: Period = "month"
    date_range: str = Field(default="", alias="dateRange")
    user_telegram_id: int = Field(alias="userTelegramId")
    user_currency: str = Field(default="USD", alias="userCurrency")


class AnalyzeResponse(BaseModel):
    success: bool
    message: str
    analysis: str


class CategoryShare(BaseModel):
    category: str
    total: float
    percentage: float


class PeriodSummary(BaseModel):
    period: Period
    start: datetime
    end: datetime
    base_currency: str
    total_spent: float
    total_income: float
    net_difference: float
    income_to_expenses_ratio: Optional[float]
    savings_rate: str
    average_spent_per_day: float
    total_spending_transactions: int
    total_earnings_transactions: int
    expenses_by_category: list[CategoryShare]
    income_by_category: list[CategoryShare]
