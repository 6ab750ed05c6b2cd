import asyncio
import logging
from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import crud
from ..analysis import build_analysis_context
from ..currency import get_currency
from ..db import get_db
from ..deps import get_llm, get_messenger
from ..errors import ConfigurationError, NotFoundError
from ..llm import LLMOracle
from ..messaging import TelegramMessenger
from ..prompts import build_analysis_prompt
from ..schemas import AnalyzeRequest, AnalyzeResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analysis"])


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_spending(
    data: AnalyzeRequest,
    db: Session = Depends(get_db),
    llm: LLMOracle | None = Depends(get_llm),
    messenger: TelegramMessenger | None = Depends(get_messenger),
) -> AnalyzeResponse:
    """Generate a spending report with the LLM and send it to the user's chat."""
    user = await asyncio.to_thread(crud.get_user_by_telegram_id, db, data.user_telegram_id)
    if not user:
        raise NotFoundError("User not found")

    currency = await asyncio.to_thread(get_currency, db, data.user_currency)
    currency_symbol = currency.symbol if currency else data.user_currency

    if llm is None:
        logger.error("OPENAI_API_KEY is not set")
        raise ConfigurationError("OpenAI API key not configured")

    context = build_analysis_context(user, currency_symbol, data.date_range, date.today())
    prompt = build_analysis_prompt(
        [tx.model_dump(exclude_none=True) for tx in data.transactions],
        [stat.model_dump() for stat in data.category_stats],
        data.total_spent,
        data.user_currency,
        context,
    )
    analysis = await asyncio.to_thread(llm.analyze, prompt)
    logger.info("Generated %s analysis for telegram user %s", data.period, data.user_telegram_id)

    if messenger is not None:
        await messenger.send(data.user_telegram_id, analysis, parse_mode="Markdown")
    else:
        logger.warning("Telegram bot token not available, skipping analysis delivery")

    return AnalyzeResponse(success=True, message="Analysis generated and sent", analysis=analysis)
