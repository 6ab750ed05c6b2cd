"""FastAPI dependencies that open the external-service clients per request.

Both clients are closed once the response has been sent.
"""

from collections.abc import AsyncGenerator, Generator

from fastapi import Depends
from openai import OpenAI
from telegram import Bot
from telegram.request import HTTPXRequest

from .config import Settings, get_settings
from .llm import LLMOracle
from .messaging import TelegramMessenger


def get_llm(settings: Settings = Depends(get_settings)) -> Generator[LLMOracle | None, None, None]:
    if not settings.openai_api_key:
        yield None
        return
    with OpenAI(api_key=settings.openai_api_key) as client:
        yield LLMOracle(
            client,
            extraction_model=settings.extraction_model,
            analysis_model=settings.analysis_model,
        )


async def get_messenger(
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[TelegramMessenger | None, None]:
    if not settings.telegram_bot_token:
        yield None
        return
    # Bot.shutdown() skips uninitialized bots, so the request is closed directly.
    request = HTTPXRequest()
    try:
        yield TelegramMessenger(Bot(settings.telegram_bot_token, request=request, get_updates_request=request))
    finally:
        await request.shutdown()
