"""Telegram webhook: every text message sent to the bot becomes a transaction."""

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Depends, Query, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from .. import crud, services
from ..db import get_db
from ..deps import get_messenger
from ..errors import ConfigurationError, ConversionError, ParseError, RequestError, UnknownCurrencyError
from ..messaging import TelegramMessenger
from ..telegram_types import IgnoredUpdate, TelegramUpdate, classify_update

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/telegram-webhook", tags=["telegram"])


@router.get("")
def webhook_status() -> dict[str, Any]:
    return {"ok": True, "message": "Webhook endpoint is active"}


async def _read_update(request: Request) -> dict[str, Any]:
    try:
        payload = await request.json()
    except ValueError as exc:
        raise RequestError("Invalid JSON body") from exc
    if not isinstance(payload, dict):
        raise RequestError("Telegram update must be a JSON object")
    return payload


@router.post("")
async def receive_update(
    request: Request,
    set_webhook: str | None = Query(default=None, alias="setWebhook"),
    db: Session = Depends(get_db),
    messenger: TelegramMessenger | None = Depends(get_messenger),
) -> dict[str, Any]:
    if messenger is None:
        logger.error("TELEGRAM_BOT_TOKEN is not set")
        raise ConfigurationError("Bot token not configured")

    payload = await _read_update(request)
    # Webhook registration pings carry no update.
    if set_webhook is not None and payload.get("update_id") is None:
        return {"ok": True}

    try:
        update = TelegramUpdate.model_validate(payload)
    except ValidationError as exc:
        raise RequestError(
            "Invalid Telegram update",
            details=exc.errors(include_url=False, include_context=False, include_input=False),
        ) from exc

    inbound = classify_update(update)
    if isinstance(inbound, IgnoredUpdate):
        logger.info("Ignoring update %s: %s", update.update_id, inbound.reason)
        return {"ok": True}

    user, created = await asyncio.to_thread(crud.get_or_create_user, db, inbound.sender)
    if created:
        logger.info("Registered telegram user %s as %s", inbound.sender.id, user.id)

    try:
        recorded = await asyncio.to_thread(services.record_chat_message, db, user, inbound.text)
    except (ParseError, UnknownCurrencyError, ConversionError) as exc:
        logger.info("Could not log %r for user %s: %s", inbound.text, user.id, exc.message)
        await messenger.send(inbound.chat_id, services.failure_text(exc))
        return {"ok": True, "error": exc.message}

    await messenger.send(inbound.chat_id, services.confirmation_text(recorded))
    return {"ok": True, recorded.kind.value: recorded.summary().model_dump()}
