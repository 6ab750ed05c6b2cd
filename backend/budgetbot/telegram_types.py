"""Typed view of incoming Telegram webhook updates.

Raw updates are validated into pydantic models and then classified into one
of the variants of :data:`InboundUpdate`, so handlers never touch untyped
payloads.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .schemas import TelegramUserIn


class TelegramChat(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    type: str = "private"


class TelegramMessage(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    message_id: int
    sender: Optional[TelegramUserIn] = Field(default=None, alias="from")
    chat: TelegramChat
    date: int = 0
    text: Optional[str] = None


class TelegramUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    update_id: Optional[int] = None
    message: Optional[TelegramMessage] = None


@dataclass(frozen=True, slots=True)
class TextMessageUpdate:
    chat_id: int
    sender: TelegramUserIn
    text: str
    kind: Literal["text"] = "text"


@dataclass(frozen=True, slots=True)
class IgnoredUpdate:
    reason: str
    kind: Literal["ignored"] = "ignored"


InboundUpdate = Union[TextMessageUpdate, IgnoredUpdate]


def classify_update(update: TelegramUpdate) -> InboundUpdate:
    message = update.message
    if message is None:
        return IgnoredUpdate(reason="no message")
    if message.sender is None:
        return IgnoredUpdate(reason="no sender")
    if message.sender.is_bot:
        return IgnoredUpdate(reason="sent by a bot")
    text = (message.text or "").strip()
    if not text:
        return IgnoredUpdate(reason="no text")
    return TextMessageUpdate(chat_id=message.chat.id, sender=message.sender, text=text)
