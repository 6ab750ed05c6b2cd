"""Best-effort delivery of chat messages through the Telegram Bot API."""

import logging

from telegram import Bot
from telegram.error import TelegramError

logger = logging.getLogger(__name__)


class TelegramMessenger:
    def __init__(self, bot: Bot) -> None:
        self.bot = bot

    async def send(self, chat_id: int, text: str, parse_mode: str | None = None) -> bool:
        """Send ``text`` to ``chat_id``; failures are logged and reported as ``False``."""
        try:
            await self.bot.send_message(chat_id=chat_id, text=text, parse_mode=parse_mode)
        except TelegramError as exc:
            logger.error("Failed to send Telegram message to %s: %s", chat_id, exc)
            return False
        return True
