"""Long-polling Telegram bot, an alternative to the webhook for local runs."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.constants import ParseMode
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from . import crud
from .analysis import period_start, summarize_period
from .config import get_settings
from .db import Base, SessionLocal, engine
from .errors import ConversionError, ParseError, UnknownCurrencyError
from .models import TransactionKind, UserModel
from .schemas import PeriodSummary, TelegramUserIn
from .seed import seed_reference_data
from .services import confirmation_text, failure_text, format_amount, record_chat_message

logger = logging.getLogger(__name__)

settings = get_settings()

if not settings.telegram_bot_token:
    logger.warning("Telegram bot token is not configured. Bot cannot start without TELEGRAM_BOT_TOKEN.")

HELP_TEXT = (
    "📌 Tips:\n"
    "• Send `10.12 $ Food`, `10.12 USD Food` or just `10.12 Food`\n"
    "• Start with `+` to log income, e.g. `+1200 Salary`\n"
    "• /report for week, month or year totals\n"
    "• /recent to double-check the last entries"
)


def _report_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [
            [
                InlineKeyboardButton("This week", callback_data="report:week"),
                InlineKeyboardButton("This month", callback_data="report:month"),
                InlineKeyboardButton("This year", callback_data="report:year"),
            ]
        ]
    )


def ensure_bot_user(telegram_user: Any) -> tuple[UserModel, bool]:
    """Get or create the user bound to the Telegram sender."""
    if telegram_user is None:
        raise ValueError("Received update without telegram user attached.")

    data = TelegramUserIn(
        id=telegram_user.id,
        is_bot=bool(getattr(telegram_user, "is_bot", False)),
        username=getattr(telegram_user, "username", None),
        first_name=getattr(telegram_user, "first_name", None),
        last_name=getattr(telegram_user, "last_name", None),
        language_code=getattr(telegram_user, "language_code", None),
    )
    with SessionLocal() as db:
        user, created = crud.get_or_create_user(db, data)
    if created:
        logger.info("Created new Telegram user %s (%s)", user.id, data.id)
    return user, created


def _log_text(telegram_user: Any, text: str) -> str:
    user, _ = ensure_bot_user(telegram_user)
    with SessionLocal() as db:
        try:
            recorded = record_chat_message(db, user, text)
        except (ParseError, UnknownCurrencyError, ConversionError) as exc:
            logger.info("Could not log %r for user %s: %s", text, user.id, exc.message)
            return failure_text(exc)
    return confirmation_text(recorded)


def _build_summary(telegram_user: Any, period: str) -> PeriodSummary:
    user, _ = ensure_bot_user(telegram_user)
    end = datetime.now(timezone.utc)
    start = period_start(period, end)
    with SessionLocal() as db:
        return summarize_period(
            period,
            start,
            end,
            crud.list_transactions(db, TransactionKind.SPENDING, user.id, start=start, end=end),
            crud.list_transactions(db, TransactionKind.EARNING, user.id, start=start, end=end),
            {c.id: c.name for c in crud.list_categories(db, TransactionKind.SPENDING)},
            {c.id: c.name for c in crud.list_categories(db, TransactionKind.EARNING)},
            base_currency=settings.base_currency,
        )


def format_summary(summary: PeriodSummary) -> str:
    code = summary.base_currency
    lines = [
        f"📊 *Summary* ({summary.start:%Y-%m-%d} → {summary.end:%Y-%m-%d})",
        f"🧾 Spent: {format_amount(summary.total_spent)} {code}",
        f"💰 Income: {format_amount(summary.total_income)} {code}",
        f"Net: {format_amount(summary.net_difference)} {code} • Savings rate: {summary.savings_rate}",
        f"Avg/day: {format_amount(summary.average_spent_per_day)} {code}",
    ]
    if summary.expenses_by_category:
        lines.append("\n🥇 *Top categories*")
        lines.extend(
            f"• {share.category}: {format_amount(share.total)} {code} ({share.percentage}%)"
            for share in summary.expenses_by_category[:5]
        )
    else:
        lines.append("\nNo spendings recorded yet.")
    return "\n".join(lines)


def _recent_lines(telegram_user: Any, limit: int = 5) -> list[str]:
    user, _ = ensure_bot_user(telegram_user)
    with SessionLocal() as db:
        transactions = crud.list_transactions(db, TransactionKind.SPENDING, user.id)[:limit]
    return [
        f"{tx.created_at:%Y-%m-%d} • {format_amount(tx.amount)} {tx.currency_code} – {tx.name}"
        for tx in transactions
    ]


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    _, created = await asyncio.to_thread(ensure_bot_user, update.effective_user)
    welcome = "🎉 Welcome back to your Budget Tracker!"
    if created:
        welcome = "👋 Hello and welcome! Your budget is ready."
    await update.message.reply_text(f"{welcome}\n\n{HELP_TEXT}", parse_mode=ParseMode.MARKDOWN)


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(HELP_TEXT, parse_mode=ParseMode.MARKDOWN)


async def report_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text("Choose a range:", reply_markup=_report_keyboard())


async def recent_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    lines = await asyncio.to_thread(_recent_lines, update.effective_user)
    if not lines:
        await update.message.reply_text("No spendings yet. Send one now!")
        return
    await update.message.reply_text("📝 Last entries:\n" + "\n".join(lines))


async def handle_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    text = (update.message.text or "").strip()
    if not text:
        return
    if text.lower() in {"report", "summary"}:
        await report_command(update, context)
        return

    reply = await asyncio.to_thread(_log_text, update.effective_user, text)
    await update.message.reply_text(reply)


async def handle_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    await query.answer()
    action, _, period = (query.data or "").partition(":")
    if action != "report" or period not in {"week", "month", "year"}:
        logger.warning("Unknown callback data %r", query.data)
        return
    summary = await asyncio.to_thread(_build_summary, update.effective_user, period)
    await query.edit_message_text(format_summary(summary), parse_mode=ParseMode.MARKDOWN)


def build_application() -> Application:
    if not settings.telegram_bot_token:
        raise RuntimeError("TELEGRAM_BOT_TOKEN is missing from configuration.")

    application = ApplicationBuilder().token(settings.telegram_bot_token).build()

    application.add_handler(CommandHandler("start", start_command))
    application.add_handler(CommandHandler("help", help_command))
    application.add_handler(CommandHandler("report", report_command))
    application.add_handler(CommandHandler("recent", recent_command))
    application.add_handler(CallbackQueryHandler(handle_callback))
    application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_text))
    return application


def main() -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    if not settings.telegram_bot_token:
        raise SystemExit("Please set TELEGRAM_BOT_TOKEN in the environment to run the bot.")
    Base.metadata.create_all(bind=engine)
    if settings.seed_reference_data:
        seed_reference_data(engine)
    application = build_application()
    logger.info("Starting Telegram bot...")
    application.run_polling(drop_pending_updates=True)


if __name__ == "__main__":
    main()
