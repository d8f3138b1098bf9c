"""python-telegram-bot handlers that deliver bridge quotes to chats."""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from telegram import BotCommand, InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.constants import ParseMode
from telegram.error import TelegramError
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)
from telegram.request import HTTPXRequest

from ..core.bridge.encoder import encode_action
from ..core.bridge.errors import TokenEncodeError
from ..core.bridge.models import DisplayPayload
from ..core.bridge.service import BridgeQuoteService

logger = logging.getLogger(__name__)

SERVICE_KEY = "bridge_service"

BOT_COMMANDS: List[BotCommand] = [
    BotCommand("start", "Show how to request bridge quotes"),
    BotCommand("bridge", "Compare quotes: /bridge 10 usdc from base to mantle"),
    BotCommand("help", "Show help information"),
    BotCommand("ping", "Test if the bot is responsive"),
]

WELCOME_TEXT = (
    "🤖 <b>Welcome to the bridge quote bot!</b>\n\n"
    "I compare LiFi, Squid, Stargate, Hyperlane and Across quotes and pick the best route.\n\n"
)

LOADING_TEXT = "⏳ Fetching bridge quotes..."
FAILURE_TEXT = "⚠️ Something went wrong while fetching quotes. Please try again."
UNKNOWN_COMMAND_TEXT = "❓ Unknown command. Use /help to see available commands."

# Plain messages are only answered when they look like a bridge request.
BRIDGE_TEXT = (
    filters.TEXT
    & ~filters.COMMAND
    & filters.Regex(re.compile(r"^\s*bridge\b", re.IGNORECASE))
)


def _service(context: ContextTypes.DEFAULT_TYPE) -> BridgeQuoteService:
    return context.bot_data[SERVICE_KEY]


def build_keyboard(payload: DisplayPayload) -> Optional[InlineKeyboardMarkup]:
    rows = []
    for action in payload.actions:
        try:
            data = encode_action(action.token)
        except TokenEncodeError as exc:
            logger.warning("Dropping button %r: %s", action.label, exc.message)
            continue
        rows.append([InlineKeyboardButton(action.label, callback_data=data)])
    return InlineKeyboardMarkup(rows) if rows else None


async def _edit_or_reply(update: Update, placeholder, payload: DisplayPayload) -> None:
    markup = build_keyboard(payload)
    if placeholder is not None:
        try:
            await placeholder.edit_text(
                payload.text,
                parse_mode=ParseMode.HTML,
                reply_markup=markup,
            )
            return
        except TelegramError as exc:
            logger.warning("Could not edit placeholder message: %s", exc)
    await update.effective_message.reply_text(
        payload.text,
        parse_mode=ParseMode.HTML,
        reply_markup=markup,
    )


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    usage = _service(context).usage()
    await update.effective_message.reply_text(WELCOME_TEXT + usage.text, parse_mode=ParseMode.HTML)


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    payload = _service(context).help()
    await update.effective_message.reply_text(payload.text, parse_mode=ParseMode.HTML)


async def ping(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.effective_message.reply_text("🏓 Pong!")


async def bridge_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handles ``/bridge ...`` and plain ``bridge ...`` messages."""
    message = update.effective_message
    text = (message.text or "").strip() if message else ""
    if not text:
        return

    service = _service(context)
    if service.parser.parse(text) is None:
        await message.reply_text(service.usage().text, parse_mode=ParseMode.HTML)
        return

    placeholder = await message.reply_text(LOADING_TEXT)
    payload = await service.handle_text(text)
    await _edit_or_reply(update, placeholder, payload)


async def unknown_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.effective_message.reply_text(UNKNOWN_COMMAND_TEXT)


async def on_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    if query is None:
        return
    await query.answer()
    payload = await _service(context).handle_action(query.data or "")
    await update.effective_message.reply_text(
        payload.text,
        parse_mode=ParseMode.HTML,
        reply_markup=build_keyboard(payload),
    )


async def on_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    logger.error("Unhandled error while processing update", exc_info=context.error)
    if isinstance(update, Update) and update.effective_message is not None:
        try:
            await update.effective_message.reply_text(FAILURE_TEXT)
        except TelegramError as exc:
            logger.warning("Could not notify chat about failure: %s", exc)


def register_handlers(application: Application, service: BridgeQuoteService) -> None:
    application.bot_data[SERVICE_KEY] = service
    application.add_handlers(
        [
            CommandHandler("start", start),
            CommandHandler("help", help_command),
            CommandHandler("ping", ping),
            CommandHandler("bridge", bridge_text),
            MessageHandler(BRIDGE_TEXT, bridge_text),
            MessageHandler(filters.COMMAND, unknown_command),
            CallbackQueryHandler(on_callback),
        ]
    )
    application.add_error_handler(on_error)


def build_application(
    token: str,
    service: BridgeQuoteService,
    *,
    polling: bool = False,
) -> Application:
    """Build the bot. Webhook deployments pass ``polling=False`` and feed updates manually."""

    builder = (
        Application.builder()
        .token(token)
        .request(
            HTTPXRequest(
                connection_pool_size=16,
                connect_timeout=20.0,
                read_timeout=30.0,
                write_timeout=30.0,
            )
        )
    )
    if not polling:
        builder = builder.updater(None)
    application = builder.build()
    register_handlers(application, service)
    return application


async def set_bot_commands(application: Application) -> bool:
    return await application.bot.set_my_commands(BOT_COMMANDS)
