"""Telegram transport for bridge quotes."""

from .bot import BOT_COMMANDS, SERVICE_KEY, build_application, build_keyboard, register_handlers

__all__ = ["BOT_COMMANDS", "SERVICE_KEY", "build_application", "build_keyboard", "register_handlers"]
