#!/usr/bin/env python3
"""CLI for quoting bridges and running the Telegram bot locally"""

import argparse
import asyncio
import re
import sys

from bridgebot.config import settings
from bridgebot.core.bridge.encoder import decode_action, encode_action, render_quotes
from bridgebot.core.bridge.errors import TokenDecodeError, TokenEncodeError
from bridgebot.core.bridge.service import build_bridge_service
from bridgebot.logging_config import setup_logging


def _plain(text: str) -> str:
    """Strip the Telegram HTML tags for terminal output."""
    text = re.sub(r"</?(b|code)>", "", text)
    return text.replace("&lt;", "<").replace("&gt;", ">").replace("&amp;", "&")


async def cli_quote(text: str) -> int:
    service = build_bridge_service(settings)
    print(f"🔍 Fetching bridge quotes for: {text}")

    parsed = await service.quote_text(text)
    if parsed is None:
        print(_plain(service.usage().text))
        return 2

    request, result = parsed
    payload = render_quotes(request, result)
    print()
    print(_plain(payload.text))

    if result.rankings:
        print("\nRankings:")
        print("-" * 40)
        for ranking in result.rankings:
            print(f"{ranking.rank:2d}. {ranking.provider.value:<10} score={ranking.score:.4f}")

    print("\nActions:")
    for action in payload.actions:
        try:
            data = encode_action(action.token)
        except TokenEncodeError as exc:
            data = f"<unencodable: {exc.message}>"
        print(f"  {action.label:<20} {data}")
    return 0 if result.best_quote else 1


def cli_decode(data: str) -> int:
    service = build_bridge_service(settings)
    try:
        token = decode_action(data)
    except TokenDecodeError as exc:
        print(f"❌ Invalid action token: {exc.message}")
        return 1

    print(f"action:     {token.action.value}")
    if token.provider:
        print(f"provider:   {token.provider.value}")
    print(f"amount:     {token.amount} {token.token.upper()}")
    print(f"route:      {token.from_chain} -> {token.to_chain}")

    request = service.parser.reconstruct(token.amount, token.token, token.from_chain, token.to_chain)
    if request is None:
        print("⚠️  Route no longer valid for the chain registry")
        return 1
    print(f"chain ids:  {request.from_chain_id} -> {request.to_chain_id}")
    print(f"token addr: {request.token_address}")
    return 0


def cli_bot() -> int:
    from bridgebot.telegram import build_application

    if not settings.has_telegram_token:
        print("❌ BOT_TOKEN is not set")
        return 1
    service = build_bridge_service(settings)
    application = build_application(settings.telegram_bot_token, service, polling=True)
    print("🤖 Bridge bot polling for updates (Ctrl+C to stop)")
    application.run_polling(drop_pending_updates=True)
    return 0


async def cli_set_commands() -> int:
    from bridgebot.telegram.bot import BOT_COMMANDS, build_application, set_bot_commands

    if not settings.has_telegram_token:
        print("❌ BOT_TOKEN is not set")
        return 1
    application = build_application(settings.telegram_bot_token, build_bridge_service(settings))
    print(f"📋 Registering {len(BOT_COMMANDS)} commands...")
    async with application:
        ok = await set_bot_commands(application)
    if not ok:
        print("❌ Telegram rejected the command list")
        return 1
    for command in BOT_COMMANDS:
        print(f"  /{command.command} - {command.description}")
    print("✅ Bot commands registered")
    return 0


def cli_serve() -> int:
    import uvicorn

    uvicorn.run(
        "bridgebot.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Bridge quote bot CLI")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    quote = sub.add_parser("quote", help="Compare quotes, e.g. 'bridge 10 usdc from base to mantle'")
    quote.add_argument("text", nargs="+", help="Bridge command text")

    decode = sub.add_parser("decode", help="Decode a button action token")
    decode.add_argument("data", help="Action token, e.g. x1:stargate:10:usdc:base:mantle")

    sub.add_parser("bot", help="Run the Telegram bot with long polling")
    sub.add_parser("set-commands", help="Register the bot command menu with Telegram")
    sub.add_parser("serve", help="Run the HTTP API (webhook + quotes)")

    args = parser.parse_args()
    setup_logging(args.log_level)

    try:
        if args.command == "quote":
            return asyncio.run(cli_quote(" ".join(args.text)))
        if args.command == "decode":
            return cli_decode(args.data)
        if args.command == "bot":
            return cli_bot()
        if args.command == "set-commands":
            return asyncio.run(cli_set_commands())
        if args.command == "serve":
            return cli_serve()
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
        return 130
    return 2


if __name__ == "__main__":
    sys.exit(main())
