"""Chat rendering of ranked quotes and the compact action-token protocol.

Action tokens are the only state that survives between chat turns: the
transport hands back the button payload and nothing else, so every token
must carry enough to rebuild the request from the registry alone.

Wire format (ASCII, colon-delimited, at most 64 bytes)::

    x1:<provider>:<amount>:<token>:<from_chain>:<to_chain>   execute
    r1:<amount>:<token>:<from_chain>:<to_chain>              refresh

The numeric suffix versions the token shape. Unknown tags, including the
unversioned ``bridge:``/``refresh:`` shapes, are rejected.
"""

from __future__ import annotations

import html
from typing import Dict, List, Optional

from .errors import TokenDecodeError, TokenEncodeError
from .models import (
    ActionKind,
    ActionToken,
    BridgeRequest,
    DisplayAction,
    DisplayPayload,
    Provider,
    QuoteOutcome,
    RankedResult,
)

MAX_TOKEN_BYTES = 64
SEPARATOR = ":"

EXECUTE_TAG = "x1"
REFRESH_TAG = "r1"

# tag -> (action, field count including the tag)
TOKEN_SHAPES: Dict[str, tuple] = {
    EXECUTE_TAG: (ActionKind.EXECUTE, 6),
    REFRESH_TAG: (ActionKind.REFRESH, 5),
}

PROVIDER_EMOJI: Dict[Provider, str] = {
    Provider.LIFI: "🔗",
    Provider.HYPERLANE: "🚀",
    Provider.SQUID: "🦑",
    Provider.STARGATE: "🌠",
    Provider.ACROSS: "🌀",
}

BEST_MARKER = "⭐"
REFRESH_LABEL = "🔄 Refresh Quotes"

USAGE_TEXT = (
    "🌉 <b>Bridge quotes</b>\n"
    "Send a command like:\n"
    "<code>bridge 10 usdc from base to mantle</code>\n\n"
    "Supported chains: {chains}\n"
    "Supported tokens: {tokens}"
)

HELP_TEXT = (
    "📚 <b>Commands</b>\n"
    "• /bridge &lt;amount&gt; &lt;token&gt; from &lt;chain&gt; to &lt;chain&gt; - compare quotes\n"
    "• /help - show this help\n"
    "• /ping - test responsiveness\n\n"
    "You can also just type the command without the slash.\n"
    "Tap a provider button to see its confirmation, or 🔄 to refresh.\n\n"
)

INVALID_ACTION_TEXT = (
    "⚠️ That action is invalid or has expired.\n"
    "Please send the bridge command again, e.g. <code>bridge 10 usdc from base to mantle</code>."
)


def _esc(value: object) -> str:
    return html.escape(str(value), quote=False)


def provider_emoji(provider: Provider) -> str:
    return PROVIDER_EMOJI.get(provider, "🌉")


def _rank_marker(rank: int) -> str:
    if rank == 1:
        return BEST_MARKER
    if rank < 10:
        return f"{rank}️⃣"
    return f"#{rank}"


# ---------------------------------------------------------------------------
# Action tokens
# ---------------------------------------------------------------------------


def execute_action(provider: Provider, request: BridgeRequest) -> ActionToken:
    return ActionToken(
        action=ActionKind.EXECUTE,
        provider=provider,
        amount=request.amount,
        token=request.token,
        from_chain=request.from_chain,
        to_chain=request.to_chain,
    )


def refresh_action(request: BridgeRequest) -> ActionToken:
    return ActionToken(
        action=ActionKind.REFRESH,
        amount=request.amount,
        token=request.token,
        from_chain=request.from_chain,
        to_chain=request.to_chain,
    )


def encode_action(token: ActionToken) -> str:
    if token.action is ActionKind.EXECUTE:
        if token.provider is None:
            raise TokenEncodeError("Execute actions need a provider")
        fields = [EXECUTE_TAG, token.provider.value]
    else:
        fields = [REFRESH_TAG]
    fields += [token.amount, token.token, token.from_chain, token.to_chain]

    for value in fields:
        if not value or SEPARATOR in value or not value.isascii():
            raise TokenEncodeError(f"Cannot encode field {value!r}")

    data = SEPARATOR.join(fields)
    if len(data.encode("ascii")) > MAX_TOKEN_BYTES:
        raise TokenEncodeError(f"Action token exceeds {MAX_TOKEN_BYTES} bytes")
    return data


def decode_action(data: str) -> ActionToken:
    """Parse a callback payload, rejecting anything not exactly well-formed."""

    if not data or not data.isascii() or len(data.encode("ascii")) > MAX_TOKEN_BYTES:
        raise TokenDecodeError("Malformed action token")

    fields = data.split(SEPARATOR)
    shape = TOKEN_SHAPES.get(fields[0])
    if shape is None:
        raise TokenDecodeError(f"Unknown action tag {fields[0]!r}")
    action, arity = shape
    if len(fields) != arity:
        raise TokenDecodeError(f"Expected {arity} fields for {fields[0]!r}, got {len(fields)}")
    if any(not value for value in fields):
        raise TokenDecodeError("Empty field in action token")

    provider: Optional[Provider] = None
    if action is ActionKind.EXECUTE:
        provider = Provider.parse(fields[1])
        if provider is None:
            raise TokenDecodeError(f"Unknown provider {fields[1]!r}")
        rest = fields[2:]
    else:
        rest = fields[1:]

    amount, token, from_chain, to_chain = rest
    return ActionToken(
        action=action,
        provider=provider,
        amount=amount,
        token=token,
        from_chain=from_chain,
        to_chain=to_chain,
    )


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _header(request: BridgeRequest) -> str:
    return (
        f"🌉 <b>Bridge Quotes: {_esc(request.amount)} {_esc(request.token.upper())}</b>\n"
        f"📤 From: {_esc(request.from_chain.upper())}\n"
        f"📥 To: {_esc(request.to_chain.upper())}\n\n"
    )


def _quote_lines(outcome: QuoteOutcome) -> List[str]:
    quote = outcome.quote
    lines = [
        f"💰 Output: {_esc(quote.dest_amount_formatted)}",
        f"⏱️ Time: {quote.duration_seconds}s",
        f"💸 Gas: ${_esc(quote.gas_fee_usd)}",
    ]
    if quote.fee_costs_usd is not None:
        lines.append(f"💳 Fees: ${_esc(quote.fee_costs_usd)}")
    if quote.total_fees_usd is not None:
        lines.append(f"💵 Total: ${_esc(quote.total_fees_usd)}")
    lines.append(f"📉 Loss: {_esc(quote.bridge_loss_percentage)}%")
    return lines


def render_quotes(request: BridgeRequest, result: RankedResult) -> DisplayPayload:
    text = _header(request)

    if result.best_quote is None:
        text += "❌ No quotes available. Please try again later.\n\n<b>Errors:</b>\n"
        for outcome in result.failures:
            text += f"• {_esc(outcome.provider.value)}: {_esc(outcome.error)}\n"
        return DisplayPayload(
            text=text,
            actions=[DisplayAction(label=REFRESH_LABEL, token=refresh_action(request))],
        )

    blocks: List[str] = []
    actions: List[DisplayAction] = []
    for ranking, outcome in zip(result.rankings, result.ranked_outcomes):
        emoji = provider_emoji(outcome.provider)
        title = f"{_rank_marker(ranking.rank)} {emoji} <b>{_esc(outcome.provider.value.upper())}</b>"
        blocks.append("\n".join([title, *_quote_lines(outcome)]))

        prefix = f"{BEST_MARKER} " if ranking.rank == 1 else ""
        actions.append(
            DisplayAction(
                label=f"{prefix}{emoji} {outcome.provider.value.upper()}",
                token=execute_action(outcome.provider, request),
            )
        )

    text += "\n\n".join(blocks)
    if result.failures:
        unavailable = ", ".join(
            f"{_esc(outcome.provider.value)} ({_esc(outcome.error)})" for outcome in result.failures
        )
        text += f"\n\n⚠️ Unavailable: {unavailable}"

    actions.append(DisplayAction(label=REFRESH_LABEL, token=refresh_action(request)))
    return DisplayPayload(text=text, actions=actions)


def render_confirmation(request: BridgeRequest, outcome: QuoteOutcome) -> DisplayPayload:
    emoji = provider_emoji(outcome.provider)
    name = _esc(outcome.provider.value.upper())
    refresh = [DisplayAction(label=REFRESH_LABEL, token=refresh_action(request))]

    if not outcome.success or outcome.quote is None:
        text = (
            f"{emoji} <b>{name}</b> could not quote {_esc(request.amount)} {_esc(request.token.upper())} "
            f"from {_esc(request.from_chain.upper())} to {_esc(request.to_chain.upper())}.\n"
            f"⚠️ {_esc(outcome.error)}"
        )
        return DisplayPayload(text=text, actions=refresh)

    quote = outcome.quote
    text = (
        f"{emoji} <b>{name} Bridge Confirmation</b>\n\n"
        f"📤 From: {_esc(request.from_chain.upper())}\n"
        f"📥 To: {_esc(request.to_chain.upper())}\n"
        f"💰 Amount: {_esc(request.amount)} {_esc(request.token.upper())}\n"
        f"📈 You'll receive: {_esc(quote.dest_amount_formatted)}\n"
        f"💸 Gas cost: ${_esc(quote.gas_fee_usd)}\n"
    )
    if quote.fee_costs_usd is not None:
        text += f"💳 Fee costs: ${_esc(quote.fee_costs_usd)}\n"
    if quote.total_fees_usd is not None:
        text += f"💵 Total fees: ${_esc(quote.total_fees_usd)}\n"
    text += (
        f"⏱️ Estimated time: {quote.duration_seconds}s\n\n"
        "⚠️ Quotes only: no transaction is executed by this bot."
    )
    return DisplayPayload(text=text, actions=refresh)


def render_usage(chains: List[str], tokens: List[str]) -> DisplayPayload:
    return DisplayPayload(
        text=USAGE_TEXT.format(
            chains=_esc(", ".join(chains)),
            tokens=_esc(", ".join(token.upper() for token in tokens)),
        )
    )


def render_invalid_action() -> DisplayPayload:
    return DisplayPayload(text=INVALID_ACTION_TEXT)


def render_help(chains: List[str], tokens: List[str]) -> DisplayPayload:
    return DisplayPayload(text=HELP_TEXT + render_usage(chains, tokens).text)
