"""Async client for the Stargate v1 quotes API."""

from __future__ import annotations

from decimal import Decimal, ROUND_DOWN
from typing import Any, Dict

from ..core.bridge.errors import ProviderError
from ..core.bridge.models import BridgeRequest, Provider, Quote
from .base import (
    HttpBridgeAdapter,
    ProviderCredentials,
    bridge_loss_percentage,
    format_token_amount,
    parse_duration,
    parse_int_units,
    sum_usd,
    usd_to_str,
)

MIN_AMOUNT_RATIO = Decimal("0.95")
DEFAULT_DURATION_S = 120


class StargateAdapter(HttpBridgeAdapter):
    """Thin wrapper around https://stargate.finance/api/v1/quotes.

    Stargate keys chains by name; our registry symbols already match.
    """

    name = Provider.STARGATE
    base_url = "https://stargate.finance"

    async def fetch_quote(self, request: BridgeRequest, credentials: ProviderCredentials) -> Quote:
        src_amount = request.amount_base_units
        min_amount = (Decimal(src_amount) * MIN_AMOUNT_RATIO).quantize(Decimal("1"), rounding=ROUND_DOWN)
        params = {
            "srcToken": request.token_address,
            "dstToken": request.dest_token_address,
            "srcAddress": request.user_address,
            "dstAddress": request.user_address,
            "srcChainKey": request.from_chain,
            "dstChainKey": request.to_chain,
            "srcAmount": str(src_amount),
            "dstAmountMin": str(int(min_amount)),
        }
        payload = await self._request("GET", "/api/v1/quotes", credentials, params=params)
        return self.normalize(payload, request)

    def normalize(self, payload: Dict[str, Any], request: BridgeRequest) -> Quote:
        quotes = payload.get("quotes") if isinstance(payload, dict) else None
        if not quotes:
            raise ProviderError(self.name.value, "No routes available")
        quote = quotes[0]
        if not isinstance(quote, dict):
            raise ProviderError(self.name.value, "Unexpected quote shape")
        if quote.get("error"):
            error = quote["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise ProviderError(self.name.value, message or "Route rejected")
        if quote.get("dstAmount") is None:
            raise ProviderError(self.name.value, "Quote is missing dstAmount")

        dest_amount = parse_int_units(self.name, quote.get("dstAmount"), "dstAmount")
        duration = (quote.get("duration") or {}).get("estimated")
        fees = sum_usd(quote.get("fees"))

        return Quote(
            provider=self.name,
            dest_amount=dest_amount,
            dest_amount_formatted=format_token_amount(dest_amount, request.decimals, request.token),
            duration_seconds=parse_duration(duration, default=DEFAULT_DURATION_S),
            gas_fee_usd=usd_to_str(fees),
            bridge_loss_percentage=bridge_loss_percentage(request.amount_base_units, dest_amount),
            dest_decimals=request.decimals,
            raw=payload,
        )
