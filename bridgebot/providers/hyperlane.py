"""Hyperlane warp route quotes.

Warp routes move collateral 1:1, so the quote is the input amount minus
nothing; the cost is origin-chain gas, estimated from ``eth_gasPrice``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, FrozenSet, Optional, Tuple

import httpx

from ..core.bridge.errors import ProviderError
from ..core.bridge.models import BridgeRequest, Provider, Quote
from .base import (
    HttpBridgeAdapter,
    ProviderCredentials,
    decimal_to_str,
    format_token_amount,
    usd_to_str,
)

# (origin, destination) -> tokens with a deployed warp route
WARP_ROUTES: Dict[Tuple[str, str], FrozenSet[str]] = {
    ("base", "arbitrum"): frozenset({"usdc"}),
}

ORIGIN_APPROVE_GAS = 50_000
ORIGIN_BRIDGE_GAS = 250_000
DESTINATION_GAS = 200_000
ESTIMATED_DURATION_S = 300


class HyperlaneAdapter(HttpBridgeAdapter):
    name = Provider.HYPERLANE

    def unsupported_reason(self, request: BridgeRequest) -> Optional[str]:
        tokens = WARP_ROUTES.get((request.from_chain, request.to_chain))
        if not tokens or request.token not in tokens:
            return "Route not supported"
        return super().unsupported_reason(request)

    async def fetch_quote(self, request: BridgeRequest, credentials: ProviderCredentials) -> Quote:
        rpc_url = credentials.rpc_urls.get(request.from_chain)
        if not rpc_url:
            raise ProviderError(self.name.value, f"RPC URL not available for {request.from_chain}")

        gas_price_wei = await self._gas_price(rpc_url)
        payload = {
            "gasPriceWei": str(gas_price_wei),
            "originGasUnits": ORIGIN_APPROVE_GAS + ORIGIN_BRIDGE_GAS,
            "destinationGasUnits": DESTINATION_GAS,
            "ethPriceUsd": str(credentials.eth_price_usd),
        }
        return self.normalize(payload, request)

    async def _gas_price(self, rpc_url: str) -> int:
        body = {"jsonrpc": "2.0", "id": 1, "method": "eth_gasPrice", "params": []}
        async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
            response = await client.post(rpc_url, json=body)
            response.raise_for_status()
            data = response.json()
        if not isinstance(data, dict) or data.get("error") or not data.get("result"):
            raise ProviderError(self.name.value, "Failed to get origin gas price")
        try:
            return int(data["result"], 16)
        except (TypeError, ValueError):
            raise ProviderError(self.name.value, "Malformed gas price from RPC")

    def normalize(self, payload: Dict[str, Any], request: BridgeRequest) -> Quote:
        gas_price_wei = Decimal(str(payload["gasPriceWei"]))
        gas_units = Decimal(str(payload["originGasUnits"]))
        gas_eth = gas_units * gas_price_wei / Decimal(10) ** 18
        gas_usd = (gas_eth * Decimal(str(payload["ethPriceUsd"]))).quantize(Decimal("0.01"))
        dest_amount = str(request.amount_base_units)

        return Quote(
            provider=self.name,
            dest_amount=dest_amount,
            dest_amount_formatted=format_token_amount(dest_amount, request.decimals, request.token),
            duration_seconds=ESTIMATED_DURATION_S,
            gas_fee_usd=usd_to_str(gas_usd),
            bridge_loss_percentage="0.00",
            dest_decimals=request.decimals,
            raw={**payload, "gasFeeEth": decimal_to_str(gas_eth)},
        )
