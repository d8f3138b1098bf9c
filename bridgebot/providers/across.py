"""Async client for Across' suggested-fees API."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict

from ..core.bridge.errors import ProviderError
from ..core.bridge.models import BridgeRequest, Provider, Quote
from ..core.bridge.registry import STABLE_TOKENS
from .base import (
    HttpBridgeAdapter,
    ProviderCredentials,
    bridge_loss_percentage,
    format_token_amount,
    parse_duration,
    parse_int_units,
    to_decimal,
    usd_to_str,
)


class AcrossAdapter(HttpBridgeAdapter):
    """Thin wrapper around https://app.across.to/api/suggested-fees.

    Across reports fees in input-token units; they are priced in USD 1:1 for
    stablecoins and at the reference ETH price otherwise.
    """

    name = Provider.ACROSS
    base_url = "https://app.across.to"

    async def fetch_quote(self, request: BridgeRequest, credentials: ProviderCredentials) -> Quote:
        params: Dict[str, Any] = {
            "inputToken": request.token_address,
            "outputToken": request.dest_token_address,
            "originChainId": request.from_chain_id,
            "destinationChainId": request.to_chain_id,
            "amount": str(request.amount_base_units),
        }
        if credentials.across_integrator_id:
            params["integratorId"] = credentials.across_integrator_id
        payload = await self._request("GET", "/api/suggested-fees", credentials, params=params)
        if isinstance(payload, dict):
            payload = {**payload, "_tokenPriceUsd": str(self._token_price(request, credentials))}
        return self.normalize(payload, request)

    @staticmethod
    def _token_price(request: BridgeRequest, credentials: ProviderCredentials) -> Decimal:
        if request.token in STABLE_TOKENS:
            return Decimal("1")
        return credentials.eth_price_usd

    def normalize(self, payload: Dict[str, Any], request: BridgeRequest) -> Quote:
        if not isinstance(payload, dict):
            raise ProviderError(self.name.value, "Unexpected response shape")
        if payload.get("isAmountTooLow"):
            raise ProviderError(self.name.value, "Amount too low for Across")

        input_units = request.amount_base_units
        relay_fee_units = to_decimal((payload.get("totalRelayFee") or {}).get("total"))
        if payload.get("outputAmount") is not None:
            dest_amount = parse_int_units(self.name, payload.get("outputAmount"), "outputAmount")
        else:
            dest_amount = str(max(input_units - int(relay_fee_units), 0))

        scale = Decimal(10) ** request.decimals
        price = to_decimal(payload.get("_tokenPriceUsd"), default=Decimal("1"))
        gas_units = to_decimal((payload.get("relayerGasFee") or {}).get("total"))
        gas_usd = (gas_units / scale * price).quantize(Decimal("0.0001"))
        total_usd = (relay_fee_units / scale * price).quantize(Decimal("0.0001"))

        return Quote(
            provider=self.name,
            dest_amount=dest_amount,
            dest_amount_formatted=format_token_amount(dest_amount, request.decimals, request.token),
            duration_seconds=parse_duration(payload.get("estimatedFillTimeSec"), default=0),
            gas_fee_usd=usd_to_str(gas_usd),
            total_fees_usd=usd_to_str(total_usd),
            bridge_loss_percentage=bridge_loss_percentage(input_units, dest_amount),
            dest_decimals=request.decimals,
            raw=payload,
        )
