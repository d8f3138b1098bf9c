"""Async client for the LiFi quote API."""

from __future__ import annotations

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
    to_decimal,
    usd_to_str,
)


class LiFiAdapter(HttpBridgeAdapter):
    """Thin wrapper around https://li.quest/v1/quote."""

    name = Provider.LIFI
    base_url = "https://li.quest"

    def _headers(self, credentials: ProviderCredentials) -> Dict[str, str]:
        headers = {"accept": "application/json"}
        if credentials.lifi_api_key:
            headers["x-lifi-api-key"] = credentials.lifi_api_key
        return headers

    async def fetch_quote(self, request: BridgeRequest, credentials: ProviderCredentials) -> Quote:
        params = {
            "fromChain": request.from_chain_id,
            "toChain": request.to_chain_id,
            "fromToken": request.token_address,
            "toToken": request.dest_token_address,
            "fromAmount": str(request.amount_base_units),
            "fromAddress": request.user_address,
        }
        payload = await self._request("GET", "/v1/quote", credentials, params=params)
        return self.normalize(payload, request)

    def normalize(self, payload: Dict[str, Any], request: BridgeRequest) -> Quote:
        if not isinstance(payload, dict):
            raise ProviderError(self.name.value, "Unexpected response shape")
        estimate = payload.get("estimate") or {}
        action = payload.get("action") or {}
        to_amount = estimate.get("toAmount") or payload.get("toAmount")
        if to_amount is None:
            raise ProviderError(self.name.value, "Quote is missing toAmount")
        dest_amount = parse_int_units(self.name, to_amount, "toAmount")
        from_amount = estimate.get("fromAmount") or action.get("fromAmount") or request.amount_base_units

        gas_costs = estimate.get("gasCosts") or []
        gas_fee = to_decimal(gas_costs[0].get("amountUSD")) if gas_costs and isinstance(gas_costs[0], dict) else to_decimal(None)
        fee_costs = sum_usd(estimate.get("feeCosts"))

        return Quote(
            provider=self.name,
            dest_amount=dest_amount,
            dest_amount_formatted=format_token_amount(dest_amount, request.decimals, request.token),
            duration_seconds=parse_duration(estimate.get("executionDuration"), default=0),
            gas_fee_usd=usd_to_str(gas_fee),
            fee_costs_usd=usd_to_str(fee_costs) if fee_costs else None,
            total_fees_usd=usd_to_str(gas_fee + fee_costs) if fee_costs else None,
            bridge_loss_percentage=bridge_loss_percentage(from_amount, dest_amount),
            dest_decimals=request.decimals,
            raw=payload,
        )
