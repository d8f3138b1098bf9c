"""Async client for Squid Router's v2 route API."""

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

DEFAULT_INTEGRATOR_ID = "test"


class SquidAdapter(HttpBridgeAdapter):
    """Thin wrapper around https://v2.api.squidrouter.com/v2/route."""

    name = Provider.SQUID
    base_url = "https://v2.api.squidrouter.com"

    def _headers(self, credentials: ProviderCredentials) -> Dict[str, str]:
        integrator_id = credentials.squid_integrator_id
        if not integrator_id or integrator_id == "INTEGRATOR_ID":
            integrator_id = DEFAULT_INTEGRATOR_ID
        return {
            "accept": "application/json",
            "content-type": "application/json",
            "x-integrator-id": integrator_id,
        }

    async def fetch_quote(self, request: BridgeRequest, credentials: ProviderCredentials) -> Quote:
        body = {
            "fromAddress": request.user_address,
            "fromChain": str(request.from_chain_id),
            "fromToken": request.token_address,
            "fromAmount": str(request.amount_base_units),
            "toChain": str(request.to_chain_id),
            "toToken": request.dest_token_address,
            "toAddress": request.user_address,
        }
        payload = await self._request("POST", "/v2/route", credentials, json=body)
        return self.normalize(payload, request)

    def normalize(self, payload: Dict[str, Any], request: BridgeRequest) -> Quote:
        route = payload.get("route") if isinstance(payload, dict) else None
        estimate = (route or {}).get("estimate")
        if not isinstance(estimate, dict):
            raise ProviderError(self.name.value, "Route response is missing an estimate")
        if estimate.get("toAmount") is None:
            raise ProviderError(self.name.value, "Route estimate is missing toAmount")

        dest_amount = parse_int_units(self.name, estimate.get("toAmount"), "toAmount")
        from_amount = estimate.get("fromAmount") or request.amount_base_units

        gas_costs = estimate.get("gasCosts") or []
        gas_fee = to_decimal(gas_costs[0].get("amountUSD")) if gas_costs and isinstance(gas_costs[0], dict) else to_decimal(None)
        fee_costs = sum_usd(estimate.get("feeCosts"))

        return Quote(
            provider=self.name,
            dest_amount=dest_amount,
            dest_amount_formatted=format_token_amount(dest_amount, request.decimals, request.token),
            duration_seconds=parse_duration(estimate.get("estimatedRouteDuration"), default=0),
            gas_fee_usd=usd_to_str(gas_fee),
            fee_costs_usd=usd_to_str(fee_costs),
            total_fees_usd=usd_to_str(gas_fee + fee_costs),
            bridge_loss_percentage=bridge_loss_percentage(from_amount, dest_amount),
            dest_decimals=request.decimals,
            raw=payload,
        )
