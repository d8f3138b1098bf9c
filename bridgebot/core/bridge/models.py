"""Typed models used by the bridge quote subsystem."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from enum import Enum
from typing import Any, List, Optional


class Provider(str, Enum):
    LIFI = "lifi"
    SQUID = "squid"
    STARGATE = "stargate"
    HYPERLANE = "hyperlane"
    ACROSS = "across"

    @classmethod
    def parse(cls, value: str) -> Optional["Provider"]:
        try:
            return cls(value)
        except ValueError:
            return None


class ActionKind(str, Enum):
    EXECUTE = "execute"
    REFRESH = "refresh"


@dataclass(frozen=True)
class BridgeRequest:
    """A validated bridge command. Built by the parser, never mutated."""

    amount: str
    token: str
    from_chain: str
    to_chain: str
    from_chain_id: int
    to_chain_id: int
    token_address: str
    user_address: str
    dest_token_address: Optional[str] = None
    decimals: int = 18

    @property
    def amount_decimal(self) -> Decimal:
        return Decimal(self.amount)

    @property
    def amount_base_units(self) -> int:
        scaled = self.amount_decimal * (Decimal(10) ** self.decimals)
        return int(scaled.quantize(Decimal("1"), rounding=ROUND_DOWN))


@dataclass(frozen=True)
class Quote:
    """Provider quote normalized to the fields ranking and display use."""

    provider: Provider
    dest_amount: str
    dest_amount_formatted: str
    duration_seconds: int
    gas_fee_usd: str
    bridge_loss_percentage: str
    dest_decimals: int = 6
    total_fees_usd: Optional[str] = None
    fee_costs_usd: Optional[str] = None
    # Opaque provider response kept for diagnostics only
    raw: Any = field(default=None, compare=False, repr=False)

    @property
    def dest_amount_human(self) -> Decimal:
        try:
            units = Decimal(self.dest_amount)
        except (InvalidOperation, TypeError, ValueError):
            return Decimal("0")
        return units / (Decimal(10) ** self.dest_decimals)

    @property
    def effective_fee_usd(self) -> str:
        """Aggregate fee when the provider reports one, else gas alone."""
        if self.total_fees_usd is not None:
            return self.total_fees_usd
        return self.gas_fee_usd


@dataclass(frozen=True)
class QuoteOutcome:
    provider: Provider
    success: bool
    quote: Optional[Quote] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, provider: Provider, quote: Quote) -> "QuoteOutcome":
        return cls(provider=provider, success=True, quote=quote, error=None)

    @classmethod
    def failed(cls, provider: Provider, error: str) -> "QuoteOutcome":
        return cls(provider=provider, success=False, quote=None, error=error or "Unknown error")


@dataclass(frozen=True)
class Ranking:
    provider: Provider
    score: float
    rank: int


@dataclass(frozen=True)
class RankedResult:
    best_quote: Optional[QuoteOutcome]
    all_quotes: List[QuoteOutcome]
    rankings: List[Ranking]

    @property
    def ranked_outcomes(self) -> List[QuoteOutcome]:
        """Successful outcomes in rank order."""
        by_provider = {outcome.provider: outcome for outcome in self.all_quotes if outcome.success}
        return [by_provider[ranking.provider] for ranking in self.rankings]

    @property
    def failures(self) -> List[QuoteOutcome]:
        return [outcome for outcome in self.all_quotes if not outcome.success]


@dataclass(frozen=True)
class ActionToken:
    action: ActionKind
    amount: str
    token: str
    from_chain: str
    to_chain: str
    provider: Optional[Provider] = None


@dataclass(frozen=True)
class DisplayAction:
    label: str
    token: ActionToken


@dataclass(frozen=True)
class DisplayPayload:
    text: str
    actions: List[DisplayAction] = field(default_factory=list)
