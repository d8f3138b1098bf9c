"""Composite scoring and ranking of successful quotes."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import List, Sequence

from .models import Quote, QuoteOutcome, RankedResult, Ranking

AMOUNT_WEIGHT = Decimal("0.6")
FEE_WEIGHT = Decimal("0.3")
LOSS_WEIGHT = Decimal("0.1")
FEE_CEILING_USD = Decimal("10")
LOSS_CEILING_PCT = Decimal("5")


def _as_decimal(value: object) -> Decimal:
    if value is None:
        return Decimal("0")
    try:
        result = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return Decimal("0")
    return result if result.is_finite() else Decimal("0")


def score_quote(quote: Quote) -> float:
    """Higher is better: destination amount dominates, fee and loss penalize."""

    amount = max(quote.dest_amount_human, Decimal("0"))
    fee = _as_decimal(quote.effective_fee_usd)
    loss = _as_decimal(quote.bridge_loss_percentage)

    score = (
        AMOUNT_WEIGHT * amount
        + FEE_WEIGHT * max(Decimal("0"), FEE_CEILING_USD - fee)
        + LOSS_WEIGHT * max(Decimal("0"), LOSS_CEILING_PCT - loss)
    )
    return float(score)


def rank_quotes(outcomes: Sequence[QuoteOutcome]) -> RankedResult:
    """Order successful outcomes by score; ties keep input order."""

    all_quotes = list(outcomes)
    successful = [outcome for outcome in all_quotes if outcome.success and outcome.quote is not None]
    if not successful:
        return RankedResult(best_quote=None, all_quotes=all_quotes, rankings=[])

    scored = [(score_quote(outcome.quote), outcome) for outcome in successful]
    # sorted() is stable, so equal scores keep provider order
    ordered = sorted(scored, key=lambda item: item[0], reverse=True)

    rankings: List[Ranking] = [
        Ranking(provider=outcome.provider, score=score, rank=index)
        for index, (score, outcome) in enumerate(ordered, start=1)
    ]
    return RankedResult(best_quote=ordered[0][1], all_quotes=all_quotes, rankings=rankings)
