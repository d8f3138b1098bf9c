from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..core.bridge.encoder import decode_action, encode_action, render_quotes
from ..core.bridge.errors import TokenDecodeError, TokenEncodeError
from ..core.bridge.models import BridgeRequest, QuoteOutcome
from ..core.bridge.service import BridgeQuoteService
from .deps import get_bridge_service

router = APIRouter(prefix="/quotes")


class QuoteTextRequest(BaseModel):
    text: str = Field(..., description="Command text, e.g. 'bridge 10 usdc from base to mantle'")


class BridgeRequestModel(BaseModel):
    amount: str
    token: str
    from_chain: str
    to_chain: str
    from_chain_id: int
    to_chain_id: int
    token_address: str
    user_address: str
    dest_token_address: Optional[str] = None

    @classmethod
    def from_request(cls, request: BridgeRequest) -> "BridgeRequestModel":
        return cls(
            amount=request.amount,
            token=request.token,
            from_chain=request.from_chain,
            to_chain=request.to_chain,
            from_chain_id=request.from_chain_id,
            to_chain_id=request.to_chain_id,
            token_address=request.token_address,
            user_address=request.user_address,
            dest_token_address=request.dest_token_address,
        )


class QuoteModel(BaseModel):
    dest_amount: str
    dest_amount_formatted: str
    duration_seconds: int
    gas_fee_usd: str
    total_fees_usd: Optional[str] = None
    fee_costs_usd: Optional[str] = None
    bridge_loss_percentage: str


class QuoteOutcomeModel(BaseModel):
    provider: str
    success: bool
    quote: Optional[QuoteModel] = None
    error: Optional[str] = None

    @classmethod
    def from_outcome(cls, outcome: QuoteOutcome) -> "QuoteOutcomeModel":
        quote = None
        if outcome.quote is not None:
            q = outcome.quote
            quote = QuoteModel(
                dest_amount=q.dest_amount,
                dest_amount_formatted=q.dest_amount_formatted,
                duration_seconds=q.duration_seconds,
                gas_fee_usd=q.gas_fee_usd,
                total_fees_usd=q.total_fees_usd,
                fee_costs_usd=q.fee_costs_usd,
                bridge_loss_percentage=q.bridge_loss_percentage,
            )
        return cls(provider=outcome.provider.value, success=outcome.success, quote=quote, error=outcome.error)


class RankingModel(BaseModel):
    provider: str
    score: float
    rank: int


class ActionModel(BaseModel):
    label: str
    data: str


class QuoteResponse(BaseModel):
    request: BridgeRequestModel
    best_provider: Optional[str] = Field(default=None, description="Rank 1 provider, if any quote succeeded")
    rankings: List[RankingModel] = Field(default_factory=list)
    quotes: List[QuoteOutcomeModel] = Field(default_factory=list)
    text: str = Field(description="Rendered chat message (Telegram HTML)")
    actions: List[ActionModel] = Field(default_factory=list)


class DecodedActionResponse(BaseModel):
    action: str
    provider: Optional[str] = None
    amount: str
    token: str
    from_chain: str
    to_chain: str
    valid_route: bool


@router.post("", response_model=QuoteResponse)
async def quote_from_text(
    body: QuoteTextRequest,
    service: BridgeQuoteService = Depends(get_bridge_service),
) -> QuoteResponse:
    parsed = await service.quote_text(body.text)
    if parsed is None:
        raise HTTPException(status_code=400, detail=service.usage().text)
    request, result = parsed
    payload = render_quotes(request, result)

    actions = []
    for action in payload.actions:
        try:
            actions.append(ActionModel(label=action.label, data=encode_action(action.token)))
        except TokenEncodeError:
            continue

    return QuoteResponse(
        request=BridgeRequestModel.from_request(request),
        best_provider=result.best_quote.provider.value if result.best_quote else None,
        rankings=[
            RankingModel(provider=r.provider.value, score=r.score, rank=r.rank) for r in result.rankings
        ],
        quotes=[QuoteOutcomeModel.from_outcome(outcome) for outcome in result.all_quotes],
        text=payload.text,
        actions=actions,
    )


@router.get("/actions/{data}", response_model=DecodedActionResponse)
async def decode_action_token(
    data: str,
    service: BridgeQuoteService = Depends(get_bridge_service),
) -> DecodedActionResponse:
    try:
        token = decode_action(data)
    except TokenDecodeError as exc:
        raise HTTPException(status_code=400, detail=exc.message)
    rebuilt = service.parser.reconstruct(token.amount, token.token, token.from_chain, token.to_chain)
    return DecodedActionResponse(
        action=token.action.value,
        provider=token.provider.value if token.provider else None,
        amount=token.amount,
        token=token.token,
        from_chain=token.from_chain,
        to_chain=token.to_chain,
        valid_route=rebuilt is not None,
    )
