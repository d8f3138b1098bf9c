"""Bridge quote aggregation components."""

from typing import TYPE_CHECKING

from .models import (
    ActionKind,
    ActionToken,
    BridgeRequest,
    DisplayAction,
    DisplayPayload,
    Provider,
    Quote,
    QuoteOutcome,
    RankedResult,
    Ranking,
)

if TYPE_CHECKING:  # pragma: no cover
    from .service import BridgeQuoteService

__all__ = [
    "ActionKind",
    "ActionToken",
    "BridgeQuoteService",
    "BridgeRequest",
    "DisplayAction",
    "DisplayPayload",
    "Provider",
    "Quote",
    "QuoteOutcome",
    "RankedResult",
    "Ranking",
]


def __getattr__(name: str):  # pragma: no cover - simple thunk
    if name == "BridgeQuoteService":
        from .service import BridgeQuoteService as _BridgeQuoteService

        return _BridgeQuoteService
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
