from typing import Any, Optional

from fastapi import HTTPException, Request

from ..core.bridge.service import BridgeQuoteService


def get_bridge_service(request: Request) -> BridgeQuoteService:
    service = getattr(request.app.state, "bridge_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Bridge service is not initialised")
    return service


def get_telegram_application(request: Request) -> Optional[Any]:
    return getattr(request.app.state, "telegram_app", None)
