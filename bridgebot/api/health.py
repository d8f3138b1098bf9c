from typing import Any, Dict

from fastapi import APIRouter, Request

from ..config import settings

router = APIRouter()


@router.get("/healthz")
async def health_check(request: Request) -> Dict[str, Any]:
    """Report enabled providers and whether the bot transport is attached."""

    service = getattr(request.app.state, "bridge_service", None)
    telegram_app = getattr(request.app.state, "telegram_app", None)
    providers = [provider.value for provider in service.providers] if service is not None else []
    summary = settings.public_summary()

    return {
        "status": "healthy" if service is not None and providers else "degraded",
        "providers": providers,
        "telegram": {
            "configured": summary["telegram"],
            "webhook_secret": summary["webhook_secret"],
            "attached": telegram_app is not None,
        },
    }
