"""
Telegram webhook endpoint.

Telegram POSTs each update here; the update is handed to the
python-telegram-bot Application, which routes it to the bridge handlers.
"""

import hmac
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from telegram import Update

from ..config import settings
from .deps import get_telegram_application

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/telegram")


def _secret_matches(received: Optional[str]) -> bool:
    expected = settings.telegram_webhook_secret
    if not expected:
        return True
    return hmac.compare_digest(received or "", expected)


@router.post("/webhook")
async def telegram_webhook(
    request: Request,
    x_telegram_bot_api_secret_token: Optional[str] = Header(default=None),
    application: Optional[Any] = Depends(get_telegram_application),
) -> Dict[str, Any]:
    if not _secret_matches(x_telegram_bot_api_secret_token):
        raise HTTPException(status_code=403, detail="Invalid webhook secret")
    if application is None:
        raise HTTPException(status_code=503, detail="Telegram bot is not configured")

    try:
        data = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Body is not valid JSON")

    update = Update.de_json(data, application.bot)
    if update is None:
        raise HTTPException(status_code=400, detail="Not a Telegram update")

    # Handler errors go to the application's error handler; Telegram must get a 200
    await application.process_update(update)
    return {"ok": True}
