"""Telegram Bot API webhook (mounted at root, outside /api/v1).

Telegram only needs a 2xx; the body is informational.
"""

import hmac
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.sm_common.database import get_db_session
from src.sm_payment.application.telegram_webhook import TelegramWebhookHandler

logger = logging.getLogger(__name__)

router = APIRouter(tags=["telegram"])

_handler = TelegramWebhookHandler()


def check_webhook_secret(
    secret: Annotated[str | None, Header(alias="X-Telegram-Bot-Api-Secret-Token")] = None,
) -> None:
    expected = settings.TELEGRAM_WEBHOOK_SECRET
    if expected and not hmac.compare_digest(secret or "", expected):
        logger.warning("Telegram webhook rejected: bad secret token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Bad secret token")


@router.post("/telegram/webhook", dependencies=[Depends(check_webhook_secret)])
async def telegram_webhook(
    update: Annotated[dict[str, Any], Body()],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> dict[str, Any]:
    action = await _handler.handle(db, update)
    return {"ok": True, "action": action.value}
