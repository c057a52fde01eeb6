"""Telegram Bot API client for Stars invoices."""

import logging
from typing import Any

import httpx

from config.settings import settings
from src.sm_common.errors import ExternalServiceUnavailableError

logger = logging.getLogger(__name__)


class TelegramBotClient:
    def __init__(
        self,
        bot_token: str,
        base_url: str | None = None,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._bot_token = bot_token
        self._base_url = (base_url or settings.TELEGRAM_API_BASE_URL).rstrip("/")
        self._timeout_s = timeout_s if timeout_s is not None else settings.HTTP_TIMEOUT_SECONDS
        self._transport = transport

    async def _call(self, method: str, payload: dict[str, Any] | None = None) -> Any:
        """POST a Bot API method and return its ``result``.

        Transport errors, non-2xx responses and ``ok: false`` bodies all raise
        ExternalServiceUnavailableError.
        """
        url = f"{self._base_url}/bot{self._bot_token}/{method}"
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_s, transport=self._transport
            ) as client:
                response = await client.post(url, json=payload or {})
                response.raise_for_status()
                decoded = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ExternalServiceUnavailableError("telegram", f"{method}: {e}") from e
        if not isinstance(decoded, dict) or not decoded.get("ok"):
            description = decoded.get("description") if isinstance(decoded, dict) else None
            raise ExternalServiceUnavailableError("telegram", f"{method}: {description}")
        return decoded.get("result")

    async def create_invoice_link(self, invoice: dict[str, Any]) -> str:
        result = await self._call("createInvoiceLink", invoice)
        if not isinstance(result, str) or not result:
            raise ExternalServiceUnavailableError("telegram", "createInvoiceLink: empty link")
        return result

    async def get_bot_username(self) -> str:
        result = await self._call("getMe")
        username = result.get("username") if isinstance(result, dict) else None
        if not username:
            raise ExternalServiceUnavailableError("telegram", "getMe: no username")
        return username

    async def send_invoice(self, chat_id: int | str, invoice: dict[str, Any]) -> None:
        await self._call("sendInvoice", {"chat_id": chat_id, **invoice})

    async def answer_pre_checkout_query(
        self, query_id: str, ok: bool, error_message: str | None = None
    ) -> None:
        payload: dict[str, Any] = {"pre_checkout_query_id": query_id, "ok": ok}
        if not ok and error_message:
            payload["error_message"] = error_message
        await self._call("answerPreCheckoutQuery", payload)
