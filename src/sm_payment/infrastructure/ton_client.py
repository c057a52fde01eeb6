"""Read-only client for the tonapi.io public ledger API."""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from config.settings import settings
from src.sm_common.errors import ExternalServiceUnavailableError

logger = logging.getLogger(__name__)

TRANSACTIONS_PAGE_SIZE = 50


class TonApiClient:
    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or settings.TON_API_BASE_URL).rstrip("/")
        self._api_key = api_key if api_key is not None else settings.TON_API_KEY
        self._timeout_s = timeout_s if timeout_s is not None else settings.HTTP_TIMEOUT_SECONDS
        self._transport = transport

    async def recent_transactions(
        self, account: str, limit: int = TRANSACTIONS_PAGE_SIZE
    ) -> list[dict[str, Any]]:
        """Latest transactions of ``account``, newest first."""
        headers: dict[str, str] = {"Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        url = f"{self._base_url}/v2/accounts/{quote(account, safe='')}/transactions"
        try:
            async with httpx.AsyncClient(
                headers=headers, timeout=self._timeout_s, transport=self._transport
            ) as client:
                response = await client.get(url, params={"limit": limit})
                response.raise_for_status()
                decoded = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ExternalServiceUnavailableError("tonapi", str(e)) from e
        transactions = decoded.get("transactions") if isinstance(decoded, dict) else None
        if not isinstance(transactions, list):
            logger.warning("tonapi returned no transactions list for %s", account)
            return []
        return transactions
