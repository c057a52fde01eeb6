"""PaymentInstructionFactory — turn a priced order into something the buyer can pay."""

import logging
from collections.abc import Callable

from src.sm_common.enums import PaymentRail
from src.sm_common.errors import ExternalServiceUnavailableError, PaymentConfigMissingError
from src.sm_config.domain.models import MarketplaceConfig
from src.sm_payment.domain.instructions import (
    bot_start_link,
    build_invoice,
    build_ton_transfer_uri,
)
from src.sm_payment.domain.models import PaymentInstruction
from src.sm_payment.infrastructure.telegram_client import TelegramBotClient

logger = logging.getLogger(__name__)

TelegramClientFactory = Callable[[str], TelegramBotClient]


def require_rail_config(config: MarketplaceConfig, rail: PaymentRail) -> None:
    """Raise PaymentConfigMissingError if the snapshot cannot serve ``rail``."""
    if rail is PaymentRail.ON_CHAIN and not config.ton_destination_wallet:
        raise PaymentConfigMissingError("ton_destination_wallet")
    if rail is PaymentRail.PUSH_INVOICE and not config.telegram_bot_token:
        raise PaymentConfigMissingError("telegram_bot_token")


class PaymentInstructionFactory:
    def __init__(self, telegram_client_factory: TelegramClientFactory = TelegramBotClient) -> None:
        self._telegram_client_factory = telegram_client_factory

    def telegram(self, config: MarketplaceConfig) -> TelegramBotClient:
        return self._telegram_client_factory(config.telegram_bot_token)

    async def build(
        self,
        config: MarketplaceConfig,
        rail: PaymentRail,
        amount: float,
        correlation_token: str,
        label: str,
    ) -> PaymentInstruction:
        require_rail_config(config, rail)
        if rail is PaymentRail.ON_CHAIN:
            return PaymentInstruction(
                payment_uri=build_ton_transfer_uri(
                    config.ton_destination_wallet, amount, correlation_token
                ),
                destination=config.ton_destination_wallet,
            )
        return PaymentInstruction(
            payment_uri=await self._invoice_link(config, amount, correlation_token, label)
        )

    async def _invoice_link(
        self, config: MarketplaceConfig, amount: float, payload: str, label: str
    ) -> str:
        client = self.telegram(config)
        try:
            return await client.create_invoice_link(build_invoice(payload, label, amount))
        except ExternalServiceUnavailableError as e:
            logger.warning("createInvoiceLink failed, falling back to bot link: %s", e.message)
        try:
            username = await client.get_bot_username()
        except ExternalServiceUnavailableError as e:
            raise ExternalServiceUnavailableError(
                "telegram", "no invoice link and no bot username"
            ) from e
        return bot_start_link(username, payload)
