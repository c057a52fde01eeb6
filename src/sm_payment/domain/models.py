"""Payment rail value objects — pure dataclasses."""
from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class RetryPolicy:
    """Delay in seconds before each verification attempt (first is usually 0)."""

    delays: tuple[float, ...] = (0.0, 2.0, 4.0)

    @property
    def attempts(self) -> int:
        return len(self.delays)


@dataclass(frozen=True)
class PaymentInstruction:
    """What the buyer needs to pay: a ton:// deeplink or a Telegram invoice link."""

    payment_uri: str
    destination: str | None = None


@dataclass
class VerificationResult:
    order_id: str
    verified: bool
    status: str
    # True when the ledger could not be reached on any attempt
    retry_later: bool = False
    tx_hash: str | None = None


class WebhookAction(str, Enum):
    """What the webhook handler did with one Telegram update."""

    DUPLICATE = "DUPLICATE"
    PRE_CHECKOUT_ANSWERED = "PRE_CHECKOUT_ANSWERED"
    SETTLED = "SETTLED"
    NOOP = "NOOP"
    INVOICE_SENT = "INVOICE_SENT"
    IGNORED = "IGNORED"
