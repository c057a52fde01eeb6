"""Payment instruction builders and ledger matching — pure functions."""

from typing import Any
from urllib.parse import quote

from src.sm_common.amounts import MIN_STARS_AMOUNT, round_half_up, ton_to_nano

INVOICE_CURRENCY = "XTR"
INVOICE_TITLE = "Sticker purchase"
INVOICE_DESCRIPTION = "Pay with Telegram Stars"

_MESSAGE_TEXT_FIELDS = ("message", "comment", "body", "payload")


def build_ton_transfer_uri(destination: str, amount_ton: float, comment: str) -> str:
    """ton://transfer/<dest>?amount=<nanoton>&text=<comment>"""
    return (
        f"ton://transfer/{quote(destination, safe='')}"
        f"?amount={ton_to_nano(amount_ton)}&text={quote(comment, safe='')}"
    )


def bot_start_link(bot_username: str, payload: str) -> str:
    """Deep link that opens the bot with ``/start <payload>``."""
    return f"https://t.me/{quote(bot_username, safe='')}?start={quote(payload, safe='')}"


def build_invoice(payload: str, label: str, amount_stars: float) -> dict[str, Any]:
    """Body shared by createInvoiceLink and sendInvoice."""
    return {
        "title": INVOICE_TITLE,
        "description": INVOICE_DESCRIPTION,
        "payload": payload,
        "currency": INVOICE_CURRENCY,
        "prices": [
            {"label": label, "amount": max(MIN_STARS_AMOUNT, round_half_up(amount_stars))}
        ],
    }


def _message_text(message: Any) -> str:
    if not isinstance(message, dict):
        return ""
    for field in _MESSAGE_TEXT_FIELDS:
        value = message.get(field)
        if isinstance(value, str) and value:
            return value
    decoded = message.get("decoded_body")
    if isinstance(decoded, dict) and isinstance(decoded.get("text"), str):
        return decoded["text"]
    return ""


def _primary_message(tx: dict[str, Any]) -> Any:
    if tx.get("in_msg"):
        return tx["in_msg"]
    for key in ("in_messages", "out_msgs"):
        messages = tx.get(key)
        if isinstance(messages, list) and messages:
            return messages[0]
    return tx.get("message")


def find_transaction(transactions: list[Any], token: str) -> dict[str, Any] | None:
    """First transaction whose message text contains the correlation token."""
    for tx in transactions:
        if isinstance(tx, dict) and token in _message_text(_primary_message(tx)):
            return tx
    return None


def transaction_hash(tx: dict[str, Any]) -> str:
    if tx.get("hash"):
        return str(tx["hash"])
    transaction_id = tx.get("transaction_id")
    if isinstance(transaction_id, dict) and transaction_id.get("hash"):
        return str(transaction_id["hash"])
    return ""
