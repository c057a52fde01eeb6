"""Amount arithmetic for the two marketplace currencies.

TON amounts are fractional (1 TON = 1e9 nanoton on chain); Stars are whole
units. Amounts are floats compared with AMOUNT_TOLERANCE, and each Order
freezes its converted amount together with the rate it used.
"""

import math

from src.sm_common.enums import Currency, PaymentRail

AMOUNT_TOLERANCE = 1e-9
NANO_PER_TON = 1_000_000_000

# Floors applied when converting into a rail's native unit
MIN_TON_AMOUNT = 0.000001
MIN_STARS_AMOUNT = 1


def amounts_match(a: float, b: float) -> bool:
    """True when two amounts are equal within AMOUNT_TOLERANCE."""
    return abs(a - b) < AMOUNT_TOLERANCE


def ton_to_stars(amount_ton: float, rate: float) -> float:
    """rate = Stars per 1 TON."""
    return amount_ton * rate


def stars_to_ton(amount_stars: float, rate: float) -> float:
    return amount_stars / rate


def ton_to_nano(amount_ton: float) -> int:
    return round(amount_ton * NANO_PER_TON)


def round_half_up(amount: float) -> int:
    """Nearest whole unit, halves rounded up (2.5 -> 3)."""
    return math.floor(amount + 0.5)


def to_rail_amount(
    amount: float, listing_currency: Currency, rail: PaymentRail, rate: float
) -> float:
    """Convert an amount in the listing currency into the rail's native unit.

    ON_CHAIN settles in TON, PUSH_INVOICE in whole Stars (at least one). A
    rate below 1 is treated as 1 so a misconfigured snapshot cannot inflate
    the price.
    """
    safe_rate = max(1.0, rate)
    if rail is PaymentRail.ON_CHAIN:
        if listing_currency is Currency.TON:
            return amount
        return max(MIN_TON_AMOUNT, stars_to_ton(amount, safe_rate))
    if listing_currency is Currency.TON:
        amount = ton_to_stars(amount, safe_rate)
    return float(max(MIN_STARS_AMOUNT, round_half_up(amount)))
