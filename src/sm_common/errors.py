"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/Identity
  2xxx: Collectible
  3xxx: Listing/Auction
  4xxx: Order
  5xxx: Payment rail
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/Identity ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid or expired token", 401)


class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1006, "Admin identity required", 403)


# --- 9003: Validation (malformed input, caller not authorized) ---

class ValidationError(AppError):
    def __init__(self, detail: str, code: int = 9003, http_status: int = 422) -> None:
        super().__init__(code, detail, http_status)


# --- 2xxx: Collectible ---

class CollectibleNotFoundError(AppError):
    def __init__(self, collectible_id: str) -> None:
        super().__init__(2001, f"Collectible not found: {collectible_id}", 404)


class NotOwnerError(ValidationError):
    def __init__(self, requester: str) -> None:
        super().__init__(f"Requester {requester} is not authorized", 2002, 403)


class CollectibleListedError(AppError):
    def __init__(self, collectible_id: str) -> None:
        super().__init__(2003, f"Collectible {collectible_id} has an active listing", 422)


# --- 3xxx: Listing/Auction ---

class ListingNotFoundError(AppError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(3001, f"Listing not found: {listing_id}", 404)


class ListingNotActiveError(AppError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(3002, f"Listing is not active: {listing_id}", 422)


class ListingAlreadyActiveError(AppError):
    def __init__(self, collectible_id: str) -> None:
        super().__init__(
            3003, f"Collectible {collectible_id} already has an active listing", 409
        )


class AuctionClosedError(AppError):
    def __init__(self, listing_id: str, reason: str) -> None:
        super().__init__(3004, f"Auction {listing_id} is closed: {reason}", 422)


class BidTooLowError(AppError):
    def __init__(self, min_next: float, currency: str) -> None:
        self.min_next = min_next
        super().__init__(3005, f"Bid too low. Minimum: {min_next:.6f} {currency}", 422)


class BuyNowUnavailableError(AppError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(3006, f"Buy-now price is not set for listing {listing_id}", 422)


class NoValidEscrowError(AppError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(3008, f"No valid escrow for the winner of listing {listing_id}", 409)


class AuctionNotEndedError(AppError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(3009, f"Auction {listing_id} has not ended yet", 422)


# --- 4xxx: Order ---

class NotEligibleToPayError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4001, f"Not eligible to pay: {detail}", 422)


class OrderNotFoundError(AppError):
    def __init__(self, order_id: str) -> None:
        super().__init__(4004, f"Order not found: {order_id}", 404)


class OrderNotPendingError(AppError):
    def __init__(self, order_id: str, status: str) -> None:
        super().__init__(4006, f"Order {order_id} in status {status} is not pending", 422)


# --- 5xxx: Payment rail ---

class ExternalServiceUnavailableError(AppError):
    def __init__(self, service: str, detail: str = "") -> None:
        self.service = service
        message = f"External service unavailable: {service}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(5001, message, 503)


class PaymentConfigMissingError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(5002, f"Marketplace settings missing: {detail}", 503)


# --- 9xxx: System ---

class SettlementInvariantError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9004, f"Settlement invariant violated: {detail}", 500)
