# src/sm_auction/application/service.py
from src.sm_auction.engine.engine import AuctionEngine

_engine: AuctionEngine | None = None


def get_auction_engine() -> AuctionEngine:
    global _engine  # noqa: PLW0603
    if _engine is None:
        _engine = AuctionEngine()
    return _engine
