"""UTC datetime utilities."""

from collections.abc import Callable
from datetime import datetime, timezone

# Services take a Clock so tests can fast-forward time.
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)
