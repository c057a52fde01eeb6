"""JWT identity tokens.

Identities are opaque strings (Telegram user ids, usernames, wallet owners)
carried as the ``sub`` claim. Tokens are issued by the Mini App backend that
authenticates the user; this service only verifies them with the shared
HS256 secret.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.sm_common.errors import InvalidCredentialsError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)


def create_access_token(identity: str) -> str:
    """Issue an access token for ``identity`` (used by tooling and tests)."""
    now = datetime.now(UTC)
    payload = {
        "sub": identity,
        "type": "access",
        "iat": now,
        "exp": now + _ACCESS_EXPIRE,
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def decode_identity(token: str) -> str:
    """Decode an access token and return its identity.

    Raises:
        InvalidCredentialsError: token invalid, expired, of the wrong type or
            without a subject.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if payload.get("type") != "access":
        raise InvalidCredentialsError()
    identity = payload.get("sub")
    if not identity:
        raise InvalidCredentialsError()
    return str(identity)
