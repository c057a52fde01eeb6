"""FastAPI dependencies: get_current_identity, require_admin.

Usage in any protected router:
    from src.sm_gateway.auth.dependencies import get_current_identity

    @router.post("/listings/fixed")
    async def create(identity: Annotated[str, Depends(get_current_identity)]):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from config.settings import settings
from src.sm_common.errors import AdminRequiredError, InvalidCredentialsError
from src.sm_gateway.auth.jwt_handler import decode_identity

# Tokens come from the Mini App backend; tokenUrl only feeds Swagger UI.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_identity(token: str = Depends(oauth2_scheme)) -> str:
    """Validate the Bearer token and return the caller's identity string."""
    try:
        return decode_identity(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None


async def require_admin(identity: str = Depends(get_current_identity)) -> str:
    """Verify the caller is listed in ADMIN_IDENTITIES."""
    if identity not in settings.ADMIN_IDENTITIES:
        raise AdminRequiredError()
    return identity
