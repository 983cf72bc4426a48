from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError

from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.errors import Unauthorized

settings = get_settings()
# auto_error=False so a missing header is a 401 from us, not a bare 403
security = HTTPBearer(auto_error=False)


def decode_token(token: str) -> AuthUser:
    """Validate a bearer JWT and return the user it identifies."""
    options = {"verify_aud": settings.JWT_AUDIENCE is not None}
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options=options,
        )
        return AuthUser(**payload)
    except (JWTError, ValidationError):
        raise Unauthorized("Could not validate credentials")


async def get_current_user(
    token: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> AuthUser:
    """
    Return the authenticated user or fail with 401.
    """
    if token is None:
        raise Unauthorized("Not authenticated")
    return decode_token(token.credentials)

