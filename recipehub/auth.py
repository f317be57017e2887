"""
RecipeHub Backend — Bearer Token Authentication
=================================================

What:  Resolves the `Authorization: Bearer <token>` header to a user id.
How:   Verifies an HS256 JWT with python-jose; the `sub` claim is the
       user's UUID. Exposed to routes as the `get_current_user_id`
       dependency, so the authenticated user is an explicit argument of
       every handler (and every service call), never ambient state.
Who:   Private routes depend on it; public routes simply don't.

Token issuance belongs to the account system. `create_access_token` exists
for operational scripts and the test suite.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from recipehub.config import settings
from recipehub.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

# auto_error=False: missing credentials go through our own 401 handler
bearer_scheme = HTTPBearer(auto_error=False, description="JWT issued by the account service")


def create_access_token(user_id: uuid.UUID, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> uuid.UUID:
    """
    Verify a bearer token and return the user id it was issued for.

    Raises:
        AuthenticationError: expired, badly signed, or missing/invalid `sub`
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise AuthenticationError(message="Token has expired")
    except JWTError as e:
        raise AuthenticationError(message="Token is not valid", context={"error": str(e)})

    subject = payload.get("sub")
    try:
        return uuid.UUID(str(subject))
    except (TypeError, ValueError):
        raise AuthenticationError(message="Token is not valid", context={"sub": subject})


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> uuid.UUID:
    """FastAPI dependency: the authenticated user's id, or a 401."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()
    user_id = decode_access_token(credentials.credentials)
    logger.debug("Authenticated request for user %s", user_id)
    return user_id


async def get_optional_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[uuid.UUID]:
    """
    Like get_current_user_id, but anonymous requests get None.
    A token that is present but invalid is still a 401.
    """
    if credentials is None or not credentials.credentials:
        return None
    return decode_access_token(credentials.credentials)
