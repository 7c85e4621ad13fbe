"""Bearer-token authentication for FastAPI.

Users sign in with the external identity provider, which issues HS256 JWTs.
This module only verifies those tokens; it never issues session tokens.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from preppal.core.config import settings


security = HTTPBearer(auto_error=False)

OAUTH_STATE_TTL = timedelta(minutes=10)


class AuthUser:
    """Represents an authenticated user from the identity provider."""
    def __init__(
        self,
        user_id: str,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        profile_image_url: Optional[str] = None,
    ):
        self.id = user_id
        self.email = email
        self.first_name = first_name
        self.last_name = last_name
        self.profile_image_url = profile_image_url


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_token(token: str) -> dict:
    """
    Verify an identity provider JWT and return its claims.

    Raises:
        HTTPException: 500 if no secret is configured, 401 if the token is invalid
    """
    if not settings.AUTH_JWT_SECRET:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="JWT secret not configured"
        )

    try:
        return jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            audience=settings.AUTH_JWT_AUDIENCE,
        )
    except JWTError as e:
        raise _unauthorized(f"Invalid token: {str(e)}")


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[AuthUser]:
    """Return the user for the bearer token, or None if no token was sent."""
    if credentials is None:
        return None

    payload = verify_token(credentials.credentials)

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Invalid token: no user ID")

    metadata = payload.get("user_metadata") or {}
    return AuthUser(
        user_id=user_id,
        email=payload.get("email"),
        first_name=payload.get("given_name") or metadata.get("first_name"),
        last_name=payload.get("family_name") or metadata.get("last_name"),
        profile_image_url=payload.get("picture") or metadata.get("avatar_url"),
    )


def require_auth(
    user: Optional[AuthUser] = Depends(get_current_user)
) -> AuthUser:
    """Dependency for protected endpoints; raises 401 when unauthenticated."""
    if user is None:
        raise _unauthorized("Authentication required")
    return user


def create_oauth_state(user_id: str) -> str:
    """
    Build a signed OAuth ``state`` value bound to a user.

    The nonce makes each state unique; the expiry bounds how long the
    authorization round trip may take.
    """
    if not settings.AUTH_JWT_SECRET:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="JWT secret not configured"
        )
    claims = {
        "sub": user_id,
        "nonce": secrets.token_hex(16),
        "exp": datetime.now(timezone.utc) + OAUTH_STATE_TTL,
    }
    return jwt.encode(claims, settings.AUTH_JWT_SECRET, algorithm=settings.AUTH_JWT_ALGORITHM)


def read_oauth_state(state: Optional[str]) -> Optional[str]:
    """
    Return the user id bound to a state from create_oauth_state.

    None when the state is missing, tampered with or expired.
    """
    if not state or not settings.AUTH_JWT_SECRET:
        return None
    try:
        claims = jwt.decode(
            state,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
        )
    except JWTError:
        return None
    return claims.get("sub")
