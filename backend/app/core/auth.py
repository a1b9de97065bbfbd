"""
Session token authentication.

Tokens are HS256 JWTs carrying only the user id (`sub`) and an expiry
7 days after issuance. There is no revocation list: a token stays valid
until it expires.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Header, HTTPException

from backend.app.core.constants import JWT_ALGORITHM, JWT_EXPIRY_HOURS
from backend.app.core.exceptions import UnauthorizedError
from backend.app.core.settings import get_settings


def create_user_jwt(user_id: str, issued_at: Optional[datetime] = None) -> str:
    """
    Create JWT token for user authentication.

    Args:
        user_id: User identifier
        issued_at: Issue time (defaults to now, UTC)

    Returns:
        JWT token string
    """
    issued_at = issued_at or datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "exp": issued_at + timedelta(hours=JWT_EXPIRY_HOURS),
    }
    return jwt.encode(payload, get_settings().jwt_secret, algorithm=JWT_ALGORITHM)


def decode_user_jwt(token: str) -> Optional[str]:
    """
    Decode JWT token and return the user id or None.

    Args:
        token: JWT token string

    Returns:
        User id or None if token is invalid, tampered with or expired
    """
    try:
        payload = jwt.decode(
            token,
            get_settings().jwt_secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
    except jwt.InvalidTokenError:
        return None
    sub = payload.get("sub")
    if not isinstance(sub, str) or not sub:
        return None
    return sub


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract token from "Bearer <token>"."""
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


def verify_session(token: Optional[str]) -> str:
    """
    Verify a session token and return the embedded user id.

    Raises:
        UnauthorizedError: token absent, malformed, badly signed or expired
    """
    if not token:
        raise UnauthorizedError("Unauthorized")
    user_id = decode_user_jwt(token)
    if not user_id:
        raise UnauthorizedError("Invalid token")
    return user_id


async def get_current_user_jwt(
    authorization: Optional[str] = Header(None)
) -> str:
    """
    FastAPI dependency to get and validate current user from JWT token.

    Expects Authorization header in format: "Bearer <token>"

        @router.get("/me")
        async def me(user_id: str = Depends(get_current_user_jwt)):
            ...

    Raises:
        HTTPException 401: If authentication fails
    """
    try:
        return verify_session(bearer_token(authorization))
    except UnauthorizedError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
