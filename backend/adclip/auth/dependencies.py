"""
JWT verification dependencies for FastAPI.
Validates HS256 session tokens issued by the frontend's auth provider.
"""

import logging
from typing import Optional

import jwt
from fastapi import Header, HTTPException, status
from pydantic import BaseModel

from ..config import Settings

logger = logging.getLogger(__name__)


class User(BaseModel):
    """User information extracted from JWT."""
    sub: str  # User ID (subject)
    email: Optional[str] = None
    role: Optional[str] = None


def verify_jwt(token: str) -> User:
    """
    Verify a session token and extract user information.

    Raises:
        HTTPException: 401 if the token is invalid or expired
    """
    secret = Settings.AUTH_JWT_SECRET
    if not secret:
        logger.error("AUTH_JWT_SECRET is not configured")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication is not configured"
        )

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=["HS256"],
            audience=Settings.AUTH_JWT_AUDIENCE,
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired"
        )
    except jwt.InvalidTokenError as e:
        logger.debug(f"Rejected token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}"
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing 'sub' claim"
        )

    return User(
        sub=str(user_id),
        email=payload.get("email"),
        role=payload.get("role", "authenticated"),
    )


async def get_current_user(authorization: str = Header(..., description="Bearer token")) -> User:
    """
    FastAPI dependency to extract and verify JWT token from Authorization header.

    Usage:
        @router.post("/match-videos")
        async def match_videos(user: User = Depends(get_current_user)):
            return {"user_id": user.sub}
    """
    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header must start with 'Bearer '"
        )

    token = authorization[7:].strip()
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token is required"
        )

    return verify_jwt(token)
