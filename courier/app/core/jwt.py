"""
JWT token utilities for the identity gate.

Tokens are issued by the external identity provider; this service only
verifies them and reads the email claim. ``create_access_token`` mints
tokens signed with the same key for local development and tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from courier.app.core.config import settings


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Data payload to encode in the token (should include: sub, email)
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string

    Example payload:
        {
            "sub": "firebase-uid",
            "email": "user@example.com",
            "exp": 1234567890
        }
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode.update({"exp": expire})
    if settings.identity_audience and "aud" not in to_encode:
        to_encode["aud"] = settings.identity_audience
    if settings.identity_issuer and "iss" not in to_encode:
        to_encode["iss"] = settings.identity_issuer

    return jwt.encode(to_encode, settings.identity_secret_key, algorithm=settings.identity_algorithm)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and validate a JWT access token.

    Args:
        token: JWT token string to decode

    Returns:
        Decoded token payload if valid, None otherwise
    """
    try:
        return jwt.decode(
            token,
            settings.identity_secret_key,
            algorithms=[settings.identity_algorithm],
            audience=settings.identity_audience,
            issuer=settings.identity_issuer,
            options={"verify_aud": settings.identity_audience is not None},
        )
    except JWTError:
        return None


def extract_email_claim(payload: Dict[str, Any]) -> Optional[str]:
    """Return the verified email claim, or None when the token carries none."""
    email = payload.get("email")
    if not isinstance(email, str) or not email.strip():
        return None
    return email.strip()
