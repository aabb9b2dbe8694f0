"""JWT token utilities."""

from datetime import datetime, timedelta
from typing import Literal

import jwt
from pydantic import BaseModel

from cabinet.config import AuthSettings

TokenType = Literal["access", "refresh"]


class TokenPayload(BaseModel):
    """JWT token payload."""

    sub: str  # Account ID
    type: TokenType
    auth_provider: str | None = None  # Provider the session was opened with
    exp: datetime


class JWTError(Exception):
    """JWT-related error."""

    pass


def create_token(
    account_id: str,
    token_type: TokenType,
    auth_provider: str | None,
    settings: AuthSettings,
    issued_at: datetime,
) -> str:
    """Create a signed session token.

    Args:
        account_id: Account the session belongs to
        token_type: "access" or "refresh"
        auth_provider: Provider used to open the session
        settings: Authentication settings
        issued_at: Issue time (timezone-aware)

    Returns:
        Encoded JWT token
    """
    if token_type == "access":
        expiry = issued_at + timedelta(minutes=settings.access_token_expiry_minutes)
    else:
        expiry = issued_at + timedelta(days=settings.refresh_token_expiry_days)

    payload = {
        "sub": account_id,
        "type": token_type,
        "auth_provider": auth_provider,
        "iat": issued_at,
        "exp": expiry,
    }

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(
    token: str, settings: AuthSettings, expected_type: TokenType = "access"
) -> TokenPayload:
    """Verify and decode a session token.

    Args:
        token: JWT token to verify
        settings: Authentication settings
        expected_type: Token type the caller accepts

    Returns:
        Token payload if valid

    Raises:
        JWTError: If token is invalid, expired or of the wrong type
    """
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except jwt.ExpiredSignatureError:
        raise JWTError("Token has expired")
    except jwt.InvalidTokenError:
        raise JWTError("Invalid token")

    if payload.get("type") != expected_type:
        raise JWTError(f"Expected {expected_type} token")

    return TokenPayload(**payload)
