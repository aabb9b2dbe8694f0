"""Request authentication."""

from fastapi import HTTPException, status
from pydantic import BaseModel

from cabinet.domain.service import JWTService
from cabinet.domain.value import AuthProvider
from cabinet.util.jwt import JWTError


class Principal(BaseModel):
    """The authenticated caller."""

    account_id: str
    auth_provider: AuthProvider | None = None


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def authenticate(
    jwt_service: JWTService,
    authorization: str | None,
    auth_token: str | None,
) -> Principal:
    """Resolve the caller from the bearer header or the ``auth_token`` cookie.

    Raises:
        HTTPException: 401 if no valid access token was presented
    """
    token = bearer_token(authorization) or auth_token
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "unauthorized", "message": "Authentication required"},
        )
    try:
        payload = jwt_service.verify_access_token(token)
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "unauthorized", "message": str(e)},
        )
    provider = None
    if payload.auth_provider:
        try:
            provider = AuthProvider(payload.auth_provider)
        except ValueError:
            provider = None
    return Principal(account_id=payload.sub, auth_provider=provider)
