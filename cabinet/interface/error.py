"""HTTP rendering of domain errors."""

import logfire
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from cabinet.domain.error import (
    ErrorKind,
    LinkingError,
    NotAuthorizedError,
    NotFoundError,
)
from cabinet.util.jwt import JWTError

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.STATE_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.POLICY_BLOCK: status.HTTP_403_FORBIDDEN,
    ErrorKind.RATE_LIMIT: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorKind.DEPENDENCY_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.CONFLICT_REQUIRES_HUMAN: status.HTTP_409_CONFLICT,
}


def error_detail(error: LinkingError) -> dict[str, Any]:
    """Serialize a linking error into the response ``detail`` object."""
    detail: dict[str, Any] = {"code": error.code.value, "message": error.message}
    if error.reason is not None:
        detail["reason"] = error.reason
    if error.retry_after_seconds is not None:
        detail["retry_after_seconds"] = error.retry_after_seconds
    if error.blocked_until is not None:
        detail["blocked_until"] = error.blocked_until.isoformat()
    return detail


async def linking_error_handler(request: Request, exc: LinkingError) -> JSONResponse:
    status_code = STATUS_BY_KIND[exc.kind]
    logfire.info(
        "Linking request refused",
        method=request.method,
        path=request.url.path,
        status_code=status_code,
        code=exc.code.value,
    )
    headers = None
    if exc.retry_after_seconds is not None:
        headers = {"Retry-After": str(exc.retry_after_seconds)}
    return JSONResponse(
        status_code=status_code,
        content={"detail": error_detail(exc)},
        headers=headers,
    )


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": {"code": "not_found", "message": str(exc)}},
    )


async def not_authorized_handler(
    request: Request, exc: NotAuthorizedError
) -> JSONResponse:
    logfire.warn("Admin action forbidden", error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"detail": {"code": "forbidden", "message": "Admin access required"}},
    )


async def jwt_error_handler(request: Request, exc: JWTError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": {"code": "unauthorized", "message": str(exc)}},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the domain error handlers on an application."""
    app.add_exception_handler(LinkingError, linking_error_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(NotAuthorizedError, not_authorized_handler)
    app.add_exception_handler(JWTError, jwt_error_handler)
