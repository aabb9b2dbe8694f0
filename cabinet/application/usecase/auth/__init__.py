"""Session use cases."""

from .refresh_session import (
    RefreshSessionRequest,
    RefreshSessionResponse,
    RefreshSessionUseCase,
)

__all__ = ["RefreshSessionRequest", "RefreshSessionResponse", "RefreshSessionUseCase"]
