"""Unlink request repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime

from cabinet.domain.model.unlink_request import UnlinkRequest
from cabinet.domain.value import AccountId, AuthProvider, UnlinkRequestId


class UnlinkRequestRepository(ABC):
    """Repository for UnlinkRequest entity."""

    @abstractmethod
    async def find_by_token_hash(self, token_hash: str) -> UnlinkRequest | None:
        """Find a request by the hash of its token.

        Args:
            token_hash: SHA-256 hex digest of the request token

        Returns:
            The request if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_account_and_provider(
        self, account_id: AccountId, provider: AuthProvider
    ) -> UnlinkRequest | None:
        """Find the live request for an (account, provider) pair."""
        pass

    @abstractmethod
    async def save(self, request: UnlinkRequest) -> UnlinkRequest:
        """Save a request (create or update)."""
        pass

    @abstractmethod
    async def delete(self, request_id: UnlinkRequestId) -> None:
        """Delete a request."""
        pass

    @abstractmethod
    async def delete_for_account_and_provider(
        self, account_id: AccountId, provider: AuthProvider
    ) -> None:
        """Delete any request for an (account, provider) pair."""
        pass

    @abstractmethod
    async def decrement_attempts(self, request_id: UnlinkRequestId) -> int | None:
        """Atomically decrement remaining OTP attempts by one.

        Args:
            request_id: Request to decrement

        Returns:
            Attempts left after decrement, or None if the request is gone or
            already had none left
        """
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Delete requests whose TTL elapsed.

        Returns:
            Number of requests deleted
        """
        pass
