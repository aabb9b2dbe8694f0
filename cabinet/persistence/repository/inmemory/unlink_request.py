"""In-memory unlink request repository for testing."""

from datetime import datetime
from typing import Optional

from cabinet.domain.model import UnlinkRequest
from cabinet.domain.repository import UnlinkRequestRepository
from cabinet.domain.value import AccountId, AuthProvider, UnlinkRequestId

from .store import InMemoryStore


class InMemoryUnlinkRequestRepository(UnlinkRequestRepository):
    """In-memory implementation of UnlinkRequestRepository for testing."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    @property
    def _requests(self) -> dict[UnlinkRequestId, UnlinkRequest]:
        return self._store.unlink_requests

    async def find_by_token_hash(self, token_hash: str) -> Optional[UnlinkRequest]:
        """Find a request by token hash."""
        for request in self._requests.values():
            if request.token_hash == token_hash:
                return request
        return None

    async def find_by_account_and_provider(
        self, account_id: AccountId, provider: AuthProvider
    ) -> Optional[UnlinkRequest]:
        """Find the request of an (account, provider) pair."""
        for request in self._requests.values():
            if request.account_id == account_id and request.provider == provider:
                return request
        return None

    async def save(self, request: UnlinkRequest) -> UnlinkRequest:
        """Save a request."""
        self._requests[request.id] = request
        return request

    async def delete(self, request_id: UnlinkRequestId) -> None:
        """Delete a request."""
        self._requests.pop(request_id, None)

    async def delete_for_account_and_provider(
        self, account_id: AccountId, provider: AuthProvider
    ) -> None:
        """Delete any request of an (account, provider) pair."""
        for request_id, request in list(self._requests.items()):
            if request.account_id == account_id and request.provider == provider:
                del self._requests[request_id]

    async def decrement_attempts(self, request_id: UnlinkRequestId) -> Optional[int]:
        """Decrement remaining attempts, never below zero."""
        request = self._requests.get(request_id)
        if request is None or request.attempts_left <= 0:
            return None
        left = request.attempts_left - 1
        self._requests[request_id] = request.model_copy(update={"attempts_left": left})
        return left

    async def delete_expired(self, now: datetime) -> int:
        """Delete requests whose TTL elapsed."""
        expired = [rid for rid, r in self._requests.items() if r.expires_at <= now]
        for request_id in expired:
            del self._requests[request_id]
        return len(expired)
