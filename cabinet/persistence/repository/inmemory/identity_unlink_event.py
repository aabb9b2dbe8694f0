"""In-memory identity unlink event repository for testing."""

from typing import Optional

from cabinet.domain.model import IdentityUnlinkEvent
from cabinet.domain.repository import IdentityUnlinkEventRepository
from cabinet.domain.value import AccountId, AuthProvider, UnlinkEventReason

from .store import InMemoryStore


class InMemoryIdentityUnlinkEventRepository(IdentityUnlinkEventRepository):
    """In-memory implementation of IdentityUnlinkEventRepository for testing."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def save(self, event: IdentityUnlinkEvent) -> IdentityUnlinkEvent:
        """Append an event."""
        self._store.unlink_events.append(event)
        return event

    async def find_latest(
        self,
        account_id: AccountId,
        provider: AuthProvider,
        reason: UnlinkEventReason,
    ) -> Optional[IdentityUnlinkEvent]:
        """Find the newest matching event."""
        matches = [
            e
            for e in self._store.unlink_events
            if e.account_id == account_id
            and e.provider == provider
            and e.reason == reason
        ]
        return max(matches, key=lambda e: e.unlinked_at) if matches else None
