"""Identity unlink history repository interface."""

from abc import ABC, abstractmethod

from cabinet.domain.model.identity_unlink_event import IdentityUnlinkEvent
from cabinet.domain.value import AccountId, AuthProvider, UnlinkEventReason


class IdentityUnlinkEventRepository(ABC):
    """Append-only history of identities leaving accounts."""

    @abstractmethod
    async def save(self, event: IdentityUnlinkEvent) -> IdentityUnlinkEvent:
        """Append an event."""
        pass

    @abstractmethod
    async def find_latest(
        self,
        account_id: AccountId,
        provider: AuthProvider,
        reason: UnlinkEventReason,
    ) -> IdentityUnlinkEvent | None:
        """Find the most recent event of a provider and reason on an account.

        Args:
            account_id: Account ID
            provider: Identity provider
            reason: Event reason

        Returns:
            The newest matching event, None if there is none
        """
        pass
