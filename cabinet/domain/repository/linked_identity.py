"""Linked identity repository interface (the IdentityStore)."""

from abc import ABC, abstractmethod
from datetime import datetime

from cabinet.domain.model.linked_identity import LinkedIdentity
from cabinet.domain.value import AccountId, AuthProvider, LinkedIdentityId


class LinkedIdentityRepository(ABC):
    """Durable account to identity bindings."""

    @abstractmethod
    async def find_by_account(self, account_id: AccountId) -> list[LinkedIdentity]:
        """Find all identities of an account, oldest link first.

        Args:
            account_id: Account ID

        Returns:
            Identities ordered by ``linked_at``
        """
        pass

    @abstractmethod
    async def find_by_account_and_provider(
        self, account_id: AccountId, provider: AuthProvider
    ) -> LinkedIdentity | None:
        """Find the identity of a provider on an account.

        Args:
            account_id: Account ID
            provider: Identity provider

        Returns:
            The identity if linked, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_provider_user_id(
        self, provider: AuthProvider, provider_user_id: str
    ) -> LinkedIdentity | None:
        """Find the binding of an external identity on any account.

        Args:
            provider: Identity provider
            provider_user_id: Provider-specific user ID

        Returns:
            The identity if bound, None otherwise
        """
        pass

    @abstractmethod
    async def save(self, identity: LinkedIdentity) -> LinkedIdentity:
        """Save an identity (create or update).

        Raises:
            IntegrityError: If the external identity or the (account, provider)
                pair is already bound
        """
        pass

    @abstractmethod
    async def delete(self, identity_id: LinkedIdentityId) -> None:
        """Delete an identity binding."""
        pass

    @abstractmethod
    async def reassign_all(
        self,
        source_account_id: AccountId,
        target_account_id: AccountId,
        linked_at: datetime,
    ) -> int:
        """Move every identity of the source account to the target account.

        Executed as a single statement so a merge never leaves identities
        split between both accounts.

        Args:
            source_account_id: Account being merged away
            target_account_id: Surviving account
            linked_at: New attachment time for the moved identities

        Returns:
            Number of identities moved
        """
        pass
