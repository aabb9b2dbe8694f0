"""In-memory linked identity repository for testing."""

from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError

from cabinet.domain.model import LinkedIdentity
from cabinet.domain.repository import LinkedIdentityRepository
from cabinet.domain.value import AccountId, AuthProvider, LinkedIdentityId

from .store import InMemoryStore


class InMemoryLinkedIdentityRepository(LinkedIdentityRepository):
    """In-memory implementation of LinkedIdentityRepository for testing.

    Enforces the same unique constraints as the database table.
    """

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    @property
    def _identities(self) -> dict[LinkedIdentityId, LinkedIdentity]:
        return self._store.identities

    async def find_by_account(self, account_id: AccountId) -> list[LinkedIdentity]:
        """Find identities of an account, oldest link first."""
        matches = [i for i in self._identities.values() if i.account_id == account_id]
        matches.sort(key=lambda i: i.linked_at)
        return matches

    async def find_by_account_and_provider(
        self, account_id: AccountId, provider: AuthProvider
    ) -> Optional[LinkedIdentity]:
        """Find the identity of one provider on an account."""
        for identity in self._identities.values():
            if identity.account_id == account_id and identity.provider == provider:
                return identity
        return None

    async def find_by_provider_user_id(
        self, provider: AuthProvider, provider_user_id: str
    ) -> Optional[LinkedIdentity]:
        """Find the binding of an external identity."""
        for identity in self._identities.values():
            if (
                identity.provider == provider
                and identity.provider_user_id == provider_user_id
            ):
                return identity
        return None

    async def save(self, identity: LinkedIdentity) -> LinkedIdentity:
        """Save identity, rejecting duplicates like the database would."""
        for existing in self._identities.values():
            if existing.id == identity.id:
                continue
            same_binding = (
                existing.provider == identity.provider
                and existing.provider_user_id == identity.provider_user_id
            )
            same_slot = (
                existing.account_id == identity.account_id
                and existing.provider == identity.provider
            )
            if same_binding or same_slot:
                raise IntegrityError(
                    "INSERT INTO linked_identities", {}, Exception("duplicate identity")
                )
        self._identities[identity.id] = identity
        return identity

    async def delete(self, identity_id: LinkedIdentityId) -> None:
        """Delete identity."""
        self._identities.pop(identity_id, None)

    async def reassign_all(
        self,
        source_account_id: AccountId,
        target_account_id: AccountId,
        linked_at: datetime,
    ) -> int:
        """Move every identity of the source account to the target."""
        moved = 0
        for identity_id, identity in list(self._identities.items()):
            if identity.account_id != source_account_id:
                continue
            self._identities[identity_id] = identity.model_copy(
                update={
                    "account_id": target_account_id,
                    "linked_at": linked_at,
                    "updated_at": linked_at,
                }
            )
            moved += 1
        return moved
