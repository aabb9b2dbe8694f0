"""Linked identity repository implementation using PostgreSQL."""

from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from cabinet.domain.model import LinkedIdentity
from cabinet.domain.repository import LinkedIdentityRepository
from cabinet.domain.value import AccountId, AuthProvider, LinkedIdentityId
from cabinet.persistence.mappers import linked_identity_to_dict, row_to_linked_identity
from cabinet.persistence.tables import linked_identities_table


class PostgresLinkedIdentityRepository(LinkedIdentityRepository):
    """PostgreSQL implementation of LinkedIdentityRepository.

    The ``(provider, provider_user_id)`` and ``(account_id, provider)`` unique
    constraints guarantee one binding per identity and one identity per
    provider on an account.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_by_account(self, account_id: AccountId) -> list[LinkedIdentity]:
        """List identities of an account, oldest link first."""
        stmt = (
            select(linked_identities_table)
            .where(linked_identities_table.c.account_id == account_id)
            .order_by(linked_identities_table.c.linked_at)
        )
        result = await self.session.execute(stmt)
        return [row_to_linked_identity(dict(row)) for row in result.mappings().all()]

    async def find_by_account_and_provider(
        self, account_id: AccountId, provider: AuthProvider
    ) -> Optional[LinkedIdentity]:
        """Find the identity of one provider on an account."""
        stmt = select(linked_identities_table).where(
            linked_identities_table.c.account_id == account_id,
            linked_identities_table.c.provider == provider.value,
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_linked_identity(dict(row)) if row else None

    async def find_by_provider_user_id(
        self, provider: AuthProvider, provider_user_id: str
    ) -> Optional[LinkedIdentity]:
        """Find the binding of an external identity."""
        stmt = select(linked_identities_table).where(
            linked_identities_table.c.provider == provider.value,
            linked_identities_table.c.provider_user_id == provider_user_id,
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_linked_identity(dict(row)) if row else None

    async def save(self, identity: LinkedIdentity) -> LinkedIdentity:
        """Save identity binding.

        Args:
            identity: Identity to save

        Returns:
            Saved identity
        """
        identity_dict = linked_identity_to_dict(identity)

        existing = await self.session.execute(
            select(linked_identities_table.c.id).where(
                linked_identities_table.c.id == identity.id
            )
        )
        if existing.first():
            stmt = (
                update(linked_identities_table)
                .where(linked_identities_table.c.id == identity.id)
                .values(**identity_dict)
            )
        else:
            stmt = linked_identities_table.insert().values(**identity_dict)
        await self.session.execute(stmt)
        await self.session.flush()
        return identity

    async def delete(self, identity_id: LinkedIdentityId) -> None:
        """Delete an identity binding."""
        stmt = linked_identities_table.delete().where(
            linked_identities_table.c.id == identity_id
        )
        await self.session.execute(stmt)
        await self.session.flush()

    async def reassign_all(
        self,
        source_account_id: AccountId,
        target_account_id: AccountId,
        linked_at: datetime,
    ) -> int:
        """Move every identity of the source account to the target in one UPDATE."""
        stmt = (
            update(linked_identities_table)
            .where(linked_identities_table.c.account_id == source_account_id)
            .values(
                account_id=target_account_id,
                linked_at=linked_at,
                updated_at=linked_at,
            )
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
