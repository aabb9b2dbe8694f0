"""Identity unlink event repository implementation using PostgreSQL."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cabinet.domain.model import IdentityUnlinkEvent
from cabinet.domain.repository import IdentityUnlinkEventRepository
from cabinet.domain.value import AccountId, AuthProvider, UnlinkEventReason
from cabinet.persistence.mappers import (
    identity_unlink_event_to_dict,
    row_to_identity_unlink_event,
)
from cabinet.persistence.tables import identity_unlink_events_table


class PostgresIdentityUnlinkEventRepository(IdentityUnlinkEventRepository):
    """PostgreSQL implementation of IdentityUnlinkEventRepository.

    The table is append-only.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def save(self, event: IdentityUnlinkEvent) -> IdentityUnlinkEvent:
        """Append an unlink event."""
        await self.session.execute(
            identity_unlink_events_table.insert().values(
                **identity_unlink_event_to_dict(event)
            )
        )
        await self.session.flush()
        return event

    async def find_latest(
        self,
        account_id: AccountId,
        provider: AuthProvider,
        reason: UnlinkEventReason,
    ) -> Optional[IdentityUnlinkEvent]:
        """Find the newest event of a kind for an account and provider."""
        stmt = (
            select(identity_unlink_events_table)
            .where(
                identity_unlink_events_table.c.account_id == account_id,
                identity_unlink_events_table.c.provider == provider.value,
                identity_unlink_events_table.c.reason == reason.value,
            )
            .order_by(identity_unlink_events_table.c.unlinked_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_identity_unlink_event(dict(row)) if row else None
