"""Unlink request repository implementation using PostgreSQL."""

from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from cabinet.domain.model import UnlinkRequest
from cabinet.domain.repository import UnlinkRequestRepository
from cabinet.domain.value import AccountId, AuthProvider, UnlinkRequestId
from cabinet.persistence.mappers import row_to_unlink_request, unlink_request_to_dict
from cabinet.persistence.tables import unlink_requests_table


class PostgresUnlinkRequestRepository(UnlinkRequestRepository):
    """PostgreSQL implementation of UnlinkRequestRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_by_token_hash(self, token_hash: str) -> Optional[UnlinkRequest]:
        """Find a request by the hash of its token."""
        stmt = select(unlink_requests_table).where(
            unlink_requests_table.c.token_hash == token_hash
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_unlink_request(dict(row)) if row else None

    async def find_by_account_and_provider(
        self, account_id: AccountId, provider: AuthProvider
    ) -> Optional[UnlinkRequest]:
        """Find the live request for an (account, provider) pair."""
        stmt = select(unlink_requests_table).where(
            unlink_requests_table.c.account_id == account_id,
            unlink_requests_table.c.provider == provider.value,
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_unlink_request(dict(row)) if row else None

    async def save(self, request: UnlinkRequest) -> UnlinkRequest:
        """Save a request (create or update)."""
        values = unlink_request_to_dict(request)
        existing = await self.session.execute(
            select(unlink_requests_table.c.id).where(
                unlink_requests_table.c.id == request.id
            )
        )
        if existing.first():
            stmt = (
                update(unlink_requests_table)
                .where(unlink_requests_table.c.id == request.id)
                .values(**values)
            )
        else:
            stmt = unlink_requests_table.insert().values(**values)
        await self.session.execute(stmt)
        await self.session.flush()
        return request

    async def delete(self, request_id: UnlinkRequestId) -> None:
        """Delete a request."""
        await self.session.execute(
            unlink_requests_table.delete().where(
                unlink_requests_table.c.id == request_id
            )
        )
        await self.session.flush()

    async def delete_for_account_and_provider(
        self, account_id: AccountId, provider: AuthProvider
    ) -> None:
        """Delete any request for an (account, provider) pair."""
        await self.session.execute(
            unlink_requests_table.delete().where(
                unlink_requests_table.c.account_id == account_id,
                unlink_requests_table.c.provider == provider.value,
            )
        )
        await self.session.flush()

    async def decrement_attempts(self, request_id: UnlinkRequestId) -> Optional[int]:
        """Decrement remaining attempts in one UPDATE, never below zero."""
        stmt = (
            update(unlink_requests_table)
            .where(
                unlink_requests_table.c.id == request_id,
                unlink_requests_table.c.attempts_left > 0,
            )
            .values(attempts_left=unlink_requests_table.c.attempts_left - 1)
            .returning(unlink_requests_table.c.attempts_left)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.scalar_one_or_none()

    async def delete_expired(self, now: datetime) -> int:
        """Delete requests whose TTL elapsed."""
        result = await self.session.execute(
            unlink_requests_table.delete().where(
                unlink_requests_table.c.expires_at <= now
            )
        )
        await self.session.flush()
        return result.rowcount
