"""Manual merge ticket repository implementation using PostgreSQL."""

from typing import Optional

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from cabinet.domain.model import ManualMergeTicket
from cabinet.domain.repository import ManualMergeTicketRepository
from cabinet.domain.value import AccountId, ManualMergeDecision, ManualMergeTicketId
from cabinet.persistence.mappers import (
    manual_merge_ticket_to_dict,
    row_to_manual_merge_ticket,
)
from cabinet.persistence.tables import manual_merge_tickets_table

_t = manual_merge_tickets_table


class PostgresManualMergeTicketRepository(ManualMergeTicketRepository):
    """PostgreSQL implementation of ManualMergeTicketRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_by_id(
        self, ticket_id: ManualMergeTicketId
    ) -> Optional[ManualMergeTicket]:
        """Find a ticket by ID, locking it against concurrent resolution."""
        stmt = select(_t).where(_t.c.id == ticket_id).with_for_update()
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_manual_merge_ticket(dict(row)) if row else None

    async def save(self, ticket: ManualMergeTicket) -> ManualMergeTicket:
        """Save a ticket (create or update)."""
        values = manual_merge_ticket_to_dict(ticket)
        existing = await self.session.execute(
            select(_t.c.id).where(_t.c.id == ticket.id)
        )
        if existing.first():
            stmt = update(_t).where(_t.c.id == ticket.id).values(**values)
        else:
            stmt = _t.insert().values(**values)
        await self.session.execute(stmt)
        await self.session.flush()
        return ticket

    async def find_latest_by_requester(
        self, account_id: AccountId
    ) -> Optional[ManualMergeTicket]:
        """Find the newest ticket raised by an account."""
        stmt = (
            select(_t)
            .where(_t.c.requester_account_id == account_id)
            .order_by(_t.c.created_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_manual_merge_ticket(dict(row)) if row else None

    async def find_latest_for_pair(
        self, first_account_id: AccountId, second_account_id: AccountId
    ) -> Optional[ManualMergeTicket]:
        """Find the newest ticket between two accounts in either direction."""
        stmt = (
            select(_t)
            .where(
                or_(
                    and_(
                        _t.c.requester_account_id == first_account_id,
                        _t.c.source_account_id == second_account_id,
                    ),
                    and_(
                        _t.c.requester_account_id == second_account_id,
                        _t.c.source_account_id == first_account_id,
                    ),
                )
            )
            .order_by(_t.c.created_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_manual_merge_ticket(dict(row)) if row else None

    async def find_by_decision(
        self,
        decision: ManualMergeDecision | None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[ManualMergeTicket]:
        """List tickets, newest first."""
        stmt = select(_t).order_by(_t.c.created_at.desc()).limit(limit).offset(offset)
        if decision is not None:
            stmt = stmt.where(_t.c.decision == decision.value)
        result = await self.session.execute(stmt)
        return [row_to_manual_merge_ticket(dict(row)) for row in result.mappings().all()]

    async def count_by_decision(self, decision: ManualMergeDecision | None) -> int:
        """Count tickets with a decision."""
        stmt = select(func.count()).select_from(_t)
        if decision is not None:
            stmt = stmt.where(_t.c.decision == decision.value)
        result = await self.session.execute(stmt)
        return result.scalar_one()
